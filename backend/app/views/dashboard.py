"""Per-role dashboard view models

A view is mounted with the navigation state it was reached with, loads the
profile and listings concurrently, keeps local tab/filter state that is never
persisted, and runs the profile edit flow. Every failure is surfaced as a
notification; nothing is raised to the caller.
"""

import asyncio
from typing import Any, Dict, List, Optional, Set

from backend.app.core.exceptions import MISSING_UID_MESSAGE
from backend.app.core.logging import get_logger
from backend.app.schemas.dashboard import (
    DeveloperDashboardSnapshot,
    Notification,
    RecruiterDashboardSnapshot,
)
from backend.app.schemas.listing import Application, Idea, JobPosting
from backend.app.schemas.profile import (
    DeveloperProfile,
    DeveloperProfileUpdate,
    DocumentModel,
    RecruiterProfile,
    RecruiterProfileUpdate,
)
from backend.app.schemas.result import OperationResult
from backend.app.services.listing_service import ListingService
from backend.app.services.profile_service import ProfileService

logger = get_logger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load dashboard data. Please try again."
UPDATE_FAILED_MESSAGE = "Failed to update profile. Please try again."
UPDATE_SUCCEEDED_MESSAGE = "Profile updated successfully!"
PROFILE_NOT_LOADED_MESSAGE = "Profile is not loaded yet."

DEVELOPER_TABS = ("all", "saved", "applied")
RECRUITER_TABS = ("pending", "reviewing", "accepted", "rejected")


class MountToken:
    """Cancellation token owned by one mount of a view"""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class Notifier:
    """Collects transient notifications for the client to display"""

    def __init__(self):
        self.notifications: List[Notification] = []

    def toast(self, title: str, description: str, variant: str = "default") -> None:
        self.notifications.append(Notification(title=title, description=description, variant=variant))

    def error(self, description: str) -> None:
        self.toast("Error", description, "destructive")

    def success(self, description: str) -> None:
        self.toast("Success", description)


class DashboardView:
    """Shared mount, cancellation and edit-flow behaviour"""

    update_model = DocumentModel

    def __init__(
        self,
        profiles: ProfileService,
        listings: ListingService,
        notifier: Optional[Notifier] = None
    ):
        self.profiles = profiles
        self.listings = listings
        self.notifier = notifier or Notifier()
        self.loading = True
        self.uid: Optional[str] = None
        self.profile: Optional[DocumentModel] = None
        self.draft: Optional[DocumentModel] = None
        self._token: Optional[MountToken] = None

    async def mount(self, navigation_state: Optional[Dict[str, Any]]) -> None:
        """Load everything the view shows for the uid in the navigation state"""
        if self._token is not None:
            self._token.cancel()
        token = self._token = MountToken()

        uid = (navigation_state or {}).get("uid")
        if not uid:
            logger.warning("Dashboard mounted without a user id")
            self.notifier.error(MISSING_UID_MESSAGE)
            return

        self.uid = uid
        try:
            loaded = await self._load(uid)
        except Exception as e:
            if token.cancelled:
                return
            logger.error(f"Error fetching dashboard data: {str(e)}", extra={"uid": uid})
            self.notifier.error(LOAD_FAILED_MESSAGE)
            self.loading = False
            return

        if token.cancelled:
            logger.info("Discarding dashboard data for an unmounted view", extra={"uid": uid})
            return

        self._apply(loaded)
        self.loading = False

    def unmount(self) -> None:
        if self._token is not None:
            self._token.cancel()

    @property
    def editing(self) -> bool:
        return self.draft is not None

    def open_edit(self) -> None:
        """Start editing a copy of the displayed profile"""
        if self.profile is None:
            self.notifier.error(PROFILE_NOT_LOADED_MESSAGE)
            return
        self.draft = self.profile.model_copy(deep=True)

    def update_draft(self, **fields: Any) -> None:
        if self.draft is None:
            self.open_edit()
        if self.draft is not None:
            self.draft = self.draft.model_copy(update=fields)

    def cancel_edit(self) -> None:
        self.draft = None

    async def confirm_edit(self) -> bool:
        """
        Save the draft with a single update call

        Returns:
            True if the displayed profile now shows the draft
        """
        if self.draft is None or self.uid is None:
            return False

        draft = self.draft
        token = self._token
        changes = self.update_model.model_validate(
            draft.model_dump(include=set(self.update_model.model_fields))
        )

        try:
            result = await self._save(self.uid, changes)
        except Exception as e:
            result = OperationResult.fail(str(e))

        if token is not None and token.cancelled:
            return False

        if not result.success:
            logger.error(f"Profile update failed: {result.error}", extra={"uid": self.uid})
            self.notifier.error(UPDATE_FAILED_MESSAGE)
            return False

        self.profile = draft
        self.draft = None
        self.notifier.success(UPDATE_SUCCEEDED_MESSAGE)
        return True

    async def _load(self, uid: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _apply(self, loaded: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def _save(self, uid: str, changes: DocumentModel) -> OperationResult:
        raise NotImplementedError


class DeveloperDashboardView(DashboardView):
    """Candidate dashboard: profile, job feed, ideas and own applications"""

    update_model = DeveloperProfileUpdate

    def __init__(self, profiles: ProfileService, listings: ListingService, notifier: Optional[Notifier] = None):
        super().__init__(profiles, listings, notifier)
        self.jobs: List[JobPosting] = []
        self.ideas: List[Idea] = []
        self.applications: List[Application] = []
        self.active_tab = "all"
        self.saved_jobs: Set[str] = set()

    async def _load(self, uid: str) -> Dict[str, Any]:
        profile, jobs, ideas, applications = await asyncio.gather(
            self.profiles.get_developer_profile(uid),
            self.listings.list_jobs(),
            self.listings.get_active_jobs(),
            self.listings.list_applications_for_developer(uid),
        )
        return {"profile": profile, "jobs": jobs, "ideas": ideas, "applications": applications}

    def _apply(self, loaded: Dict[str, Any]) -> None:
        self.profile = loaded["profile"]
        self.jobs = loaded["jobs"]
        self.ideas = loaded["ideas"]
        self.applications = loaded["applications"]

    async def _save(self, uid: str, changes: DeveloperProfileUpdate) -> OperationResult:
        return await self.profiles.update_developer_profile(uid, changes)

    def set_tab(self, tab: str) -> None:
        if tab not in DEVELOPER_TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.active_tab = tab

    def toggle_saved(self, job_id: str) -> None:
        if job_id in self.saved_jobs:
            self.saved_jobs.remove(job_id)
        else:
            self.saved_jobs.add(job_id)

    @property
    def visible_jobs(self) -> List[JobPosting]:
        if self.active_tab == "saved":
            return [job for job in self.jobs if job.id in self.saved_jobs]
        if self.active_tab == "applied":
            applied = {application.idea_id for application in self.applications}
            return [job for job in self.jobs if job.id in applied]
        return list(self.jobs)

    def snapshot(self) -> DeveloperDashboardSnapshot:
        return DeveloperDashboardSnapshot(
            loading=self.loading,
            uid=self.uid,
            profile=self.profile,
            jobs=self.jobs,
            ideas=self.ideas,
            applications=self.applications,
            active_tab=self.active_tab,
            saved_jobs=sorted(self.saved_jobs),
            visible_jobs=self.visible_jobs,
            editing=self.editing,
            notifications=self.notifier.notifications,
        )


class RecruiterDashboardView(DashboardView):
    """Recruiter dashboard: profile, own ideas and incoming applications"""

    update_model = RecruiterProfileUpdate

    def __init__(self, profiles: ProfileService, listings: ListingService, notifier: Optional[Notifier] = None):
        super().__init__(profiles, listings, notifier)
        self.ideas: List[Idea] = []
        self.candidates: List[Application] = []
        self.active_tab = "pending"

    async def _load(self, uid: str) -> Dict[str, Any]:
        profile, ideas, candidates = await asyncio.gather(
            self.profiles.get_recruiter_profile(uid),
            self.listings.list_ideas_by_recruiter(uid),
            self.listings.list_applications_for_recruiter(uid),
        )
        return {"profile": profile, "ideas": ideas, "candidates": candidates}

    def _apply(self, loaded: Dict[str, Any]) -> None:
        self.profile = loaded["profile"]
        self.ideas = loaded["ideas"]
        self.candidates = loaded["candidates"]

    async def _save(self, uid: str, changes: RecruiterProfileUpdate) -> OperationResult:
        return await self.profiles.update_recruiter_profile(uid, changes)

    def set_tab(self, tab: str) -> None:
        if tab not in RECRUITER_TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.active_tab = tab

    @property
    def visible_candidates(self) -> List[Application]:
        return [candidate for candidate in self.candidates if candidate.status == self.active_tab]

    def snapshot(self) -> RecruiterDashboardSnapshot:
        return RecruiterDashboardSnapshot(
            loading=self.loading,
            uid=self.uid,
            profile=self.profile,
            ideas=self.ideas,
            candidates=self.candidates,
            active_tab=self.active_tab,
            visible_candidates=self.visible_candidates,
            editing=self.editing,
            notifications=self.notifier.notifications,
        )
