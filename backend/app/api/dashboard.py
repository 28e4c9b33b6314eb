"""Dashboard API endpoints

The dashboards read the user id from the navigation state set by sign-in or
signup, never from the URL. Opening a dashboard without that state yields a
snapshot carrying an error notification.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from backend.app.core.config import settings
from backend.app.core.container import Container
from backend.app.core.exceptions import AuthorizationException, MissingContextException
from backend.app.core.logging import get_logger
from backend.app.core.security import get_container, get_current_user
from backend.app.schemas.auth import AuthenticatedUser
from backend.app.schemas.dashboard import DeveloperDashboardSnapshot, RecruiterDashboardSnapshot
from backend.app.schemas.profile import DeveloperProfileUpdate, RecruiterProfileUpdate
from backend.app.views.dashboard import DashboardView, DeveloperDashboardView, RecruiterDashboardView

logger = get_logger(__name__)

router = APIRouter()


def get_navigation_state(
    request: Request,
    container: Container = Depends(get_container)
) -> Optional[Dict[str, Any]]:
    """Transient navigation state carried by the navigation cookie"""
    navigation = container.tokens.read_navigation_token(
        request.cookies.get(settings.NAVIGATION_COOKIE_NAME)
    )
    return navigation.state if navigation else None


def _require_owner(navigation_state: Optional[Dict[str, Any]], user: AuthenticatedUser) -> None:
    uid = (navigation_state or {}).get("uid")
    if not uid:
        raise MissingContextException()
    if uid != user.uid:
        logger.warning(f"User {user.uid} attempted to edit profile {uid}")
        raise AuthorizationException("You can only edit your own profile")


async def _run_edit(view: DashboardView, navigation_state, changes) -> None:
    await view.mount(navigation_state)
    try:
        # Reports a missing profile through the view's notifier
        view.open_edit()
        if not view.editing:
            return
        view.update_draft(**changes.model_dump(exclude_unset=True))
        await view.confirm_edit()
    finally:
        view.unmount()


@router.get("/developer", response_model=DeveloperDashboardSnapshot)
async def developer_dashboard(
    navigation_state: Optional[Dict[str, Any]] = Depends(get_navigation_state),
    container: Container = Depends(get_container)
):
    """Profile, job feed, active ideas and applications of the developer"""
    view = DeveloperDashboardView(container.profiles, container.listings)
    await view.mount(navigation_state)
    snapshot = view.snapshot()
    view.unmount()
    return snapshot


@router.patch("/developer/profile", response_model=DeveloperDashboardSnapshot)
async def edit_developer_profile(
    changes: DeveloperProfileUpdate,
    navigation_state: Optional[Dict[str, Any]] = Depends(get_navigation_state),
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """
    Save the developer profile edit form

    On failure the snapshot keeps the previous profile and carries one error
    notification.
    """
    _require_owner(navigation_state, current_user)
    view = DeveloperDashboardView(container.profiles, container.listings)
    await _run_edit(view, navigation_state, changes)
    return view.snapshot()


@router.get("/recruiter", response_model=RecruiterDashboardSnapshot)
async def recruiter_dashboard(
    navigation_state: Optional[Dict[str, Any]] = Depends(get_navigation_state),
    container: Container = Depends(get_container)
):
    """Profile, ideas and incoming applications of the recruiter"""
    view = RecruiterDashboardView(container.profiles, container.listings)
    await view.mount(navigation_state)
    snapshot = view.snapshot()
    view.unmount()
    return snapshot


@router.patch("/recruiter/profile", response_model=RecruiterDashboardSnapshot)
async def edit_recruiter_profile(
    changes: RecruiterProfileUpdate,
    navigation_state: Optional[Dict[str, Any]] = Depends(get_navigation_state),
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """Save the recruiter profile edit form"""
    _require_owner(navigation_state, current_user)
    view = RecruiterDashboardView(container.profiles, container.listings)
    await _run_edit(view, navigation_state, changes)
    return view.snapshot()
