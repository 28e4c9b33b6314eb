"""Listing gateway: ideas, job postings and applications"""

from typing import Any, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from backend.app.core.exceptions import (
    ExternalServiceException,
    FounderBridgeException,
    NotRegisteredException,
)
from backend.app.core.logging import get_logger
from backend.app.models.enums import ApplicationStatus, Collection, ListingStatus
from backend.app.repositories.document_store import (
    DocumentStore,
    SERVER_TIMESTAMP,
    utc_now_iso,
)
from backend.app.schemas.listing import (
    Application,
    ApplicationCreate,
    Idea,
    IdeaCreate,
    JobPosting,
)
from backend.app.schemas.result import OperationResult

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_documents(
    model: Type[ModelT],
    documents: Iterable[Dict[str, Any]],
    collection: str
) -> List[ModelT]:
    """Validate stored documents, skipping the ones that do not fit the model"""
    parsed = []
    for document in documents:
        try:
            parsed.append(model.model_validate(document))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed document {document.get('id')}: {e.error_count()} invalid field(s)",
                extra={"collection": collection}
            )
    return parsed


class ListingService:
    """Create/read/update calls against ``ideas``, ``jobs`` and ``applications``

    Write operations return an ``OperationResult`` and never raise. Read
    operations raise ``ExternalServiceException`` when the store fails.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_job_listing(self, data: IdeaCreate) -> OperationResult:
        """
        Post an idea on behalf of a registered recruiter

        The recruiter check and the write are two independent store calls.

        Args:
            data: Idea fields including ``recruiter_id``

        Returns:
            Result carrying the new idea id, or the failure message
        """
        logger.info(f"Creating idea for recruiter {data.recruiter_id}")
        try:
            recruiter = await self.store.get(Collection.RECRUITERS.value, data.recruiter_id)
            if not recruiter.exists:
                logger.error(f"Recruiter document not found: {data.recruiter_id}")
                raise NotRegisteredException()

            document = {
                **data.to_document(),
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
                "status": ListingStatus.ACTIVE.value,
            }
            idea_id = await self.store.add(Collection.IDEAS.value, document)
        except FounderBridgeException as e:
            return OperationResult.fail(e.message)
        except Exception as e:
            logger.error(f"Error creating idea: {str(e)}", exc_info=True)
            return OperationResult.fail(str(e) or "Failed to create idea")

        logger.info(f"Idea created with ID: {idea_id}")
        return OperationResult.ok(idea_id)

    async def get_active_jobs(self) -> List[Idea]:
        """
        Every idea whose status is exactly ``active``

        Reads the whole ``ideas`` collection and filters in process. Missing
        timestamps are filled from the other timestamp or the current time.

        Raises:
            ExternalServiceException: If the store read fails
        """
        try:
            snapshots = await self.store.get_all(Collection.IDEAS.value)
        except Exception as e:
            logger.error(f"Error fetching ideas: {str(e)}", exc_info=True)
            raise ExternalServiceException("document store", str(e)) from e

        # Full-collection scan; no pagination or server-side filtering
        logger.info(f"Scanned {len(snapshots)} ideas", extra={"collection": Collection.IDEAS.value})

        now = utc_now_iso()
        documents = []
        for snapshot in snapshots:
            data = snapshot.to_dict()
            if data.get("status") != ListingStatus.ACTIVE.value:
                continue
            data["createdAt"] = data.get("createdAt") or data.get("updatedAt") or now
            data["updatedAt"] = data.get("updatedAt") or now
            documents.append(data)

        active = _parse_documents(Idea, documents, Collection.IDEAS.value)
        logger.info(f"Filtered active ideas: {len(active)}")
        return active

    async def list_ideas_by_recruiter(self, recruiter_id: str) -> List[Idea]:
        """All ideas posted by a recruiter, whatever their status"""
        try:
            snapshots = await self.store.get_all(Collection.IDEAS.value)
        except Exception as e:
            raise ExternalServiceException("document store", str(e)) from e

        return _parse_documents(
            Idea,
            (
                snapshot.to_dict() for snapshot in snapshots
                if snapshot.data.get("recruiterId") == recruiter_id
            ),
            Collection.IDEAS.value
        )

    async def list_jobs(self) -> List[JobPosting]:
        """Every document of the ``jobs`` collection"""
        try:
            snapshots = await self.store.get_all(Collection.JOBS.value)
        except Exception as e:
            logger.error(f"Error fetching jobs: {str(e)}", exc_info=True)
            raise ExternalServiceException("document store", str(e)) from e

        return _parse_documents(
            JobPosting,
            (snapshot.to_dict() for snapshot in snapshots),
            Collection.JOBS.value
        )

    async def set_listing_status(
        self,
        listing_id: str,
        recruiter_id: str,
        status: ListingStatus
    ) -> OperationResult:
        """Open or close an idea; only its recruiter may do so"""
        try:
            snapshot = await self.store.get(Collection.IDEAS.value, listing_id)
            if not snapshot.exists:
                return OperationResult.fail("Idea not found")
            if snapshot.data.get("recruiterId") != recruiter_id:
                logger.warning(f"Recruiter {recruiter_id} attempted to update idea {listing_id}")
                return OperationResult.fail("You can only update ideas you created")

            await self.store.set(
                Collection.IDEAS.value,
                listing_id,
                {"status": status.value, "updatedAt": SERVER_TIMESTAMP},
                merge=True
            )
        except Exception as e:
            logger.error(f"Error updating idea status: {str(e)}", exc_info=True)
            return OperationResult.fail(str(e) or "Failed to update idea")

        logger.info(f"Idea {listing_id} status set to {status.value}")
        return OperationResult.ok(listing_id)

    async def submit_application(self, data: ApplicationCreate) -> OperationResult:
        """Record a developer's application with ``pending`` status"""
        logger.info(f"Submitting application to idea {data.idea_id}")
        try:
            document = {
                **data.to_document(),
                "status": ApplicationStatus.PENDING.value,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            }
            application_id = await self.store.add(Collection.APPLICATIONS.value, document)
        except Exception as e:
            logger.error(f"Error submitting application: {str(e)}", exc_info=True)
            return OperationResult.fail(str(e) or "Failed to submit application")

        logger.info(f"Application submitted successfully: {application_id}")
        return OperationResult.ok(application_id)

    async def list_applications_for_developer(self, developer_id: str) -> List[Application]:
        try:
            snapshots = await self.store.get_all(Collection.APPLICATIONS.value)
        except Exception as e:
            raise ExternalServiceException("document store", str(e)) from e

        return _parse_documents(
            Application,
            (
                snapshot.to_dict() for snapshot in snapshots
                if snapshot.data.get("developerId") == developer_id
            ),
            Collection.APPLICATIONS.value
        )

    async def list_applications_for_recruiter(self, recruiter_id: str) -> List[Application]:
        """Applications to any idea the recruiter posted"""
        ideas = await self.list_ideas_by_recruiter(recruiter_id)
        idea_ids = {idea.id for idea in ideas}
        if not idea_ids:
            return []

        try:
            snapshots = await self.store.get_all(Collection.APPLICATIONS.value)
        except Exception as e:
            raise ExternalServiceException("document store", str(e)) from e

        return _parse_documents(
            Application,
            (
                snapshot.to_dict() for snapshot in snapshots
                if snapshot.data.get("ideaId") in idea_ids
            ),
            Collection.APPLICATIONS.value
        )
