"""Profile gateway for ``developers`` and ``recruiters``"""

from typing import Optional, Type, TypeVar

from pydantic import ValidationError

from backend.app.core.exceptions import ExternalServiceException, ValidationException
from backend.app.core.logging import get_logger
from backend.app.models.enums import Collection
from backend.app.repositories.document_store import DocumentStore, SERVER_TIMESTAMP
from backend.app.schemas.profile import (
    DeveloperProfile,
    DeveloperProfileUpdate,
    DocumentModel,
    RecruiterProfile,
    RecruiterProfileUpdate,
)
from backend.app.schemas.result import OperationResult

logger = get_logger(__name__)

ProfileT = TypeVar("ProfileT", bound=DocumentModel)


class ProfileService:
    """Signup, read and merge-update of per-user profile documents

    Profiles are keyed by the authenticated uid. Updates merge the given
    fields into the stored document with no concurrency check.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def _create(self, collection: Collection, uid: str, profile: DocumentModel) -> OperationResult:
        try:
            if not uid:
                raise ValidationException("User ID is required")
            document = {
                **profile.to_document(),
                "uid": uid,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            }
            await self.store.set(collection.value, uid, document)
        except ValidationException as e:
            return OperationResult.fail(e.message)
        except Exception as e:
            logger.error(f"Error creating {collection.value} profile: {str(e)}", exc_info=True)
            return OperationResult.fail(str(e) or "Failed to create profile")

        logger.info(f"Created {collection.value} profile", extra={"uid": uid})
        return OperationResult.ok(uid)

    async def _get(self, collection: Collection, uid: str, model: Type[ProfileT]) -> Optional[ProfileT]:
        try:
            snapshot = await self.store.get(collection.value, uid)
        except Exception as e:
            logger.error(f"Error fetching {collection.value} profile: {str(e)}", exc_info=True)
            raise ExternalServiceException("document store", str(e)) from e

        if not snapshot.exists:
            return None
        try:
            return model.model_validate(snapshot.data)
        except ValidationError as e:
            logger.error(
                f"Malformed {collection.value} profile: {e.error_count()} invalid field(s)",
                extra={"uid": uid, "collection": collection.value}
            )
            raise ExternalServiceException("document store", "Stored profile is malformed") from e

    async def _update(self, collection: Collection, uid: str, changes: DocumentModel) -> OperationResult:
        fields = changes.to_document(exclude_unset=True)
        try:
            await self.store.set(
                collection.value,
                uid,
                {**fields, "updatedAt": SERVER_TIMESTAMP},
                merge=True
            )
        except Exception as e:
            logger.error(f"Error updating {collection.value} profile: {str(e)}", exc_info=True)
            return OperationResult.fail(str(e) or "Failed to update profile")

        logger.info(f"Updated {collection.value} profile fields {sorted(fields)}", extra={"uid": uid})
        return OperationResult.ok(uid)

    async def create_developer_profile(self, uid: str, profile: DeveloperProfile) -> OperationResult:
        return await self._create(Collection.DEVELOPERS, uid, profile)

    async def create_recruiter_profile(self, uid: str, profile: RecruiterProfile) -> OperationResult:
        return await self._create(Collection.RECRUITERS, uid, profile)

    async def get_developer_profile(self, uid: str) -> Optional[DeveloperProfile]:
        return await self._get(Collection.DEVELOPERS, uid, DeveloperProfile)

    async def get_recruiter_profile(self, uid: str) -> Optional[RecruiterProfile]:
        return await self._get(Collection.RECRUITERS, uid, RecruiterProfile)

    async def update_developer_profile(self, uid: str, changes: DeveloperProfileUpdate) -> OperationResult:
        return await self._update(Collection.DEVELOPERS, uid, changes)

    async def update_recruiter_profile(self, uid: str, changes: RecruiterProfileUpdate) -> OperationResult:
        return await self._update(Collection.RECRUITERS, uid, changes)
