"""Pending role intent per browser session"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from backend.app.core.logging import get_logger
from backend.app.models.enums import Collection, Role
from backend.app.repositories.document_store import DocumentStore, SERVER_TIMESTAMP

logger = get_logger(__name__)


class IntentStore(ABC):
    """Durable key-value entry holding the pending role of a browser session"""

    @abstractmethod
    async def read(self, session_id: str) -> Optional[Role]:
        ...

    @abstractmethod
    async def write(self, session_id: str, role: Role) -> None:
        ...

    @abstractmethod
    async def erase(self, session_id: str) -> None:
        ...


class DocumentIntentStore(IntentStore):
    """Intent entries kept in the ``intents`` collection, keyed by session id"""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def read(self, session_id: str) -> Optional[Role]:
        snapshot = await self.store.get(Collection.INTENTS.value, session_id)
        if not snapshot.exists:
            return None
        try:
            return Role(snapshot.data.get("role"))
        except ValueError:
            logger.warning(f"Ignoring unknown stored role for session {session_id}")
            return None

    async def write(self, session_id: str, role: Role) -> None:
        await self.store.set(
            Collection.INTENTS.value,
            session_id,
            {"role": role.value, "updatedAt": SERVER_TIMESTAMP}
        )

    async def erase(self, session_id: str) -> None:
        await self.store.delete(Collection.INTENTS.value, session_id)


class MemoryIntentStore(IntentStore):
    """Process-local intent entries"""

    def __init__(self):
        self.entries: Dict[str, Role] = {}

    async def read(self, session_id: str) -> Optional[Role]:
        return self.entries.get(session_id)

    async def write(self, session_id: str, role: Role) -> None:
        self.entries[session_id] = role

    async def erase(self, session_id: str) -> None:
        self.entries.pop(session_id, None)


class RoleSelector:
    """Holds the role a visitor picked before authentication completes"""

    def __init__(self, intents: IntentStore):
        self.intents = intents

    async def set_selected_role(self, session_id: str, role: Role) -> None:
        """Store the role, overwriting any prior value"""
        await self.intents.write(session_id, role)
        logger.info(f"Selected role {role.value}", extra={"session_id": session_id})

    async def clear_role(self, session_id: str) -> None:
        await self.intents.erase(session_id)

    async def selected_role(self, session_id: str) -> Optional[Role]:
        return await self.intents.read(session_id)

    async def consume(self, session_id: str) -> Optional[Role]:
        """Read the pending role and clear it

        The clear happens even when the read fails.
        """
        try:
            return await self.intents.read(session_id)
        finally:
            await self.intents.erase(session_id)
