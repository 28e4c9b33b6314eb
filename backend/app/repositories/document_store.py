"""Document store access layer

Every call is an independent request against the store: there are no
transactions spanning calls, and concurrent writers to the same document
resolve as last write wins.
"""

import copy
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from backend.app.core.database import Base
from backend.app.core.logging import get_logger
from backend.app.models.document import Document

logger = get_logger(__name__)


class _ServerTimestamp:
    """Sentinel replaced with the store's clock when a document is written"""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def resolve_server_timestamps(data: Dict[str, Any], now: Optional[str] = None) -> Dict[str, Any]:
    """Return a copy of data with SERVER_TIMESTAMP sentinels replaced"""
    now = now or utc_now_iso()
    return {
        key: (now if value is SERVER_TIMESTAMP else value)
        for key, value in data.items()
    }


def generate_document_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time read of a single document"""

    collection: str
    id: str
    data: Optional[Dict[str, Any]] = field(default=None)

    @property
    def exists(self) -> bool:
        return self.data is not None

    def to_dict(self) -> Dict[str, Any]:
        """Document fields with the document id under ``id``"""
        if self.data is None:
            return {}
        return {"id": self.id, **self.data}


class DocumentStore(ABC):
    """Collection-oriented document persistence"""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        """Read one document; the snapshot reports whether it exists"""

    @abstractmethod
    async def get_all(self, collection: str) -> List[DocumentSnapshot]:
        """Read every document of a collection"""

    @abstractmethod
    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Write a new document under a generated id and return the id"""

    @abstractmethod
    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False
    ) -> None:
        """Write a document under a known id

        With ``merge`` the given fields are merged into the stored document,
        otherwise the stored document is replaced.
        """

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document; deleting a missing document is a no-op"""

    async def close(self) -> None:
        """Release any held resources"""


class SQLAlchemyDocumentStore(DocumentStore):
    """Document store backed by a single SQL table of JSON documents"""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None
    ):
        self.session_factory = session_factory
        self.engine = engine

    async def create_schema(self) -> None:
        """Create the documents table if it does not exist"""
        if self.engine is None:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Document store schema ready")

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        async with self.session_factory() as session:
            document = await session.get(Document, (collection, doc_id))
            if document is None:
                return DocumentSnapshot(collection, doc_id)
            return DocumentSnapshot(collection, doc_id, dict(document.data or {}))

    async def get_all(self, collection: str) -> List[DocumentSnapshot]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.created_at, Document.id)
            )
            return [
                DocumentSnapshot(collection, document.id, dict(document.data or {}))
                for document in result.scalars().all()
            ]

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = generate_document_id()
        async with self.session_factory() as session:
            session.add(Document(
                collection=collection,
                id=doc_id,
                data=resolve_server_timestamps(data)
            ))
            await session.commit()

        logger.info(f"Added document {collection}/{doc_id}", extra={"collection": collection})
        return doc_id

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False
    ) -> None:
        resolved = resolve_server_timestamps(data)
        async with self.session_factory() as session:
            document = await session.get(Document, (collection, doc_id))
            if document is None:
                session.add(Document(collection=collection, id=doc_id, data=resolved))
            elif merge:
                # Assign a new dict so the JSON column is flagged dirty
                document.data = {**(document.data or {}), **resolved}
            else:
                document.data = resolved
            await session.commit()

        logger.info(
            f"Set document {collection}/{doc_id} (merge={merge})",
            extra={"collection": collection}
        )

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self.session_factory() as session:
            document = await session.get(Document, (collection, doc_id))
            if document is not None:
                await session.delete(document)
                await session.commit()

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store, used for development and tests"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        data = self._collection(collection).get(doc_id)
        return DocumentSnapshot(collection, doc_id, copy.deepcopy(data))

    async def get_all(self, collection: str) -> List[DocumentSnapshot]:
        return [
            DocumentSnapshot(collection, doc_id, copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
        ]

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = generate_document_id()
        self._collection(collection)[doc_id] = copy.deepcopy(resolve_server_timestamps(data))
        return doc_id

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Dict[str, Any],
        merge: bool = False
    ) -> None:
        resolved = copy.deepcopy(resolve_server_timestamps(data))
        documents = self._collection(collection)
        if merge and doc_id in documents:
            documents[doc_id] = {**documents[doc_id], **resolved}
        else:
            documents[doc_id] = resolved

    async def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).pop(doc_id, None)
