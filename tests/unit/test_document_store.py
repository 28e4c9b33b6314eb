"""Unit tests for the document store implementations"""

import pytest

from backend.app.core.database import create_engine, create_session_factory
from backend.app.repositories.document_store import (
    SERVER_TIMESTAMP,
    DocumentSnapshot,
    InMemoryDocumentStore,
    SQLAlchemyDocumentStore,
    resolve_server_timestamps,
)


@pytest.fixture(params=["memory", "sqlite"])
async def document_store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryDocumentStore()
        return

    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    sql_store = SQLAlchemyDocumentStore(create_session_factory(engine), engine)
    await sql_store.create_schema()
    yield sql_store
    await sql_store.close()


class TestDocumentStore:
    """Behaviour shared by every document store"""

    @pytest.mark.asyncio
    async def test_missing_document(self, document_store):
        snapshot = await document_store.get("developers", "nobody")

        assert snapshot.exists is False
        assert snapshot.to_dict() == {}

    @pytest.mark.asyncio
    async def test_add_generates_id(self, document_store):
        first = await document_store.add("ideas", {"status": "active"})
        second = await document_store.add("ideas", {"status": "active"})

        assert first != second
        assert len(await document_store.get_all("ideas")) == 2

    @pytest.mark.asyncio
    async def test_set_replaces_without_merge(self, document_store):
        await document_store.set("developers", "u1", {"firstName": "Ada", "bio": "x"})
        await document_store.set("developers", "u1", {"firstName": "Grace"})

        snapshot = await document_store.get("developers", "u1")
        assert snapshot.data == {"firstName": "Grace"}

    @pytest.mark.asyncio
    async def test_set_merge_keeps_other_fields(self, document_store):
        await document_store.set("developers", "u1", {"firstName": "Ada", "bio": "x"})
        await document_store.set("developers", "u1", {"bio": "y"}, merge=True)

        snapshot = await document_store.get("developers", "u1")
        assert snapshot.data == {"firstName": "Ada", "bio": "y"}

    @pytest.mark.asyncio
    async def test_merge_into_missing_document_creates_it(self, document_store):
        await document_store.set("users", "u1", {"email": "a@example.com"}, merge=True)

        assert (await document_store.get("users", "u1")).data == {"email": "a@example.com"}

    @pytest.mark.asyncio
    async def test_server_timestamp_is_resolved(self, document_store):
        doc_id = await document_store.add("ideas", {"createdAt": SERVER_TIMESTAMP})

        snapshot = await document_store.get("ideas", doc_id)
        assert isinstance(snapshot.data["createdAt"], str)

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, document_store):
        await document_store.set("intents", "s1", {"role": "candidate"})

        await document_store.delete("intents", "s1")
        await document_store.delete("intents", "s1")

        assert not (await document_store.get("intents", "s1")).exists

    @pytest.mark.asyncio
    async def test_collections_are_separate(self, document_store):
        await document_store.set("developers", "u1", {"role": "dev"})
        await document_store.set("recruiters", "u1", {"role": "rec"})

        assert [s.data for s in await document_store.get_all("developers")] == [{"role": "dev"}]

    @pytest.mark.asyncio
    async def test_snapshots_are_copies(self, document_store):
        await document_store.set("developers", "u1", {"skills": ["python"]})

        snapshot = await document_store.get("developers", "u1")
        snapshot.data["skills"].append("go")

        assert (await document_store.get("developers", "u1")).data == {"skills": ["python"]}


class TestHelpers:

    def test_resolve_server_timestamps(self):
        resolved = resolve_server_timestamps({"a": SERVER_TIMESTAMP, "b": 1}, now="2024-01-01T00:00:00+00:00")

        assert resolved == {"a": "2024-01-01T00:00:00+00:00", "b": 1}

    def test_snapshot_to_dict_includes_id(self):
        assert DocumentSnapshot("ideas", "i1", {"status": "active"}).to_dict() == {"id": "i1", "status": "active"}
