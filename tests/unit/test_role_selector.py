"""Unit tests for the pending role intent"""

import pytest
from unittest.mock import AsyncMock

from backend.app.models.enums import Collection, Role
from backend.app.repositories.document_store import InMemoryDocumentStore
from backend.app.services.role_selector import (
    DocumentIntentStore,
    MemoryIntentStore,
    RoleSelector,
)


class TestRoleSelector:
    """Test cases for RoleSelector"""

    @pytest.fixture
    def store(self):
        return InMemoryDocumentStore()

    @pytest.fixture
    def selector(self, store):
        return RoleSelector(DocumentIntentStore(store))

    @pytest.mark.asyncio
    async def test_set_overwrites_prior_value(self, selector):
        await selector.set_selected_role("session-1", Role.CANDIDATE)
        await selector.set_selected_role("session-1", Role.RECRUITER)

        assert await selector.selected_role("session-1") == Role.RECRUITER

    @pytest.mark.asyncio
    async def test_clear_role(self, selector):
        await selector.set_selected_role("session-1", Role.CANDIDATE)
        await selector.clear_role("session-1")

        assert await selector.selected_role("session-1") is None

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, selector):
        await selector.set_selected_role("session-1", Role.CANDIDATE)
        await selector.set_selected_role("session-2", Role.RECRUITER)

        assert await selector.selected_role("session-1") == Role.CANDIDATE
        assert await selector.selected_role("session-2") == Role.RECRUITER

    @pytest.mark.asyncio
    async def test_role_survives_a_new_selector(self, store, selector):
        """A reload builds new objects over the same store"""
        await selector.set_selected_role("session-1", Role.RECRUITER)

        reloaded = RoleSelector(DocumentIntentStore(store))
        assert await reloaded.selected_role("session-1") == Role.RECRUITER

    @pytest.mark.asyncio
    async def test_consume_reads_then_clears(self, selector):
        await selector.set_selected_role("session-1", Role.CANDIDATE)

        assert await selector.consume("session-1") == Role.CANDIDATE
        assert await selector.consume("session-1") is None

    @pytest.mark.asyncio
    async def test_consume_clears_even_if_read_fails(self):
        intents = MemoryIntentStore()
        intents.entries["session-1"] = Role.CANDIDATE
        intents.read = AsyncMock(side_effect=RuntimeError("store down"))
        selector = RoleSelector(intents)

        with pytest.raises(RuntimeError):
            await selector.consume("session-1")

        assert "session-1" not in intents.entries

    @pytest.mark.asyncio
    async def test_unknown_stored_role_is_ignored(self, store, selector):
        await store.set(Collection.INTENTS.value, "session-1", {"role": "admin"})

        assert await selector.selected_role("session-1") is None
