"""Unit tests for role-based redirection after sign-in"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from backend.app.core.config import settings
from backend.app.core.exceptions import (
    AccountExistsWithDifferentCredentialException,
    AuthenticationException,
    GENERIC_SIGN_IN_MESSAGE,
)
from backend.app.models.enums import Role, SessionStatus
from backend.app.schemas.auth import AuthenticatedUser
from backend.app.services.identity_gateway import AuthStateChange, AuthStateStream
from backend.app.services.role_selector import MemoryIntentStore, RoleSelector
from backend.app.services.session_observer import (
    HOME_ROUTE,
    ROLE_ROUTES,
    SIGN_IN_ROUTE,
    Navigator,
    SessionObserver,
)


ALICE = AuthenticatedUser(uid="1001", email="alice@example.com", username="alice")
BOB = AuthenticatedUser(uid="2002", email="bob@example.com", username="bob")


@pytest.fixture
def intents():
    return MemoryIntentStore()


@pytest.fixture
def selector(intents):
    return RoleSelector(intents)


@pytest.fixture
def navigator():
    return Navigator()


@pytest.fixture
def observer(selector, navigator):
    return SessionObserver(selector, navigator)


class TestRoleRedirect:
    """Consuming the pending role on sign-in"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", list(Role))
    async def test_role_is_cleared_and_route_matches(self, observer, selector, navigator, role):
        await selector.set_selected_role("s1", role)

        await observer.handle(AuthStateChange("s1", ALICE, "popup"))

        navigation = navigator.take("s1")
        assert navigation.path == ROLE_ROUTES[role]
        assert navigation.state == {"uid": ALICE.uid}
        assert await selector.selected_role("s1") is None

    @pytest.mark.asyncio
    async def test_mapping(self):
        assert ROLE_ROUTES[Role.CANDIDATE] == "/dashboard/developer"
        assert ROLE_ROUTES[Role.RECRUITER] == "/dashboard/recruiter"

    @pytest.mark.asyncio
    async def test_redirect_variant_replaces_history(self, observer, selector, navigator):
        await selector.set_selected_role("s1", Role.RECRUITER)

        await observer.handle(AuthStateChange("s1", ALICE, "redirect"))

        assert navigator.take("s1").replace is True

    @pytest.mark.asyncio
    async def test_no_role_on_redirect_goes_home(self, observer, navigator):
        await observer.handle(AuthStateChange("s1", ALICE, "redirect"))

        navigation = navigator.take("s1")
        assert navigation.path == HOME_ROUTE
        assert navigation.state == {}

    @pytest.mark.asyncio
    async def test_no_role_on_popup_stays_put(self, observer, navigator):
        await observer.handle(AuthStateChange("s1", ALICE, "popup"))

        assert navigator.take("s1") is None

    @pytest.mark.asyncio
    async def test_role_is_cleared_when_navigation_fails(self, selector):
        navigator = MagicMock()
        navigator.navigate.side_effect = RuntimeError("router unavailable")
        observer = SessionObserver(selector, navigator)
        await selector.set_selected_role("s1", Role.CANDIDATE)

        with pytest.raises(RuntimeError):
            await observer.handle(AuthStateChange("s1", ALICE, "popup"))

        assert await selector.selected_role("s1") is None

    @pytest.mark.asyncio
    async def test_unreadable_role_counts_as_none(self, intents, selector, navigator):
        intents.read = AsyncMock(side_effect=RuntimeError("store down"))
        observer = SessionObserver(selector, navigator)

        await observer.handle(AuthStateChange("s1", ALICE, "redirect"))

        assert navigator.take("s1").path == HOME_ROUTE


class TestOncePerSignIn:
    """Re-delivered events must not navigate again"""

    @pytest.mark.asyncio
    async def test_same_user_again_does_not_renavigate(self, observer, selector, navigator):
        await selector.set_selected_role("s1", Role.CANDIDATE)
        await observer.handle(AuthStateChange("s1", ALICE, "popup"))
        navigator.take("s1")

        # A role picked later must wait for the next sign-in event
        await selector.set_selected_role("s1", Role.RECRUITER)
        await observer.handle(AuthStateChange("s1", ALICE, "restore"))

        assert navigator.take("s1") is None
        assert await selector.selected_role("s1") == Role.RECRUITER

    @pytest.mark.asyncio
    async def test_sign_out_then_in_is_a_new_event(self, observer, selector, navigator):
        await observer.handle(AuthStateChange("s1", ALICE, "popup"))
        await observer.handle(AuthStateChange("s1", None, "signout"))
        await selector.set_selected_role("s1", Role.RECRUITER)

        await observer.handle(AuthStateChange("s1", ALICE, "popup"))

        assert navigator.take("s1").path == ROLE_ROUTES[Role.RECRUITER]

    @pytest.mark.asyncio
    async def test_different_user_is_a_new_event(self, observer, selector, navigator):
        await observer.handle(AuthStateChange("s1", ALICE, "popup"))
        await selector.set_selected_role("s1", Role.CANDIDATE)

        await observer.handle(AuthStateChange("s1", BOB, "popup"))

        navigation = navigator.take("s1")
        assert navigation.state == {"uid": BOB.uid}


class TestSessionState:
    """Unknown, anonymous and authenticated states"""

    def test_initial_state_is_loading(self, observer):
        state = observer.state("never-seen")
        assert state.status == SessionStatus.UNKNOWN
        assert state.loading is True

    @pytest.mark.asyncio
    async def test_transitions(self, observer):
        await observer.handle(AuthStateChange("s1", None, "restore"))
        assert observer.state("s1").status == SessionStatus.ANONYMOUS
        assert observer.state("s1").loading is False

        await observer.handle(AuthStateChange("s1", ALICE, "popup"))
        assert observer.state("s1").status == SessionStatus.AUTHENTICATED
        assert observer.state("s1").user == ALICE

    @pytest.mark.asyncio
    async def test_anonymous_restores_are_bounded(self, selector, navigator):
        observer = SessionObserver(selector, navigator, max_sessions=3)

        for i in range(200):
            await observer.handle(AuthStateChange(f"anon-{i}", None, "restore"))

        assert observer.tracked_sessions == 3
        assert observer.state("anon-0").status == SessionStatus.UNKNOWN
        assert observer.state("anon-199").status == SessionStatus.ANONYMOUS

    @pytest.mark.asyncio
    async def test_recently_active_session_survives_eviction(self, selector, navigator):
        observer = SessionObserver(selector, navigator, max_sessions=2)
        await observer.handle(AuthStateChange("s1", ALICE, "popup"))
        await observer.handle(AuthStateChange("s2", None, "restore"))

        await observer.handle(AuthStateChange("s1", ALICE, "restore"))
        await observer.handle(AuthStateChange("s3", None, "restore"))

        assert observer.state("s1").user == ALICE
        assert observer.state("s2").status == SessionStatus.UNKNOWN


class TestSubscription:
    """One subscription per application lifetime"""

    def _gateway(self):
        stream = AuthStateStream()
        gateway = MagicMock()
        gateway.on_auth_state_changed.side_effect = stream.subscribe
        return gateway, stream

    def test_attach_and_detach(self, observer):
        gateway, stream = self._gateway()

        observer.attach(gateway)
        assert stream.subscriber_count == 1
        assert observer.attached

        observer.detach()
        assert stream.subscriber_count == 0
        assert not observer.attached

    def test_second_attach_is_rejected(self, observer):
        gateway, stream = self._gateway()
        observer.attach(gateway)

        with pytest.raises(RuntimeError):
            observer.attach(gateway)
        assert stream.subscriber_count == 1

    @pytest.mark.asyncio
    async def test_published_changes_reach_the_observer(self, observer, selector, navigator):
        gateway, stream = self._gateway()
        observer.attach(gateway)
        await selector.set_selected_role("s1", Role.CANDIDATE)

        await stream.publish(AuthStateChange("s1", ALICE, "popup"))

        assert navigator.take("s1").path == ROLE_ROUTES[Role.CANDIDATE]


class TestRedirectCompletion:
    """The redirect-result check on the callback page"""

    @pytest.mark.asyncio
    async def test_no_pending_result_routes_to_sign_in(self, observer):
        gateway = MagicMock()
        gateway.get_redirect_result = AsyncMock(return_value=None)

        outcome = await observer.complete_redirect(gateway, "s1")

        assert outcome.navigation.path == SIGN_IN_ROUTE
        assert outcome.error is None
        assert outcome.user is None

    @pytest.mark.asyncio
    async def test_failure_surfaces_message_then_sign_in(self, observer):
        gateway = MagicMock()
        gateway.get_redirect_result = AsyncMock(
            side_effect=AccountExistsWithDifferentCredentialException("alice@example.com")
        )

        outcome = await observer.complete_redirect(gateway, "s1", code="c", state="s")

        assert outcome.navigation.path == SIGN_IN_ROUTE
        assert outcome.error.startswith("An account already exists")
        assert outcome.delay_seconds == settings.REDIRECT_ERROR_DELAY_SECONDS

    @pytest.mark.asyncio
    async def test_unexpected_failure_uses_generic_message(self, observer):
        gateway = MagicMock()
        gateway.get_redirect_result = AsyncMock(side_effect=ValueError("boom"))

        outcome = await observer.complete_redirect(gateway, "s1", code="c", state="s")

        assert outcome.error == GENERIC_SIGN_IN_MESSAGE
        assert outcome.navigation.path == SIGN_IN_ROUTE

    @pytest.mark.asyncio
    async def test_success_uses_recorded_navigation(self, observer, navigator):
        gateway = MagicMock()
        gateway.get_redirect_result = AsyncMock(return_value=ALICE)
        navigator.navigate("s1", "/dashboard/recruiter", state={"uid": ALICE.uid}, replace=True)

        outcome = await observer.complete_redirect(gateway, "s1", code="c", state="s")

        assert outcome.user == ALICE
        assert outcome.navigation.path == "/dashboard/recruiter"

    @pytest.mark.asyncio
    async def test_success_without_navigation_goes_home(self, observer):
        gateway = MagicMock()
        gateway.get_redirect_result = AsyncMock(return_value=ALICE)

        outcome = await observer.complete_redirect(gateway, "s1", code="c", state="s")

        assert outcome.navigation.path == HOME_ROUTE

    @pytest.mark.asyncio
    async def test_provider_detail_is_not_shown(self, observer):
        gateway = MagicMock()
        gateway.get_redirect_result = AsyncMock(
            side_effect=AuthenticationException("bad_verification_code", code="auth/bad_verification_code")
        )

        outcome = await observer.complete_redirect(gateway, "s1", code="c", state="s")

        assert outcome.error == GENERIC_SIGN_IN_MESSAGE
