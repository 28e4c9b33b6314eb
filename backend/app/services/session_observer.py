"""Session observer: role-based redirection after sign-in

The observer holds the one auth-state subscription of the application. When a
browser session enters the authenticated state it consumes the pending role
and records a navigation to that role's dashboard, once per sign-in event.
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from backend.app.core.config import settings
from backend.app.core.exceptions import FounderBridgeException
from backend.app.core.logging import get_logger
from backend.app.models.enums import Role, SessionStatus
from backend.app.schemas.auth import AuthenticatedUser, Navigation
from backend.app.services.identity_gateway import (
    AuthStateChange,
    IdentityGateway,
    classify_sign_in_error,
)
from backend.app.services.role_selector import RoleSelector

logger = get_logger(__name__)

HOME_ROUTE = "/"
SIGN_IN_ROUTE = "/signin"
ROLE_ROUTES = {
    Role.CANDIDATE: "/dashboard/developer",
    Role.RECRUITER: "/dashboard/recruiter",
}


class Navigator:
    """Pending client-side navigations, one slot per browser session"""

    def __init__(self):
        self._pending: Dict[str, Navigation] = {}

    def navigate(
        self,
        session_id: str,
        path: str,
        state: Optional[dict] = None,
        replace: bool = False
    ) -> Navigation:
        navigation = Navigation(path=path, state=state or {}, replace=replace)
        self._pending[session_id] = navigation
        logger.info(f"Navigating to {path}", extra={"session_id": session_id})
        return navigation

    def take(self, session_id: str) -> Optional[Navigation]:
        """Remove and return the pending navigation of a session"""
        return self._pending.pop(session_id, None)


@dataclass
class SessionState:
    status: SessionStatus = SessionStatus.UNKNOWN
    user: Optional[AuthenticatedUser] = None

    @property
    def loading(self) -> bool:
        return self.status == SessionStatus.UNKNOWN


@dataclass
class RedirectOutcome:
    """Result of the redirect-completion check"""
    navigation: Navigation
    user: Optional[AuthenticatedUser] = None
    error: Optional[str] = None
    delay_seconds: int = 0


class SessionObserver:
    """Tracks auth state per browser session and redirects on sign-in"""

    def __init__(
        self,
        role_selector: RoleSelector,
        navigator: Navigator,
        max_sessions: Optional[int] = None
    ):
        self.role_selector = role_selector
        self.navigator = navigator
        self.max_sessions = max_sessions or settings.SESSION_STATE_MAX_ENTRIES
        self._sessions: OrderedDict[str, SessionState] = OrderedDict()
        self._lock = asyncio.Lock()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self, gateway: IdentityGateway) -> None:
        """Subscribe to the gateway; only one subscription may be active"""
        if self._unsubscribe is not None:
            raise RuntimeError("Session observer is already subscribed")
        self._unsubscribe = gateway.on_auth_state_changed(self.handle)
        logger.info("Session observer subscribed to auth state changes")

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.info("Session observer unsubscribed")

    def state(self, session_id: str) -> SessionState:
        return self._sessions.get(session_id, SessionState())

    @property
    def tracked_sessions(self) -> int:
        return len(self._sessions)

    def _remember(self, session_id: str, state: SessionState) -> None:
        self._sessions[session_id] = state
        self._sessions.move_to_end(session_id)
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug("Evicted session state", extra={"session_id": evicted})

    async def handle(self, change: AuthStateChange) -> None:
        """Apply an auth-state change pushed by the gateway"""
        # Consume-then-navigate must not interleave across events
        async with self._lock:
            previous = self.state(change.session_id)

            if change.user is None:
                self._remember(change.session_id, SessionState(SessionStatus.ANONYMOUS))
                return

            self._remember(change.session_id, SessionState(SessionStatus.AUTHENTICATED, change.user))

            # Same user again is a re-delivery, not a new sign-in
            if previous.status == SessionStatus.AUTHENTICATED and \
                    previous.user is not None and previous.user.uid == change.user.uid:
                return

            await self._redirect_after_sign_in(change)

    async def _redirect_after_sign_in(self, change: AuthStateChange) -> None:
        session_id = change.session_id
        try:
            role = await self.role_selector.consume(session_id)
        except Exception:
            logger.error(
                "Could not read pending role",
                extra={"session_id": session_id},
                exc_info=True
            )
            role = None

        if role is not None:
            self.navigator.navigate(
                session_id,
                ROLE_ROUTES[role],
                state={"uid": change.user.uid},
                replace=change.source == "redirect"
            )
        elif change.source == "redirect":
            self.navigator.navigate(session_id, HOME_ROUTE, replace=True)

    async def complete_redirect(
        self,
        gateway: IdentityGateway,
        session_id: str,
        code: Optional[str] = None,
        state: Optional[str] = None,
        error: Optional[str] = None
    ) -> RedirectOutcome:
        """Run the redirect-completion check and decide where the browser goes"""
        try:
            user = await gateway.get_redirect_result(session_id, code=code, state=state, error=error)
        except Exception as e:
            message = classify_sign_in_error(e)
            logger.error(
                f"Error handling sign-in redirect: {message}",
                extra={"session_id": session_id},
                exc_info=not isinstance(e, FounderBridgeException)
            )
            return RedirectOutcome(
                navigation=Navigation(path=SIGN_IN_ROUTE, replace=True),
                error=message,
                delay_seconds=settings.REDIRECT_ERROR_DELAY_SECONDS,
            )

        if user is None:
            logger.info(
                "No redirect result, page was opened directly",
                extra={"session_id": session_id}
            )
            return RedirectOutcome(navigation=Navigation(path=SIGN_IN_ROUTE, replace=True))

        navigation = self.navigator.take(session_id) or Navigation(path=HOME_ROUTE, replace=True)
        return RedirectOutcome(navigation=navigation, user=user)
