"""Identity gateway over the GitHub OAuth provider

Sign-in comes in two variants. The popup variant hands the gateway a
provider access token the browser already obtained. The redirect variant
sends the browser to the provider and completes on the callback request,
after a full page reload, through ``get_redirect_result``.

Every auth-state change is pushed to subscribers of ``AuthStateStream``.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from backend.app.core.config import settings
from backend.app.core.exceptions import (
    AccountExistsWithDifferentCredentialException,
    AuthenticationException,
    ExternalServiceException,
    FounderBridgeException,
    GENERIC_SIGN_IN_MESSAGE,
)
from backend.app.core.logging import get_logger
from backend.app.models.enums import Collection
from backend.app.repositories.document_store import DocumentStore, SERVER_TIMESTAMP
from backend.app.schemas.auth import AuthenticatedUser
from backend.app.services.auth_service import AuthService

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthStateChange:
    """Auth state of a browser session after a sign-in, restore or sign-out"""
    session_id: str
    user: Optional[AuthenticatedUser]
    source: str


AuthStateListener = Callable[[AuthStateChange], Awaitable[None]]


class AuthStateStream:
    """Observable stream of auth-state changes"""

    def __init__(self):
        self._listeners: List[AuthStateListener] = []

    def subscribe(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register a listener and return the callable that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    async def publish(self, change: AuthStateChange) -> None:
        for listener in list(self._listeners):
            try:
                await listener(change)
            except Exception:
                # A failing listener must not undo a completed sign-in
                logger.error(
                    "Auth state listener failed",
                    extra={"session_id": change.session_id},
                    exc_info=True
                )


def classify_sign_in_error(error: Exception) -> str:
    """User-facing message for a sign-in failure"""
    if isinstance(error, AuthenticationException) and \
            error.code == AccountExistsWithDifferentCredentialException.CODE:
        return error.message
    return GENERIC_SIGN_IN_MESSAGE


class GitHubProvider:
    """HTTP client for the GitHub OAuth endpoints"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client_id = settings.GITHUB_CLIENT_ID
        self.client_secret = settings.GITHUB_CLIENT_SECRET
        self.redirect_uri = settings.GITHUB_REDIRECT_URI
        self.authorize_url = settings.GITHUB_AUTHORIZE_URL
        self.token_url = settings.GITHUB_TOKEN_URL
        self.api_url = settings.GITHUB_API_URL.rstrip("/")
        self.scope = settings.GITHUB_SCOPE
        self.allow_signup = settings.GITHUB_ALLOW_SIGNUP
        self.client = client or httpx.AsyncClient(timeout=settings.GITHUB_TIMEOUT_SECONDS)

    def authorization_url(self, state: str) -> str:
        """Provider URL the browser is redirected to"""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "state": state,
            "allow_signup": "true" if self.allow_signup else "false",
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for a provider access token

        Raises:
            AuthenticationException: If the provider rejects the code
            ExternalServiceException: If the provider cannot be reached
        """
        try:
            response = await self.client.post(
                self.token_url,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "redirect_uri": self.redirect_uri,
                },
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceException("github", str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceException("github", "Token response is not JSON") from e

        if not isinstance(payload, dict):
            raise ExternalServiceException("github", "Unexpected token response")
        if "error" in payload or not payload.get("access_token"):
            code_name = payload.get("error", "missing_access_token")
            logger.warning(f"GitHub rejected authorization code: {code_name}")
            raise AuthenticationException(code=f"auth/{code_name}")

        return payload["access_token"]

    async def fetch_user(self, access_token: str) -> Dict[str, Any]:
        """
        Fetch the profile of the token's owner

        Raises:
            AuthenticationException: If the token is rejected
            ExternalServiceException: If the provider cannot be reached
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        }
        try:
            response = await self.client.get(f"{self.api_url}/user", headers=headers)
            if response.status_code == 401:
                raise AuthenticationException(code="auth/invalid-credential")
            response.raise_for_status()
            profile = response.json()
            if not isinstance(profile, dict) or "id" not in profile:
                raise ExternalServiceException("github", "Unexpected user profile response")

            if not profile.get("email"):
                emails = await self.client.get(f"{self.api_url}/user/emails", headers=headers)
                if emails.status_code == 200:
                    profile["email"] = next(
                        (
                            entry.get("email") for entry in emails.json()
                            if entry.get("primary") and entry.get("verified")
                        ),
                        None
                    )
        except httpx.HTTPError as e:
            raise ExternalServiceException("github", str(e)) from e
        except ValueError as e:
            raise ExternalServiceException("github", "User profile response is not JSON") from e

        return profile

    async def close(self) -> None:
        await self.client.aclose()


def user_from_github_profile(profile: Dict[str, Any]) -> AuthenticatedUser:
    return AuthenticatedUser(
        uid=str(profile["id"]),
        email=profile.get("email"),
        display_name=profile.get("name") or profile.get("login"),
        photo_url=profile.get("avatar_url"),
        username=profile.get("login"),
    )


class IdentityGateway:
    """Sign-in flows and auth-state notifications"""

    def __init__(
        self,
        provider: GitHubProvider,
        store: DocumentStore,
        tokens: AuthService,
        stream: Optional[AuthStateStream] = None
    ):
        self.provider = provider
        self.store = store
        self.tokens = tokens
        self.stream = stream or AuthStateStream()

    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        return self.stream.subscribe(listener)

    def sign_in_with_redirect(self, session_id: str) -> str:
        """Start the redirect variant and return the provider URL"""
        state = self.tokens.create_state_token(session_id)
        logger.info("Starting redirect sign-in", extra={"session_id": session_id})
        return self.provider.authorization_url(state)

    async def sign_in_with_popup(self, session_id: str, provider_token: str) -> AuthenticatedUser:
        """
        Complete the popup variant with the token the browser obtained

        Raises:
            AuthenticationException: Classified sign-in failure
        """
        try:
            profile = await self.provider.fetch_user(provider_token)
            user = await self._link_identity(user_from_github_profile(profile))
        except AuthenticationException:
            raise
        except FounderBridgeException as e:
            logger.error(f"Popup sign-in failed: {e.message}", extra={"session_id": session_id})
            raise AuthenticationException(classify_sign_in_error(e)) from e
        except Exception as e:
            logger.error(
                "Popup sign-in failed unexpectedly",
                extra={"session_id": session_id},
                exc_info=True
            )
            raise AuthenticationException(classify_sign_in_error(e)) from e

        await self.stream.publish(AuthStateChange(session_id, user, "popup"))
        return user

    async def get_redirect_result(
        self,
        session_id: str,
        code: Optional[str] = None,
        state: Optional[str] = None,
        error: Optional[str] = None
    ) -> Optional[AuthenticatedUser]:
        """
        Complete the redirect variant

        Returns:
            The signed-in user, or None when no redirect sign-in is pending

        Raises:
            AuthenticationException: If the provider or state check rejects the sign-in
        """
        if not code and not error:
            return None

        if error:
            logger.warning(f"Provider returned error: {error}", extra={"session_id": session_id})
            raise AuthenticationException(code=f"auth/{error}")

        if not state or not self.tokens.verify_state_token(state, session_id):
            logger.warning("Sign-in state mismatch", extra={"session_id": session_id})
            raise AuthenticationException(code="auth/invalid-state")

        try:
            access_token = await self.provider.exchange_code(code)
            profile = await self.provider.fetch_user(access_token)
            user = await self._link_identity(user_from_github_profile(profile))
        except AuthenticationException:
            raise
        except FounderBridgeException as e:
            logger.error(f"Redirect sign-in failed: {e.message}", extra={"session_id": session_id})
            raise AuthenticationException(classify_sign_in_error(e)) from e
        except Exception as e:
            logger.error(
                "Redirect sign-in failed unexpectedly",
                extra={"session_id": session_id},
                exc_info=True
            )
            raise AuthenticationException(classify_sign_in_error(e)) from e

        await self.stream.publish(AuthStateChange(session_id, user, "redirect"))
        return user

    async def restore_session(self, session_id: str, token: Optional[str]) -> Optional[AuthenticatedUser]:
        """Resolve a previously issued session token and publish the state"""
        user = self.tokens.verify_session_token(token) if token else None
        await self.stream.publish(AuthStateChange(session_id, user, "restore"))
        return user

    async def sign_out(self, session_id: str) -> None:
        await self.stream.publish(AuthStateChange(session_id, None, "signout"))
        logger.info("Signed out", extra={"session_id": session_id})

    async def _link_identity(self, user: AuthenticatedUser) -> AuthenticatedUser:
        """Record the identity, refusing an email already linked to another uid"""
        try:
            if user.email:
                for snapshot in await self.store.get_all(Collection.USERS.value):
                    if snapshot.id != user.uid and snapshot.data.get("email") == user.email:
                        logger.warning(f"Email already linked to identity {snapshot.id}")
                        raise AccountExistsWithDifferentCredentialException(user.email)

            await self.store.set(
                Collection.USERS.value,
                user.uid,
                {
                    "uid": user.uid,
                    "email": user.email,
                    "displayName": user.display_name,
                    "photoURL": user.photo_url,
                    "username": user.username,
                    "provider": user.provider,
                    "lastSignInAt": SERVER_TIMESTAMP,
                },
                merge=True
            )
        except FounderBridgeException:
            raise
        except Exception as e:
            raise ExternalServiceException("document store", str(e)) from e

        logger.info("Identity linked", extra={"uid": user.uid})
        return user
