"""Token service for session, OAuth state and navigation-state JWTs"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt

from backend.app.core.config import settings
from backend.app.core.logging import get_logger
from backend.app.schemas.auth import AuthenticatedUser, Navigation

logger = get_logger(__name__)


class AuthService:
    """Service for signing and verifying the JWTs the application issues"""

    def __init__(self, secret_key: Optional[str] = None):
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = settings.ALGORITHM
        self.access_token_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        self.state_expire_minutes = settings.OAUTH_STATE_EXPIRE_MINUTES

    def _encode(self, claims: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            **claims,
            "exp": now + expires_delta,
            "iat": now,
            "type": token_type,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str, token_type: str) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a token of the given type

        Args:
            token: JWT token string
            token_type: Expected ``type`` claim

        Returns:
            Token payload if valid, None otherwise
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Token verification failed: {str(e)}")
            return None

        if payload.get("type") != token_type:
            logger.warning(f"Token is not a {token_type} token")
            return None

        return payload

    def create_session_token(
        self,
        user: AuthenticatedUser,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Generate the session token issued after a successful sign-in

        Args:
            user: Authenticated identity
            expires_delta: Optional custom expiration time

        Returns:
            JWT token string
        """
        expires_delta = expires_delta or timedelta(minutes=self.access_token_expire_minutes)
        token = self._encode(
            {
                "sub": user.uid,
                "email": user.email,
                "name": user.display_name,
                "picture": user.photo_url,
                "username": user.username,
                "provider": user.provider,
            },
            "session",
            expires_delta
        )
        logger.info(f"Created session token for user: {user.uid}")
        return token

    def verify_session_token(self, token: str) -> Optional[AuthenticatedUser]:
        """Decode a session token back into the identity it was issued for"""
        payload = self.verify_token(token, "session")
        if not payload or not payload.get("sub"):
            return None

        return AuthenticatedUser(
            uid=payload["sub"],
            email=payload.get("email"),
            display_name=payload.get("name"),
            photo_url=payload.get("picture"),
            username=payload.get("username"),
            provider=payload.get("provider") or "github",
        )

    def create_state_token(self, session_id: str) -> str:
        """OAuth ``state`` value binding a redirect sign-in to a browser session"""
        return self._encode(
            {"sid": session_id},
            "oauth_state",
            timedelta(minutes=self.state_expire_minutes)
        )

    def verify_state_token(self, token: str, session_id: str) -> bool:
        payload = self.verify_token(token, "oauth_state")
        return bool(payload) and payload.get("sid") == session_id

    def create_navigation_token(self, navigation: Navigation) -> str:
        """Carry navigation state to the target route without putting it in the URL"""
        return self._encode(
            {"path": navigation.path, "state": navigation.state},
            "navigation",
            timedelta(minutes=self.access_token_expire_minutes)
        )

    def read_navigation_token(self, token: Optional[str]) -> Optional[Navigation]:
        if not token:
            return None
        payload = self.verify_token(token, "navigation")
        if not payload:
            return None
        return Navigation(path=payload.get("path", "/"), state=payload.get("state") or {})


# Global auth service instance
auth_service = AuthService()
