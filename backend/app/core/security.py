"""Request dependencies: services, browser session and current user"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from backend.app.core.config import settings
from backend.app.core.container import Container
from backend.app.core.logging import get_logger
from backend.app.schemas.auth import AuthenticatedUser

logger = get_logger(__name__)

# Bearer tokens are optional; browsers use the session cookie
security = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_session_id(request: Request) -> str:
    """Browser session identifier issued by BrowserSessionMiddleware"""
    return request.state.session_id


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[str]:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.TOKEN_COOKIE_NAME)


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    container: Container = Depends(get_container)
) -> AuthenticatedUser:
    """
    Dependency to get the signed-in user from the session token

    Raises:
        HTTPException: If the token is missing, invalid or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = container.tokens.verify_session_token(token)
    if user is None:
        logger.warning("Invalid or expired session token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
