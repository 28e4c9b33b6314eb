"""Authentication API endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from backend.app.core.config import settings
from backend.app.core.container import Container
from backend.app.core.logging import get_logger
from backend.app.core.security import get_container, get_session_id, get_session_token
from backend.app.models.enums import SessionStatus
from backend.app.schemas.auth import (
    AuthenticatedUser,
    AuthStateResponse,
    IdentityConfig,
    Navigation,
    PopupSignInRequest,
    RedirectErrorResponse,
)

logger = get_logger(__name__)

router = APIRouter()


def set_session_cookies(
    response: Response,
    container: Container,
    user: Optional[AuthenticatedUser],
    navigation: Optional[Navigation]
) -> None:
    """Attach the session token and the navigation state to a response"""
    if user is not None:
        response.set_cookie(
            settings.TOKEN_COOKIE_NAME,
            container.tokens.create_session_token(user),
            httponly=True,
            samesite="lax",
            secure=settings.COOKIE_SECURE,
            max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
    if navigation is not None and navigation.state:
        response.set_cookie(
            settings.NAVIGATION_COOKIE_NAME,
            container.tokens.create_navigation_token(navigation),
            httponly=True,
            samesite="lax",
            secure=settings.COOKIE_SECURE,
        )


@router.get("/github/login", status_code=status.HTTP_302_FOUND)
async def github_login(
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    """
    Start redirect-based sign-in with GitHub

    Redirects the browser to GitHub's authorization page. The `state`
    parameter binds the sign-in to the caller's browser session; GitHub sends
    the browser back to `/api/v1/auth/github/callback`.
    """
    url = container.identity.sign_in_with_redirect(session_id)
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/github/callback")
async def github_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    """
    Complete redirect-based sign-in

    ## Outcomes

    | Situation | Response |
    |-----------|----------|
    | Signed in, role pending | 303 to that role's dashboard, navigation state cookie set |
    | Signed in, no role pending | 303 to `/` |
    | No pending sign-in (page opened directly) | 303 to `/signin` |
    | Sign-in failed | 401 with the error message and `Refresh: <delay>; url=/signin` |
    """
    outcome = await container.observer.complete_redirect(
        container.identity, session_id, code=code, state=state, error=error
    )

    if outcome.error is not None:
        body = RedirectErrorResponse(
            error=outcome.error,
            redirect_to=outcome.navigation.path,
            delay_seconds=outcome.delay_seconds,
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=body.model_dump(),
            headers={"Refresh": f"{outcome.delay_seconds}; url={outcome.navigation.path}"},
        )

    response = RedirectResponse(outcome.navigation.path, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookies(response, container, outcome.user, outcome.navigation)
    return response


@router.post("/github/popup", response_model=AuthStateResponse)
async def github_popup(
    payload: PopupSignInRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    """
    Complete popup-based sign-in

    The browser ran GitHub's popup itself and posts the provider access token.
    The response carries the navigation to follow when a role was pending; with
    no role pending the client stays where it is.

    ## Error Responses

    - **401 Unauthorized**: `An account already exists with this email...` when the
      email belongs to another identity, otherwise the generic sign-in failure.
    """
    user = await container.identity.sign_in_with_popup(session_id, payload.access_token)
    navigation = container.navigator.take(session_id)
    set_session_cookies(response, container, user, navigation)

    logger.info("Popup sign-in completed", extra={"session_id": session_id, "uid": user.uid})
    return AuthStateResponse(status=SessionStatus.AUTHENTICATED, user=user, navigation=navigation)


@router.get("/me", response_model=AuthStateResponse)
async def get_auth_state(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    """Current auth state of the browser session"""
    user = await container.identity.restore_session(session_id, token)
    navigation = container.navigator.take(session_id)
    set_session_cookies(response, container, None, navigation)

    return AuthStateResponse(
        status=SessionStatus.AUTHENTICATED if user else SessionStatus.ANONYMOUS,
        user=user,
        navigation=navigation,
    )


@router.post("/signout", response_model=AuthStateResponse)
async def sign_out(
    response: Response,
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    """Sign out and drop the session token and navigation state"""
    await container.identity.sign_out(session_id)
    response.delete_cookie(settings.TOKEN_COOKIE_NAME)
    response.delete_cookie(settings.NAVIGATION_COOKIE_NAME)
    return AuthStateResponse(status=SessionStatus.ANONYMOUS)


@router.get("/config", response_model=IdentityConfig)
async def get_identity_config():
    """Public identity/project values the browser needs for popup sign-in"""
    return IdentityConfig(
        api_key=settings.IDENTITY_API_KEY,
        auth_domain=settings.IDENTITY_AUTH_DOMAIN,
        project_id=settings.IDENTITY_PROJECT_ID,
        storage_bucket=settings.IDENTITY_STORAGE_BUCKET,
        messaging_sender_id=settings.IDENTITY_MESSAGING_SENDER_ID,
        app_id=settings.IDENTITY_APP_ID,
        github_client_id=settings.GITHUB_CLIENT_ID,
        github_scope=settings.GITHUB_SCOPE,
    )
