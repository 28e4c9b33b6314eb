"""Profile signup and read API endpoints"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from backend.app.api.auth import set_session_cookies
from backend.app.core.container import Container
from backend.app.core.exceptions import NotFoundException
from backend.app.core.logging import get_logger
from backend.app.core.security import get_container, get_current_user
from backend.app.models.enums import Role
from backend.app.schemas.auth import AuthenticatedUser, Navigation
from backend.app.schemas.profile import DeveloperProfile, RecruiterProfile, SignupResponse
from backend.app.services.session_observer import ROLE_ROUTES

logger = get_logger(__name__)

router = APIRouter()


def _signup_response(
    response: Response,
    container: Container,
    result,
    role: Role,
    user: AuthenticatedUser
) -> SignupResponse:
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=result.error
        )

    navigation = Navigation(path=ROLE_ROUTES[role], state={"uid": user.uid})
    set_session_cookies(response, container, None, navigation)
    return SignupResponse(result=result, navigation=navigation)


@router.post("/developer", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def create_developer_profile(
    profile: DeveloperProfile,
    response: Response,
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """
    Developer signup form

    Stores the profile under the caller's uid in `developers` and returns the
    navigation to the developer dashboard.
    """
    if profile.email is None:
        profile.email = current_user.email
    if not profile.photo_url and current_user.photo_url:
        profile.photo_url = current_user.photo_url

    result = await container.profiles.create_developer_profile(current_user.uid, profile)
    return _signup_response(response, container, result, Role.CANDIDATE, current_user)


@router.post("/recruiter", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def create_recruiter_profile(
    profile: RecruiterProfile,
    response: Response,
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """
    Recruiter signup form

    Stores the profile under the caller's uid in `recruiters`. Posting ideas
    requires this document to exist.
    """
    if profile.email is None:
        profile.email = current_user.email
    if not profile.photo_url and current_user.photo_url:
        profile.photo_url = current_user.photo_url

    result = await container.profiles.create_recruiter_profile(current_user.uid, profile)
    return _signup_response(response, container, result, Role.RECRUITER, current_user)


@router.get("/developer/me", response_model=DeveloperProfile)
async def get_developer_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    profile = await container.profiles.get_developer_profile(current_user.uid)
    if profile is None:
        raise NotFoundException("Developer profile not found")
    return profile


@router.get("/recruiter/me", response_model=RecruiterProfile)
async def get_recruiter_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    profile = await container.profiles.get_recruiter_profile(current_user.uid)
    if profile is None:
        raise NotFoundException("Recruiter profile not found")
    return profile
