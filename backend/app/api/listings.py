"""Idea, job posting and application API endpoints"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.core.container import Container
from backend.app.core.exceptions import NOT_REGISTERED_RECRUITER_MESSAGE
from backend.app.core.logging import get_logger
from backend.app.core.security import get_container, get_current_user
from backend.app.schemas.auth import AuthenticatedUser
from backend.app.schemas.listing import (
    ApplicationCreate,
    Idea,
    IdeaCreate,
    IdeaCreateRequest,
    IdeaStatusUpdate,
    JobPosting,
)
from backend.app.schemas.result import OperationResult

logger = get_logger(__name__)

router = APIRouter()


@router.post("/ideas", response_model=OperationResult, status_code=status.HTTP_201_CREATED)
async def create_idea(
    idea: IdeaCreateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """
    Post an idea / co-founder listing

    **Requirements:**
    - Caller must have completed recruiter signup
    - `cofounderRole` must not be empty

    **Returns:**
    - The new idea id; the idea starts `active` with server timestamps
    """
    logger.info(f"Idea creation request from user {current_user.uid}")

    data = IdeaCreate(**idea.model_dump(), recruiter_id=current_user.uid, uid=current_user.uid)
    result = await container.listings.create_job_listing(data)

    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN
            if result.error == NOT_REGISTERED_RECRUITER_MESSAGE
            else status.HTTP_502_BAD_GATEWAY,
            detail=result.error
        )

    return result


@router.get("/ideas/active", response_model=List[Idea])
async def list_active_ideas(
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """Every idea whose status is `active`"""
    return await container.listings.get_active_jobs()


@router.patch("/ideas/{idea_id}/status", response_model=OperationResult)
async def update_idea_status(
    idea_id: str,
    update: IdeaStatusUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """Open or close one of the caller's ideas"""
    result = await container.listings.set_listing_status(idea_id, current_user.uid, update.status)

    if not result.success:
        if result.error == "Idea not found":
            code = status.HTTP_404_NOT_FOUND
        elif result.error == "You can only update ideas you created":
            code = status.HTTP_403_FORBIDDEN
        else:
            code = status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=result.error)

    return result


@router.get("/jobs", response_model=List[JobPosting])
async def list_jobs(
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    return await container.listings.list_jobs()


@router.post("/applications", response_model=OperationResult, status_code=status.HTTP_201_CREATED)
async def submit_application(
    application: ApplicationCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    container: Container = Depends(get_container)
):
    """Apply to an idea as the signed-in developer; the application starts `pending`"""
    application.developer_id = current_user.uid
    result = await container.listings.submit_application(application)

    if not result.success:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error)

    return result
