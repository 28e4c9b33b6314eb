"""Role intent API endpoints"""

from fastapi import APIRouter, Depends, status

from backend.app.core.container import Container
from backend.app.core.security import get_container, get_session_id
from backend.app.schemas.auth import RoleSelection

router = APIRouter()


@router.get("", response_model=RoleSelection)
async def get_selected_role(
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    """Role picked by this browser session, if any"""
    return RoleSelection(role=await container.role_selector.selected_role(session_id))


@router.put("", response_model=RoleSelection)
async def select_role(
    selection: RoleSelection,
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    """
    Remember the role a visitor intends to sign up as

    The value survives page reloads and is consumed by the first successful
    sign-in of this browser session. Sending `{"role": null}` clears it.
    """
    if selection.role is None:
        await container.role_selector.clear_role(session_id)
    else:
        await container.role_selector.set_selected_role(session_id, selection.role)
    return selection


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_role(
    session_id: str = Depends(get_session_id),
    container: Container = Depends(get_container)
):
    await container.role_selector.clear_role(session_id)
