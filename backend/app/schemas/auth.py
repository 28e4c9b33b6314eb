"""Pydantic schemas for authentication, role intent and navigation"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.enums import Role, SessionStatus


class AuthenticatedUser(BaseModel):
    """Identity issued by the external provider, held read-only"""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    username: Optional[str] = None
    provider: str = "github"

    model_config = ConfigDict(frozen=True)


class RoleSelection(BaseModel):
    """Pending role intent for the current browser session"""
    role: Optional[Role] = None


class Navigation(BaseModel):
    """A client-side navigation with its transient state"""
    path: str
    state: Dict[str, Any] = Field(default_factory=dict)
    replace: bool = False


class PopupSignInRequest(BaseModel):
    """Provider access token obtained by the browser's popup flow"""
    access_token: str = Field(..., min_length=1)


class AuthStateResponse(BaseModel):
    """Authentication state of the browser session"""
    status: SessionStatus
    loading: bool = False
    user: Optional[AuthenticatedUser] = None
    navigation: Optional[Navigation] = None


class RedirectErrorResponse(BaseModel):
    """Body returned when redirect-based sign-in completion fails"""
    error: str
    redirect_to: str
    delay_seconds: int


class IdentityConfig(BaseModel):
    """Public identity/project values handed to the browser"""
    api_key: Optional[str] = None
    auth_domain: Optional[str] = None
    project_id: Optional[str] = None
    storage_bucket: Optional[str] = None
    messaging_sender_id: Optional[str] = None
    app_id: Optional[str] = None
    github_client_id: str = ""
    github_scope: str = "user"
