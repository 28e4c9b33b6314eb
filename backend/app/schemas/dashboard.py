"""Dashboard view snapshots"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from backend.app.schemas.listing import Application, Idea, JobPosting
from backend.app.schemas.profile import DeveloperProfile, RecruiterProfile


class Notification(BaseModel):
    """Transient user-facing message"""
    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class DeveloperDashboardSnapshot(BaseModel):
    loading: bool
    uid: Optional[str] = None
    profile: Optional[DeveloperProfile] = None
    jobs: List[JobPosting] = Field(default_factory=list)
    ideas: List[Idea] = Field(default_factory=list)
    applications: List[Application] = Field(default_factory=list)
    active_tab: Literal["all", "saved", "applied"] = "all"
    saved_jobs: List[str] = Field(default_factory=list)
    visible_jobs: List[JobPosting] = Field(default_factory=list)
    editing: bool = False
    notifications: List[Notification] = Field(default_factory=list)


class RecruiterDashboardSnapshot(BaseModel):
    loading: bool
    uid: Optional[str] = None
    profile: Optional[RecruiterProfile] = None
    ideas: List[Idea] = Field(default_factory=list)
    candidates: List[Application] = Field(default_factory=list)
    active_tab: Literal["pending", "reviewing", "accepted", "rejected"] = "pending"
    visible_candidates: List[Application] = Field(default_factory=list)
    editing: bool = False
    notifications: List[Notification] = Field(default_factory=list)
