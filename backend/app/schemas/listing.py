"""Listing schemas: recruiter ideas, job postings and applications"""

from typing import List, Optional, Union
from pydantic import ConfigDict, Field, field_validator

from backend.app.models.enums import ListingStatus
from backend.app.schemas.profile import DocumentModel


class IdeaCreateRequest(DocumentModel):
    """Request body for posting an idea / co-founder listing"""
    cofounder_role: str = Field(..., min_length=1, max_length=255)
    company_name: str = ""
    company_size: str = ""
    company_website: str = ""
    email: Optional[str] = None
    equity_range: str = ""
    experience_required: str = ""
    funding_stage: str = ""
    idea_description: str = ""
    ideal_candidate: str = ""
    photo_url: str = Field("", alias="photoURL")
    responsibilities: str = ""
    role_description: str = ""
    salary_range: str = ""
    tech_stack: str = ""

    @field_validator("cofounder_role")
    @classmethod
    def validate_role(cls, v):
        if not v.strip():
            raise ValueError("Co-founder role cannot be empty")
        return v.strip()

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "cofounderRole": "CTO",
                "companyName": "Acme Robotics",
                "fundingStage": "pre-seed",
                "equityRange": "10-20%",
                "salaryRange": "$80k-$120k",
                "techStack": "Python, ROS, React",
                "ideaDescription": "Autonomous warehouse picking for small retailers",
            }
        }
    )


class IdeaCreate(IdeaCreateRequest):
    """Idea data handed to the listing gateway"""
    recruiter_id: str = Field(..., min_length=1)
    uid: Optional[str] = None


class Idea(DocumentModel):
    """Idea as read back from ``ideas``

    Stored documents are free-form; every field is optional.
    """
    id: Optional[str] = None
    recruiter_id: Optional[str] = None
    cofounder_role: Optional[str] = None
    company_name: Optional[str] = None
    idea_description: Optional[str] = None
    tech_stack: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class IdeaStatusUpdate(DocumentModel):
    """Request body for opening or closing an idea"""
    status: ListingStatus


class JobPosting(DocumentModel):
    """Job posting as read from ``jobs`` for the developer feed"""
    id: Optional[str] = None
    company_name: Optional[str] = None
    role: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    salary: Optional[str] = None
    equity: Optional[str] = None
    tech_stack: Union[List[str], str, None] = None
    description: Optional[str] = None
    posted_date: Optional[str] = None


class ApplicationCreate(DocumentModel):
    """A developer's application to an idea"""
    model_config = ConfigDict(extra="ignore")

    idea_id: str = Field(..., min_length=1)
    developer_id: Optional[str] = None
    cover_letter: str = ""
    resume: str = ""


class Application(DocumentModel):
    """Application as read back from ``applications``"""
    id: Optional[str] = None
    idea_id: Optional[str] = None
    developer_id: Optional[str] = None
    cover_letter: Optional[str] = None
    resume: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
