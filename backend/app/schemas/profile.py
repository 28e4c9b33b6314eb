"""Profile schemas for developers and recruiters

Documents are stored with camelCase field names; Python code uses the
snake_case attribute names.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.app.schemas.auth import Navigation
from backend.app.schemas.result import OperationResult


class DocumentModel(BaseModel):
    """Base for schemas persisted as documents"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self, exclude_unset: bool = False) -> Dict[str, Any]:
        """Field map as written to the document store"""
        return self.model_dump(by_alias=True, exclude_unset=exclude_unset, exclude={"id"})


class DeveloperProfile(DocumentModel):
    """Developer (candidate) profile stored in ``developers``"""
    uid: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    experience: str = ""
    skills: str = ""
    bio: str = ""
    github: str = ""
    university: str = ""
    degree: str = ""
    graduation_year: str = ""
    photo_url: str = Field("", alias="photoURL")


class DeveloperProfileUpdate(DocumentModel):
    """Partial developer profile edit; unset fields are left untouched"""
    model_config = ConfigDict(extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    experience: Optional[str] = None
    skills: Optional[str] = None
    bio: Optional[str] = None
    github: Optional[str] = None
    university: Optional[str] = None
    degree: Optional[str] = None
    graduation_year: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")


class RecruiterProfile(DocumentModel):
    """Recruiter profile stored in ``recruiters``"""
    uid: Optional[str] = None
    company_name: str = ""
    company_website: str = ""
    company_size: str = ""
    funding_stage: str = ""
    equity_range: str = ""
    salary_range: str = ""
    role_description: str = ""
    tech_stack: str = ""
    experience_required: str = ""
    email: Optional[str] = None
    photo_url: str = Field("", alias="photoURL")


class RecruiterProfileUpdate(DocumentModel):
    """Partial recruiter profile edit; unset fields are left untouched"""
    model_config = ConfigDict(extra="ignore")

    company_name: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    funding_stage: Optional[str] = None
    equity_range: Optional[str] = None
    salary_range: Optional[str] = None
    role_description: Optional[str] = None
    tech_stack: Optional[str] = None
    experience_required: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")


class SignupResponse(BaseModel):
    """Outcome of a signup form and where the client goes next"""
    result: OperationResult
    navigation: Optional[Navigation] = None
