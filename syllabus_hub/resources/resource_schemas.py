from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from syllabus_hub.resources.resource_models import Prerequisite, ResourceType

# ==================== REQUEST SCHEMAS ====================

def _check_url(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.startswith(("http://", "https://")):
        raise ValueError("url must be an http(s) URL")
    return value


class ResourceCreate(BaseModel):
    type: ResourceType
    title: str = Field(..., min_length=2, max_length=300)
    url: str = Field(..., max_length=2048)
    description: str = Field("", max_length=5000)
    provider: str = Field("", max_length=200)
    subject_id: str
    topics: List[str] = []
    tags: List[str] = []
    prerequisites: List[Prerequisite] = []
    # Honoured only for moderators and admins
    is_approved: Optional[bool] = None
    quality_score: Optional[float] = Field(None, ge=0, le=100)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        return _check_url(v)


class ResourceUpdate(BaseModel):
    type: Optional[ResourceType] = None
    title: Optional[str] = Field(None, min_length=2, max_length=300)
    url: Optional[str] = Field(None, max_length=2048)
    description: Optional[str] = Field(None, max_length=5000)
    provider: Optional[str] = Field(None, max_length=200)
    subject_id: Optional[str] = None
    topics: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    prerequisites: Optional[List[Prerequisite]] = None
    is_approved: Optional[bool] = None
    quality_score: Optional[float] = Field(None, ge=0, le=100)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        return _check_url(v)


class ResourceApproval(BaseModel):
    approved: bool = True
