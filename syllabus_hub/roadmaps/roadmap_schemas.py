from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from syllabus_hub.roadmaps.roadmap_models import Difficulty, RoadmapType

# ==================== REQUEST SCHEMAS ====================

class RoadmapStepIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    order: int = Field(..., ge=1)
    estimated_hours: float = Field(..., ge=0.5, le=100)
    prerequisites: List[str] = []
    resources: List[str] = []

    @field_validator("resources")
    @classmethod
    def validate_resource_ids(cls, v):
        for resource_id in v:
            if len(resource_id) != 24 or any(c not in "0123456789abcdefABCDEF" for c in resource_id):
                raise ValueError(f"Invalid resource id: {resource_id}")
        return v

class RoadmapCreate(BaseModel):
    subject_id: str
    type: RoadmapType
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    difficulty: Difficulty
    steps: List[RoadmapStepIn] = Field(..., min_length=1)
    is_public: bool = True
    tags: List[str] = Field([], max_length=10)

class RoadmapUpdate(BaseModel):
    type: Optional[RoadmapType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    difficulty: Optional[Difficulty] = None
    steps: Optional[List[RoadmapStepIn]] = Field(None, min_length=1)
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = Field(None, max_length=10)

class RoadmapApproval(BaseModel):
    approved: bool = True
