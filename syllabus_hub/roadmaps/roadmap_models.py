from datetime import datetime
from enum import Enum
from typing import List

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

# ==================== ENUMS ====================

class RoadmapType(str, Enum):
    MIDSEM = "midsem"
    ENDSEM = "endsem"
    PRACTICAL = "practical"
    GENERAL = "general"

class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

# ==================== DATABASE MODELS ====================

class RoadmapStep(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    description: str
    order: int
    estimated_hours: float
    prerequisites: List[str] = []
    resources: List[ObjectId] = []

class Roadmap(BaseModel):
    """
    Stored roadmap. Steps keep an explicit order; total_estimated_hours is
    the sum of the step estimates.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True)

    subject_id: ObjectId
    type: RoadmapType
    title: str
    description: str
    difficulty: Difficulty
    steps: List[RoadmapStep]
    total_estimated_hours: float = 0
    created_by: ObjectId
    is_public: bool = True
    is_approved: bool = True
    tags: List[str] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


def total_hours(steps: List[dict]) -> float:
    return round(sum(step.get("estimated_hours", 0) for step in steps), 2)
