from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

# ==================== ENUMS ====================

class ResourceType(str, Enum):
    SYLLABUS = "syllabus"
    LECTURE = "lecture"
    NOTES = "notes"
    BOOK = "book"

class ResourceSort(str, Enum):
    CREATED_AT = "createdAt"
    QUALITY_SCORE = "qualityScore"
    TITLE = "title"
    NAME = "name"

# Allow-listed sort keys -> (stored field, direction).
# title and name read A to Z; createdAt and qualityScore list newest or best first.
SORT_FIELDS = {
    ResourceSort.CREATED_AT: ("created_at", -1),
    ResourceSort.QUALITY_SCORE: ("quality_score", -1),
    ResourceSort.TITLE: ("title", 1),
    ResourceSort.NAME: ("title", 1),
}

RATING_BUCKETS = ("1", "2", "3", "4", "5")


def empty_distribution() -> Dict[str, int]:
    return {bucket: 0 for bucket in RATING_BUCKETS}

# ==================== DATABASE MODELS ====================

class Prerequisite(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    resource_link: Optional[str] = None

class Resource(BaseModel):
    """
    Stored resource document.
    average_rating, total_ratings and rating_distribution are owned by the
    rating aggregation routine.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, use_enum_values=True)

    type: ResourceType
    title: str
    url: str
    description: str = ""
    provider: str = ""
    subject_id: ObjectId
    topics: List[str] = []
    tags: List[str] = []
    prerequisites: List[Prerequisite] = []
    added_by: ObjectId
    is_approved: bool = False
    quality_score: float = Field(0, ge=0, le=100)
    average_rating: float = 0
    total_ratings: int = 0
    rating_distribution: Dict[str, int] = Field(default_factory=empty_distribution)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
