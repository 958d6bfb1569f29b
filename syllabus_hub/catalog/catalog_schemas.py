from typing import List, Optional

from pydantic import BaseModel, Field

# ==================== BRANCHES ====================

class BranchCreate(BaseModel):
    code: str = Field(..., min_length=2, max_length=10)
    name: str = Field(..., min_length=2, max_length=100)

class BranchUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=2, max_length=10)
    name: Optional[str] = Field(None, min_length=2, max_length=100)

# ==================== SUBJECTS ====================

class SubjectCreate(BaseModel):
    code: str = Field(..., min_length=2, max_length=20)
    name: str = Field(..., min_length=2, max_length=200)
    branch_id: str
    semester_id: str
    credits: int = Field(..., ge=1, le=10)
    topics: List[str] = []

class SubjectUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=2, max_length=20)
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    branch_id: Optional[str] = None
    semester_id: Optional[str] = None
    credits: Optional[int] = Field(None, ge=1, le=10)
    topics: Optional[List[str]] = None
