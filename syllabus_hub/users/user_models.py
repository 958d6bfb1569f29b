from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ==================== ENUMS ====================

class UserRole(str, Enum):
    STUDENT = "student"
    MODERATOR = "moderator"
    ADMIN = "admin"

# ==================== DATABASE MODELS ====================

class User(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str
    email: str  # stored lowercased
    password_hash: str
    role: UserRole = UserRole.STUDENT
    is_email_verified: bool = False
    verification_token_hash: Optional[str] = None
    verification_expires: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

# ==================== REQUEST SCHEMAS ====================

class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
