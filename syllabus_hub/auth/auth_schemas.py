from typing import Optional

from pydantic import BaseModel, EmailStr, Field

# bcrypt ignores anything past 72 bytes
PASSWORD_MAX = 72

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=PASSWORD_MAX)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX)

class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None

class ResendVerificationRequest(BaseModel):
    email: EmailStr
