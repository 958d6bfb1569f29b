from pydantic import BaseModel

from syllabus_hub.users.user_models import UserRole

class UserRoleUpdate(BaseModel):
    role: UserRole

class ApprovalDecision(BaseModel):
    approved: bool
