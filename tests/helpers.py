from syllabus_hub.auth.tokens import create_access_token
from syllabus_hub.dependencies import UserContext


def auth_headers(user: dict) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def user_context(user: dict) -> UserContext:
    return UserContext({"sub": str(user["_id"]), "email": user["email"], "role": user["role"]})
