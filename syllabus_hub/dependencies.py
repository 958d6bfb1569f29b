from typing import Optional

from fastapi import Depends, Header, Request

from syllabus_hub.auth.tokens import verify_access_token
from syllabus_hub.errors import AuthError, ForbiddenError

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

STAFF_ROLES = ("moderator", "admin")


class UserContext:
    """
    Identity carried by a verified access token
    """
    def __init__(self, claims: dict):
        self.user_id = claims["sub"]
        self.email = claims.get("email")
        self.role = claims.get("role", "student")
        self.claims = claims

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


def _extract_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> UserContext:
    """
    Dependency: requires a valid access token (cookie or Bearer header)

    Raises:
        401: Missing, invalid or expired token
    """
    token = _extract_token(request, authorization)
    if not token:
        raise AuthError("Access token required")
    return UserContext(verify_access_token(token))


async def get_optional_user(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> Optional[UserContext]:
    """Same as get_current_user but anonymous callers get None"""
    token = _extract_token(request, authorization)
    if not token:
        return None
    try:
        return UserContext(verify_access_token(token))
    except AuthError:
        return None


def require_role(*roles: str):
    """
    Dependency factory: caller must hold one of the given roles

    Raises:
        401: Not authenticated
        403: Role not allowed
    """
    async def checker(user: UserContext = Depends(get_current_user)) -> UserContext:
        if user.role not in roles:
            raise ForbiddenError()
        return user
    return checker


require_staff = require_role(*STAFF_ROLES)
require_admin = require_role("admin")
