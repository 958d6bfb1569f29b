from datetime import datetime

from jose import JWTError, jwt

from syllabus_hub import config
from syllabus_hub.errors import AuthError

ACCESS = "access"
REFRESH = "refresh"


def _secret(token_type: str) -> str:
    return config.JWT_ACCESS_SECRET if token_type == ACCESS else config.JWT_REFRESH_SECRET


def _ttl(token_type: str):
    ttl = config.ACCESS_TOKEN_TTL if token_type == ACCESS else config.REFRESH_TOKEN_TTL
    return config.parse_duration(ttl)


def token_max_age(token_type: str) -> int:
    """Cookie max-age in seconds"""
    return int(_ttl(token_type).total_seconds())


def _issue(user: dict, token_type: str) -> str:
    now = datetime.utcnow()
    claims = {
        "sub": str(user["_id"]),
        "email": user["email"],
        "role": user.get("role", "student"),
        "type": token_type,
        "iat": now,
        "exp": now + _ttl(token_type),
    }
    return jwt.encode(claims, _secret(token_type), algorithm=config.JWT_ALGORITHM)


def create_access_token(user: dict) -> str:
    return _issue(user, ACCESS)


def create_refresh_token(user: dict) -> str:
    return _issue(user, REFRESH)


def issue_token_pair(user: dict) -> dict:
    return {
        "access_token": create_access_token(user),
        "refresh_token": create_refresh_token(user),
    }


def _verify(token: str, token_type: str) -> dict:
    try:
        claims = jwt.decode(token, _secret(token_type), algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or expired token")
    if claims.get("type") != token_type or not claims.get("sub"):
        raise AuthError("Invalid token type")
    return claims


def verify_access_token(token: str) -> dict:
    return _verify(token, ACCESS)


def verify_refresh_token(token: str) -> dict:
    return _verify(token, REFRESH)
