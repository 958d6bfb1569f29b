import hashlib
import secrets
from datetime import timedelta

from motor.motor_asyncio import AsyncIOMotorDatabase
from passlib.context import CryptContext
from pymongo.errors import DuplicateKeyError

from syllabus_hub.auth import email_service
from syllabus_hub.auth.tokens import issue_token_pair, verify_refresh_token
from syllabus_hub.database import USER_PRIVATE_FIELDS, serialize_doc, to_object_id, utcnow
from syllabus_hub.errors import AuthError, ConflictError, InternalError, ValidationError
from syllabus_hub.logging_config import get_logger
from syllabus_hub.users.user_models import User

logger = get_logger("auth")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

VERIFICATION_TTL = timedelta(hours=24)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def hash_token(token: str) -> str:
    """Verification tokens are stored as SHA256 digests"""
    return hashlib.sha256(token.encode()).hexdigest()


def public_user(user: dict) -> dict:
    return serialize_doc({k: v for k, v in user.items() if k not in USER_PRIVATE_FIELDS})


def _new_verification() -> tuple:
    token = secrets.token_hex(32)
    return token, {
        "verification_token_hash": hash_token(token),
        "verification_expires": utcnow() + VERIFICATION_TTL,
    }

# ==================== REGISTRATION ====================

async def register(db: AsyncIOMotorDatabase, name: str, email: str, password: str) -> dict:
    """
    Create a student account and sign it in.
    The verification email is best-effort: a delivery failure is logged
    and registration still succeeds.
    """
    email = email.lower()
    if await db.users.find_one({"email": email}, {"_id": 1}):
        raise ConflictError("User already exists")

    token, verification = _new_verification()
    user = User(name=name, email=email, password_hash=hash_password(password), **verification)
    doc = user.model_dump()
    try:
        result = await db.users.insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError("User already exists")
    doc["_id"] = result.inserted_id
    logger.info("User registered: %s", result.inserted_id)

    try:
        await email_service.send_verification_email(email, name, token)
    except Exception:
        logger.exception("Failed to send verification email to %s", email)

    return {"user": public_user(doc), **issue_token_pair(doc)}

# ==================== SESSIONS ====================

async def login(db: AsyncIOMotorDatabase, email: str, password: str) -> dict:
    user = await db.users.find_one({"email": email.lower()})
    if not user or not verify_password(password, user["password_hash"]):
        raise AuthError("Invalid credentials")
    return {"user": public_user(user), **issue_token_pair(user)}


async def refresh(db: AsyncIOMotorDatabase, refresh_token: str) -> dict:
    """Rotate both tokens; the user must still exist"""
    try:
        claims = verify_refresh_token(refresh_token)
    except AuthError:
        raise AuthError("Invalid refresh token")
    user = await db.users.find_one({"_id": to_object_id(claims["sub"], "user id")})
    if not user:
        raise AuthError("Invalid refresh token")
    return issue_token_pair(user)

# ==================== EMAIL VERIFICATION ====================

async def verify_email(db: AsyncIOMotorDatabase, token: str) -> dict:
    user = await db.users.find_one({
        "verification_token_hash": hash_token(token),
        "verification_expires": {"$gt": utcnow()}
    })
    if not user:
        raise ValidationError("Invalid or expired verification token")

    await db.users.update_one(
        {"_id": user["_id"]},
        {
            "$set": {"is_email_verified": True, "updated_at": utcnow()},
            "$unset": {"verification_token_hash": "", "verification_expires": ""}
        }
    )
    return {"message": "Email verified successfully"}


async def resend_verification(db: AsyncIOMotorDatabase, email: str) -> dict:
    """Unknown addresses get the same reply so accounts cannot be probed"""
    generic = {"message": "If the account exists, a verification email has been sent"}
    user = await db.users.find_one({"email": email.lower()})
    if not user:
        return generic
    if user.get("is_email_verified"):
        raise ValidationError("Email is already verified")

    token, verification = _new_verification()
    await db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {**verification, "updated_at": utcnow()}}
    )
    try:
        await email_service.send_verification_email(user["email"], user.get("name", ""), token)
    except email_service.EmailDeliveryError:
        logger.exception("Verification resend failed for %s", user["email"])
        raise InternalError("Failed to send verification email")
    return generic
