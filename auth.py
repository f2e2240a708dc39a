import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from passlib.context import CryptContext
from pydantic import BaseModel, EmailStr, Field, model_validator
from pymongo.errors import DuplicateKeyError

from context import AppContext, get_ctx
from database import create_document
from errors import ConflictError, InvalidCredentialsError, UserNotFoundError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# ---------------------- Models ----------------------
class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    # "username" may hold either the username or the email address
    username: Optional[str] = None
    email: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def require_identifier(self):
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self


# ---------------------- Utils ----------------------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        # stored value is not a hash this context understands
        return False


def find_user(ctx: AppContext, identifier: str) -> Optional[dict]:
    users = ctx.collection("users")
    # an exact username match wins over another user's email
    return users.find_one({"username": identifier}) or users.find_one({"email": identifier.lower()})


def public_user(user_doc: dict) -> Dict[str, Any]:
    if not user_doc:
        return {}
    return {
        "id": str(user_doc.get("_id")),
        "username": user_doc.get("username"),
        "email": user_doc.get("email"),
        "role": user_doc.get("role", "user"),
    }


# ---------------------- Routes ----------------------
@router.post("/register")
def register(payload: RegisterRequest, ctx: AppContext = Depends(get_ctx)):
    users = ctx.collection("users")
    email = str(payload.email).lower() if payload.email else None
    if users.find_one({"username": payload.username}):
        raise ConflictError("Username already exists")
    if email and users.find_one({"email": email}):
        raise ConflictError("Email already registered")

    user_doc = {
        "username": payload.username,
        "role": "user",
        "password": hash_password(payload.password),
    }
    if email:
        user_doc["email"] = email
    try:
        create_document(ctx.db, "users", user_doc)
    except DuplicateKeyError:
        raise ConflictError("Username or email already registered")

    logger.info("Registered user %s", payload.username)
    ctx.notifications.create("New Registration", f"{payload.username} registered successfully", "info")
    ctx.activity.log(payload.username, "REGISTER", "User", "New user account created")
    return {"message": "Registration successful!"}


@router.post("/login")
def login(payload: LoginRequest, ctx: AppContext = Depends(get_ctx)):
    if payload.username:
        user = find_user(ctx, payload.username)
    else:
        user = ctx.collection("users").find_one({"email": payload.email.lower()})
    if not user:
        raise UserNotFoundError()
    if not verify_password(payload.password, user.get("password", "")):
        logger.info("Rejected login for %s", user.get("username"))
        raise InvalidCredentialsError()

    ctx.activity.log(user.get("username"), "LOGIN", "User", "User logged in")
    return {"message": "Login successful", "user": public_user(user)}
