import datetime
import logging
from typing import Any, Dict

import bcrypt
import jwt
from fastapi import APIRouter, HTTPException, status

from config import Settings
from dependencies import DB, AppSettings, CurrentUser
from models.user import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter()

PUBLIC_USER_FIELDS = (
    "email", "firstName", "lastName", "company", "accountType", "stripeCustomerId",
    "subscriptionId", "subscriptionStatus", "lastInvoice", "paymentStatus", "preferences",
)


def hash_password(password: str, rounds: int) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def check_password(password: str, hashed) -> bool:
    if isinstance(hashed, str):
        hashed = hashed.encode("utf-8")
    return bcrypt.checkpw(password.encode("utf-8"), hashed)


def create_token(user: Dict[str, Any], settings: Settings) -> str:
    payload = {
        "id": str(user["_id"]),
        "email": user["email"],
        "accountType": user.get("accountType", "free"),
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    out = {"id": str(user["_id"])}
    out.update({field: user.get(field) for field in PUBLIC_USER_FIELDS})
    out["notionConnected"] = bool((user.get("notion") or {}).get("accessToken"))
    return out


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(signup_request: RegisterRequest, db: DB, settings: AppSettings):
    if db.users.find_one({"email": signup_request.email}):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists.")

    new_user = {
        "email": signup_request.email,
        "password": hash_password(signup_request.password, settings.bcrypt_rounds),
        "firstName": signup_request.firstName,
        "lastName": signup_request.lastName,
        "company": signup_request.company or None,
        "accountType": "free",
        "createdAt": datetime.datetime.now(datetime.timezone.utc),
        "stripeCustomerId": None,
        "subscriptionId": None,
        "subscriptionStatus": None,
        "lastInvoice": None,
        "paymentStatus": None,
    }
    resp = db.users.insert_one(new_user)
    new_user["_id"] = resp.inserted_id
    logger.info("Registered user %s", new_user["_id"])

    return {
        "message": "User registered successfully.",
        "token": create_token(new_user, settings),
        "user": public_user(new_user),
    }


@router.post("/login")
def login(login_request: LoginRequest, db: DB, settings: AppSettings):
    user = db.users.find_one({"email": login_request.email})
    if not user or not check_password(login_request.password, user["password"]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials.")

    return {
        "message": "Login successful.",
        "token": create_token(user, settings),
        "user": public_user(user),
    }


@router.post("/refresh")
def refresh_token(user: CurrentUser, settings: AppSettings):
    """Sliding expiration: a still-valid token buys a fresh one."""
    return {"token": create_token(user, settings)}


@router.get("/me")
def get_current_user_data(user: CurrentUser):
    return {"user": public_user(user)}
