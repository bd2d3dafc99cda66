import logging
from typing import Annotated, Any, Dict

import jwt
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, Request, status

from config import Settings
from database import Database

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_chat_model_factory(request: Request):
    return request.app.state.chat_model_factory


def get_extractor(request: Request):
    return request.app.state.extractor


AppSettings = Annotated[Settings, Depends(get_app_settings)]
DB = Annotated[Database, Depends(get_database)]
ChatModels = Annotated[Any, Depends(get_chat_model_factory)]
Extractor = Annotated[Any, Depends(get_extractor)]


def decode_token(token: str, settings: Settings) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired.")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token.")


def bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Authorization token missing or invalid.")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Authorization token missing or invalid.")
    return parts[1]


def get_current_user(request: Request, db: DB, settings: AppSettings) -> Dict[str, Any]:
    decoded_token = decode_token(bearer_token(request), settings)

    try:
        user_id = ObjectId(decoded_token.get("id"))
    except (InvalidId, TypeError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token.")

    user = db.users.find_one({"_id": user_id}, {"password": 0})
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found.")
    return user


CurrentUser = Annotated[Dict[str, Any], Depends(get_current_user)]
