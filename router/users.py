from fastapi import APIRouter, HTTPException, status

from dependencies import DB, AppSettings, CurrentUser
from models.user import ChangePasswordRequest, PreferencesRequest, UpdateAccountRequest
from router.auth import check_password, hash_password, public_user

router = APIRouter()


def _reload(db, user):
    return db.users.find_one({"_id": user["_id"]}, {"password": 0})


@router.put("/update")
def update_account_info(body: UpdateAccountRequest, user: CurrentUser, db: DB):
    taken = db.users.find_one({"email": body.email, "_id": {"$ne": user["_id"]}})
    if taken:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already in use.")

    db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {
            "firstName": body.firstName,
            "lastName": body.lastName,
            "email": body.email,
            "company": body.company or None,
        }},
    )
    return {"user": public_user(_reload(db, user))}


@router.put("/change-password")
def change_password(body: ChangePasswordRequest, user: CurrentUser, db: DB, settings: AppSettings):
    stored = db.users.find_one({"_id": user["_id"]}, {"password": 1})
    if not check_password(body.currentPassword, stored["password"]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect.")

    db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {"password": hash_password(body.newPassword, settings.bcrypt_rounds)}},
    )
    return {"message": "Password changed successfully."}


@router.put("/preferences")
def update_preferences(body: PreferencesRequest, user: CurrentUser, db: DB):
    db.users.update_one({"_id": user["_id"]}, {"$set": {"preferences": body.preferences}})
    return {"user": public_user(_reload(db, user))}
