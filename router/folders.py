from fastapi import APIRouter, status

from crud import OwnedCollection, serialize, utcnow
from database import FOLDERS
from dependencies import DB, CurrentUser
from models.common import RenameRequest
from models.folder import FolderCreate

router = APIRouter()

folders = OwnedCollection(FOLDERS, "Folder", name_field="folderName")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_folder(body: FolderCreate, user: CurrentUser, db: DB):
    folder = folders.insert(db, {
        "userId": user["_id"],
        "folderName": body.folderName,
        "createdAt": utcnow(),
    })
    return {"message": "Folder created successfully.", "folder": serialize(folder)}


@router.get("")
def get_folders(user: CurrentUser, db: DB):
    return {"folders": [serialize(folder) for folder in folders.list(db, user)]}


@router.put("/{folder_id}/name")
def rename_folder(folder_id: str, body: RenameRequest, user: CurrentUser, db: DB):
    folders.rename(db, folder_id, user, body.newName)
    return {"message": "Folder renamed successfully."}


@router.delete("/{folder_id}")
def delete_folder(folder_id: str, user: CurrentUser, db: DB):
    # resources keep their folderID and show up as unfoldered
    folders.delete(db, folder_id, user)
    return {"message": "Folder deleted successfully."}
