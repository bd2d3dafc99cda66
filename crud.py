"""Owner-scoped CRUD shared by every study resource collection.

Every query filters on ``userId`` so a document owned by someone else is
indistinguishable from a missing one (404).
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException, status

from dependencies import DB, CurrentUser
from models.common import AssignFolderRequest, RenameRequest


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Any, label: str = "id") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid {label}.")


def folder_value(folder_id: Optional[str]) -> Optional[str]:
    """Path and form values spell "no folder" as the string ``"null"``."""
    if folder_id in (None, "", "null"):
        return None
    return folder_id


def _plain(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, tuple):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = {"id": str(doc["_id"])}
    for key, value in doc.items():
        if key in ("_id", "password"):
            continue
        out[key] = _plain(value)
    return out


def ensure_folder(db, folder_id: Optional[str], user: Dict[str, Any]) -> Optional[str]:
    folder_id = folder_value(folder_id)
    if folder_id is None:
        return None
    folder = db.folders.find_one({"_id": parse_object_id(folder_id, "folderID"), "userId": user["_id"]})
    if not folder:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Folder not found.")
    return folder_id


class OwnedCollection:
    def __init__(self, collection_name: str, label: str, name_field: str = "studySession"):
        self.collection_name = collection_name
        self.label = label
        self.name_field = name_field

    def _not_found(self) -> HTTPException:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{self.label} not found.")

    def _owned(self, resource_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
        return {"_id": parse_object_id(resource_id), "userId": user["_id"]}

    def insert(self, db, doc: Dict[str, Any]) -> Dict[str, Any]:
        result = db[self.collection_name].insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def count(self, db, user: Dict[str, Any]) -> int:
        return db[self.collection_name].count_documents({"userId": user["_id"]})

    def get(self, db, resource_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
        doc = db[self.collection_name].find_one(self._owned(resource_id, user))
        if not doc:
            raise self._not_found()
        return doc

    def list(self, db, user: Dict[str, Any]) -> List[Dict[str, Any]]:
        return list(db[self.collection_name].find({"userId": user["_id"]}))

    def by_folder(self, db, user: Dict[str, Any], folder_id: Optional[str]) -> List[Dict[str, Any]]:
        query = {"userId": user["_id"], "folderID": folder_value(folder_id)}
        return list(db[self.collection_name].find(query))

    def update(self, db, resource_id: str, user: Dict[str, Any], changes: Dict[str, Any]) -> None:
        result = db[self.collection_name].update_one(self._owned(resource_id, user), changes)
        if result.matched_count == 0:
            raise self._not_found()

    def rename(self, db, resource_id: str, user: Dict[str, Any], new_name: str) -> None:
        self.update(db, resource_id, user, {"$set": {self.name_field: new_name, "updatedDate": utcnow()}})

    def assign_folder(self, db, resource_id: str, user: Dict[str, Any], folder_id: Optional[str]) -> None:
        self.get(db, resource_id, user)
        folder_id = ensure_folder(db, folder_id, user)
        self.update(db, resource_id, user, {"$set": {"folderID": folder_id}})

    def delete(self, db, resource_id: str, user: Dict[str, Any]) -> None:
        result = db[self.collection_name].delete_one(self._owned(resource_id, user))
        if result.deleted_count == 0:
            raise self._not_found()


def include_owned_routes(router: APIRouter, resources: OwnedCollection) -> None:
    """Register list / by-folder / get / delete / rename / assign-folder."""
    label = resources.label

    @router.get("")
    def list_resources(user: CurrentUser, db: DB):
        return {"data": [serialize(doc) for doc in resources.list(db, user)]}

    @router.get("/folder/{folder_id}")
    def list_resources_by_folder(folder_id: str, user: CurrentUser, db: DB):
        return {"data": [serialize(doc) for doc in resources.by_folder(db, user, folder_id)]}

    @router.get("/{resource_id}")
    def get_resource(resource_id: str, user: CurrentUser, db: DB):
        return {"data": serialize(resources.get(db, resource_id, user))}

    @router.delete("/{resource_id}")
    def delete_resource(resource_id: str, user: CurrentUser, db: DB):
        resources.delete(db, resource_id, user)
        return {"message": f"{label} deleted successfully."}

    @router.put("/{resource_id}/name")
    def rename_resource(resource_id: str, body: RenameRequest, user: CurrentUser, db: DB):
        resources.rename(db, resource_id, user, body.newName)
        return {"message": f"{label} renamed successfully."}

    @router.put("/{resource_id}/folder")
    def assign_resource_folder(resource_id: str, body: AssignFolderRequest, user: CurrentUser, db: DB):
        resources.assign_folder(db, resource_id, user, body.folderID)
        return {"message": f"Folder assigned to {label.lower()} successfully."}
