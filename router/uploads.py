import logging
import os
from typing import Optional, Tuple

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from config import Settings
from crud import OwnedCollection, ensure_folder, include_owned_routes, serialize, utcnow
from database import UPLOADS
from dependencies import DB, AppSettings, CurrentUser, Extractor
from extraction import ALLOWED_TYPES, TXT, AsyncDocumentExtractor, FileTooLarge
from models.upload import UploadFromText

logger = logging.getLogger(__name__)

router = APIRouter()

uploads = OwnedCollection(UPLOADS, "Upload", name_field="fileName")


def _validate_file(file: UploadFile) -> None:
    if file.content_type not in ALLOWED_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Invalid file type. Only PDF, Word, and TXT files are allowed.")


async def read_upload_transcript(file: UploadFile, extractor: AsyncDocumentExtractor,
                                 settings: Settings) -> Tuple[str, str]:
    """Return ``(transcript, content_type)``; the temporary copy never outlives the call."""
    _validate_file(file)
    try:
        dest_path = await extractor.save_upload(file, settings.max_upload_bytes)
    except FileTooLarge:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail=f"File too large. Maximum size is {limit_mb} MB.")

    try:
        transcript = await extractor.extract_text_async(dest_path, file.content_type)
    except Exception as exc:
        logger.exception("File processing error for %s", file.filename)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Failed to process the file.") from exc
    finally:
        extractor.discard(dest_path)
    return transcript, file.content_type


@router.post("")
async def upload_file(user: CurrentUser, db: DB, settings: AppSettings, extractor: Extractor,
                      file: UploadFile = File(...), folderID: Optional[str] = Form(None)):
    folder_id = ensure_folder(db, folderID, user)
    transcript, content_type = await read_upload_transcript(file, extractor, settings)

    upload = uploads.insert(db, {
        "userId": user["_id"],
        "fileType": content_type,
        "fileName": os.path.basename(file.filename or "Untitled"),
        "transcript": transcript,
        "uploadedAt": utcnow(),
        "folderID": folder_id,
    })
    return {"message": "File uploaded successfully.", "upload": serialize(upload)}


@router.post("/text", status_code=status.HTTP_201_CREATED)
def create_upload_from_text(body: UploadFromText, user: CurrentUser, db: DB):
    folder_id = ensure_folder(db, body.folderID, user)
    upload = uploads.insert(db, {
        "userId": user["_id"],
        "fileType": TXT,
        "fileName": body.fileName or "Untitled",
        "transcript": body.transcript,
        "uploadedAt": utcnow(),
        "folderID": folder_id,
    })
    return {"message": "Created upload from text.", "upload": serialize(upload)}


include_owned_routes(router, uploads)
