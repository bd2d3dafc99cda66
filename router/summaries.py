from typing import Tuple

from fastapi import APIRouter, status

from crud import OwnedCollection, include_owned_routes, serialize, utcnow
from database import SUMMARIES
from dependencies import DB, AppSettings, ChatModels, CurrentUser
from generation import GenerationTask, generate_for_upload
from models.common import GenerateFromUpload
from prompts import summary_prompt

router = APIRouter()

summaries = OwnedCollection(SUMMARIES, "Summary")


def _summary_document(value, *, user, upload, folder_id, user_message=None):
    session_name, summary = value
    return {
        "userId": user["_id"],
        "uploadId": upload["_id"],
        "studySession": session_name,
        "summary": summary,
        "createdDate": utcnow(),
        "folderID": folder_id,
    }


SUMMARY_TASK = GenerationTask(
    resource="summary",
    prompt=summary_prompt,
    shape=Tuple[str, str],
    expected="[sessionName, summary]",
    temperature=0.2,
    build_document=_summary_document,
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_summary(body: GenerateFromUpload, user: CurrentUser, db: DB,
                         settings: AppSettings, chat_models: ChatModels):
    summary = await generate_for_upload(
        SUMMARY_TASK, summaries,
        db=db, settings=settings, chat_model_factory=chat_models, user=user,
        upload_id=body.uploadId, user_message=body.userMessage, folder_id=body.folderID,
    )
    return {"message": "Summary created successfully.", "summary": serialize(summary)}


include_owned_routes(router, summaries)
