from typing import List, Tuple

from fastapi import APIRouter, HTTPException, status

from crud import OwnedCollection, ensure_folder, include_owned_routes, serialize, utcnow
from database import FLASHCARDS
from dependencies import DB, AppSettings, ChatModels, CurrentUser
from generation import GenerationTask, find_upload, generate_for_upload, generate_value
from models.common import GenerateFromUpload
from models.flashcard import Flashcard, FlashcardsAppend, FlashcardSessionCreate
from prompts import flashcards_prompt, more_flashcards_prompt

router = APIRouter()

flashcards = OwnedCollection(FLASHCARDS, "Flashcard session")


def _session_document(value, *, user, upload, folder_id, user_message=None):
    session_name, cards = value
    return {
        "userId": user["_id"],
        "uploadId": upload["_id"],
        "studySession": session_name,
        "flashcardsJSON": cards,
        "transcript": upload["transcript"],
        "createdDate": utcnow(),
        "folderID": folder_id,
    }


FLASHCARDS_TASK = GenerationTask(
    resource="flashcards",
    prompt=flashcards_prompt,
    shape=Tuple[str, List[Flashcard]],
    expected="[sessionName, [{question, answer}...]]",
    temperature=0.1,
    build_document=_session_document,
)

MORE_FLASHCARDS_TASK = GenerationTask(
    resource="flashcards",
    prompt=more_flashcards_prompt,
    shape=List[Flashcard],
    expected="[{question, answer}...]",
    temperature=0.3,
)


def _enforce_session_limit(db, user, settings) -> None:
    if user.get("accountType", "free") != "free":
        return
    if flashcards.count(db, user) >= settings.free_flashcard_session_limit:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You have reached the maximum number of study sessions allowed for free accounts.",
        )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_flashcard_session(body: FlashcardSessionCreate, user: CurrentUser, db: DB, settings: AppSettings):
    _enforce_session_limit(db, user, settings)
    folder_id = ensure_folder(db, body.folderID, user)

    transcript = body.transcript
    upload_id = None
    if body.uploadId:
        upload = find_upload(db, body.uploadId, user)
        upload_id = upload["_id"]
        transcript = transcript or upload["transcript"]

    session = flashcards.insert(db, {
        "userId": user["_id"],
        "uploadId": upload_id,
        "studySession": body.sessionName,
        "flashcardsJSON": [card.model_dump() for card in body.studyCards],
        "transcript": transcript,
        "createdDate": utcnow(),
        "folderID": folder_id,
    })
    return {"message": "Flashcard session created successfully.", "flashcard": serialize(session)}


@router.post("/generate", status_code=status.HTTP_201_CREATED)
async def generate_flashcard_session(body: GenerateFromUpload, user: CurrentUser, db: DB,
                                     settings: AppSettings, chat_models: ChatModels):
    _enforce_session_limit(db, user, settings)
    session = await generate_for_upload(
        FLASHCARDS_TASK, flashcards,
        db=db, settings=settings, chat_model_factory=chat_models, user=user,
        upload_id=body.uploadId, user_message=body.userMessage, folder_id=body.folderID,
    )
    return {"message": "Flashcard session created successfully.", "flashcard": serialize(session)}


@router.put("/{session_id}")
def add_flashcards_to_session(session_id: str, body: FlashcardsAppend, user: CurrentUser, db: DB):
    new_cards = [card.model_dump() for card in body.studyCards]
    flashcards.update(db, session_id, user, {
        "$push": {"flashcardsJSON": {"$each": new_cards}},
        "$set": {"updatedDate": utcnow()},
    })
    return {"message": "Flashcards added successfully to the session."}


@router.post("/{session_id}/generate-more")
async def generate_additional_flashcards(session_id: str, user: CurrentUser, db: DB,
                                         settings: AppSettings, chat_models: ChatModels):
    if user.get("accountType", "free") == "free":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="This feature is available for paid accounts only.")

    session = flashcards.get(db, session_id, user)
    transcript = session.get("transcript")
    if not transcript and session.get("uploadId"):
        transcript = find_upload(db, str(session["uploadId"]), user)["transcript"]
    if not transcript:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Flashcard session has no transcript to generate from.")

    existing_questions = [card["question"] for card in session.get("flashcardsJSON", [])]
    new_cards = await generate_value(MORE_FLASHCARDS_TASK, settings, chat_models,
                                     transcript=transcript, existing_questions=existing_questions)

    flashcards.update(db, session_id, user, {
        "$push": {"flashcardsJSON": {"$each": new_cards}},
        "$set": {"updatedDate": utcnow()},
    })
    return {
        "message": "Additional flashcards generated and added successfully.",
        "newFlashcards": new_cards,
    }


include_owned_routes(router, flashcards)
