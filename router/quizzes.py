from typing import List, Tuple

from fastapi import APIRouter, status

from crud import OwnedCollection, include_owned_routes, serialize, utcnow
from database import QUIZZES
from dependencies import DB, AppSettings, ChatModels, CurrentUser
from generation import GenerationTask, generate_for_upload
from models.common import GenerateFromUpload
from models.quiz import QuizQuestion
from prompts import quiz_prompt

router = APIRouter()

quizzes = OwnedCollection(QUIZZES, "Quiz")


def _quiz_document(value, *, user, upload, folder_id, user_message=None):
    session_name, questions = value
    return {
        "userId": user["_id"],
        "uploadId": upload["_id"],
        "studySession": session_name,
        "questionsJSON": questions,
        "createdDate": utcnow(),
        "folderID": folder_id,
    }


QUIZ_TASK = GenerationTask(
    resource="quiz",
    prompt=quiz_prompt,
    shape=Tuple[str, List[QuizQuestion]],
    expected="[sessionName, [{question, options, answer, explanation}...]]",
    temperature=0.1,
    build_document=_quiz_document,
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_quiz(body: GenerateFromUpload, user: CurrentUser, db: DB,
                      settings: AppSettings, chat_models: ChatModels):
    quiz = await generate_for_upload(
        QUIZ_TASK, quizzes,
        db=db, settings=settings, chat_model_factory=chat_models, user=user,
        upload_id=body.uploadId, user_message=body.userMessage, folder_id=body.folderID,
    )
    return {"message": "Multiple-choice quiz created successfully.", "quiz": serialize(quiz)}


include_owned_routes(router, quizzes)
