from typing import Tuple

from fastapi import APIRouter, status
from langchain_core.messages import AIMessage, HumanMessage

from crud import OwnedCollection, include_owned_routes, serialize, utcnow
from database import AICHATS
from dependencies import DB, AppSettings, ChatModels, CurrentUser
from generation import GenerationTask, find_upload, generate_for_upload, generate_value
from models.chat import ChatCreate, ChatMessageIn, ChatTurn
from prompts import chat_prompt

router = APIRouter()

chats = OwnedCollection(AICHATS, "Chat")

HISTORY_TURNS = 10


def _turns(user_message: str, answer: str):
    now = utcnow()
    return [
        ChatTurn(role="user", content=user_message, timestamp=now).model_dump(),
        ChatTurn(role="assistant", content=answer, timestamp=now).model_dump(),
    ]


def _chat_document(value, *, user, upload, folder_id, user_message=None):
    chat_name, answer = value
    return {
        "userId": user["_id"],
        "uploadId": upload["_id"],
        "studySession": chat_name,
        "messagesJSON": _turns(user_message, answer),
        "createdDate": utcnow(),
        "folderID": folder_id,
    }


CHAT_TASK = GenerationTask(
    resource="chat",
    prompt=chat_prompt,
    shape=Tuple[str, str],
    expected="[chatName, answer]",
    temperature=0.5,
    build_document=_chat_document,
)


def _history(chat):
    messages = []
    for turn in chat.get("messagesJSON", [])[-HISTORY_TURNS:]:
        if turn["role"] == "user":
            messages.append(HumanMessage(content=turn["content"]))
        else:
            messages.append(AIMessage(content=turn["content"]))
    return messages


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_chat(body: ChatCreate, user: CurrentUser, db: DB,
                      settings: AppSettings, chat_models: ChatModels):
    chat = await generate_for_upload(
        CHAT_TASK, chats,
        db=db, settings=settings, chat_model_factory=chat_models, user=user,
        upload_id=body.uploadId, user_message=body.userMessage, folder_id=body.folderID,
    )
    return {"message": "Chat created successfully.", "chat": serialize(chat)}


@router.post("/{chat_id}/messages")
async def continue_chat(chat_id: str, body: ChatMessageIn, user: CurrentUser, db: DB,
                        settings: AppSettings, chat_models: ChatModels):
    chat = chats.get(db, chat_id, user)
    upload = find_upload(db, str(chat["uploadId"]), user)

    # the model proposes a name every turn; the stored one is kept
    _, answer = await generate_value(CHAT_TASK, settings, chat_models,
                                     user_message=body.userMessage, history=_history(chat),
                                     transcript=upload["transcript"])

    new_turns = _turns(body.userMessage, answer)
    chats.update(db, chat_id, user, {
        "$push": {"messagesJSON": {"$each": new_turns}},
        "$set": {"updatedDate": utcnow()},
    })
    return {"message": "Message added successfully.", "reply": answer, "messages": new_turns}


include_owned_routes(router, chats)
