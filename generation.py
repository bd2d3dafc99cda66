"""Shared flow behind flashcard, quiz, summary and chat generation.

upload lookup -> prompt -> one chat completion -> fence strip -> JSON parse
-> shape validation -> single insert. Nothing is written unless the model
reply parses and validates.
"""
import json
import logging
import re
from typing import Any, Callable, Dict, Literal, Optional, Sequence, Union

from fastapi import HTTPException, status
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from config import Settings
from crud import OwnedCollection, ensure_folder, parse_object_id
from prompts import DEFAULT_REQUEST

logger = logging.getLogger(__name__)

# optional language tag after the opening fence, whitespace on either side
FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\n?(.*?)\s*```$", re.DOTALL)


class Ok(BaseModel):
    kind: Literal["ok"] = "ok"
    value: Any


class ParseError(BaseModel):
    kind: Literal["parse_error"] = "parse_error"
    raw: str
    message: str


class ValidationError(BaseModel):
    kind: Literal["validation_error"] = "validation_error"
    raw: str
    message: str


GenerationResult = Union[Ok, ParseError, ValidationError]


class GenerationTask:
    """One kind of generated resource.

    ``prompt`` builds the system prompt from keyword arguments (always
    ``transcript``), ``shape`` is the type the reply must validate against and
    ``build_document`` turns the validated value into the stored document.
    """

    def __init__(self, resource: str, prompt: Callable[..., str], shape: Any, expected: str,
                 temperature: float = 0.2, build_document: Optional[Callable[..., Dict[str, Any]]] = None):
        self.resource = resource
        self.prompt = prompt
        self.shape = TypeAdapter(shape)
        self.expected = expected
        self.temperature = temperature
        self.build_document = build_document


def build_chat_model(settings: Settings, temperature: float) -> ChatOpenAI:
    return ChatOpenAI(
        model=settings.openai_model,
        api_key=settings.openai_api_key,
        max_tokens=settings.openai_max_tokens,
        temperature=temperature,
    )


def strip_code_fence(text: str) -> str:
    text = text.strip()
    match = FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


def interpret_reply(text: str, shape: TypeAdapter) -> GenerationResult:
    cleaned = strip_code_fence(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return ParseError(raw=cleaned, message=str(exc))
    try:
        value = shape.validate_python(parsed)
    except PydanticValidationError as exc:
        return ValidationError(raw=cleaned, message=str(exc))
    return Ok(value=shape.dump_python(value))


async def complete(chat_model, system_prompt: str, user_message: Optional[str] = None,
                   history: Sequence[BaseMessage] = ()) -> str:
    messages = [SystemMessage(content=system_prompt), *history,
                HumanMessage(content=(user_message or "").strip() or DEFAULT_REQUEST)]
    response = await chat_model.ainvoke(messages)
    return response.content


def require_api_key(settings: Settings) -> None:
    if not settings.openai_api_key:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="OpenAI API key is not configured.")


def find_upload(db, upload_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    upload = db.uploads.find_one({"_id": parse_object_id(upload_id, "uploadId"), "userId": user["_id"]})
    if not upload:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail="Upload not found or not owned by user.")
    return upload


async def generate_value(task: GenerationTask, settings: Settings, chat_model_factory, *,
                         user_message: Optional[str] = None, history: Sequence[BaseMessage] = (),
                         **prompt_vars) -> Any:
    require_api_key(settings)
    system_prompt = task.prompt(**prompt_vars)
    try:
        reply = await complete(chat_model_factory(task.temperature), system_prompt, user_message, history)
    except Exception as exc:
        logger.exception("Error generating %s via OpenAI", task.resource)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail=f"Error generating {task.resource} via OpenAI.") from exc

    result = interpret_reply(reply, task.shape)
    if isinstance(result, ParseError):
        logger.error("Error parsing %s JSON: %s\n%s", task.resource, result.message, result.raw)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail=f"Failed to parse {task.resource} JSON.")
    if isinstance(result, ValidationError):
        logger.error("Invalid %s format: %s\n%s", task.resource, result.message, result.raw)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail=f"Invalid format: Expected {task.expected}.")
    return result.value


async def generate_for_upload(task: GenerationTask, resources: OwnedCollection, *, db, settings: Settings,
                              chat_model_factory, user: Dict[str, Any], upload_id: str,
                              user_message: Optional[str] = None,
                              folder_id: Optional[str] = None) -> Dict[str, Any]:
    upload = find_upload(db, upload_id, user)
    folder_id = ensure_folder(db, folder_id, user)
    value = await generate_value(task, settings, chat_model_factory,
                                 user_message=user_message, transcript=upload["transcript"])
    doc = task.build_document(value, user=user, upload=upload, folder_id=folder_id, user_message=user_message)
    return resources.insert(db, doc)
