from fastapi import APIRouter, File, Request, UploadFile
from slowapi import Limiter

from dependencies import AppSettings, ChatModels, Extractor
from generation import generate_value
from limiter import PUBLIC_GENERATION_LIMIT
from models.flashcard import TranscriptIn
from router.flashcards import FLASHCARDS_TASK
from router.uploads import read_upload_transcript


def build_router(limiter: Limiter) -> APIRouter:
    """Unauthenticated routes; generation is limited by the app's own limiter."""
    router = APIRouter()

    @router.post("/api/upload-public")
    async def upload_public(settings: AppSettings, extractor: Extractor, file: UploadFile = File(...)):
        transcript, _ = await read_upload_transcript(file, extractor, settings)
        return {"transcript": transcript}

    @router.post("/api/flashcards-public/generate")
    @limiter.limit(PUBLIC_GENERATION_LIMIT)
    async def generate_public_flashcards(request: Request, body: TranscriptIn,
                                         settings: AppSettings, chat_models: ChatModels):
        flashcards = await generate_value(FLASHCARDS_TASK, settings, chat_models, transcript=body.transcript)
        return {"flashcards": flashcards}

    return router
