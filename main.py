import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings
from database import Database
from extraction import AsyncDocumentExtractor
from generation import build_chat_model
from limiter import build_limiter
from router import (auth, chats, checkout, flashcards, folders, notion, public, quizzes, summaries,
                    transcripts, uploads, users, webhook)

logger = logging.getLogger("app")


def _validation_message(exc: RequestValidationError) -> str:
    error = exc.errors()[0]
    field = next((str(part) for part in reversed(error.get("loc", ())) if not isinstance(part, int)), "request")
    if error.get("type") == "missing":
        return f"{field} is required."
    return f"Invalid {field}: {error.get('msg')}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": _validation_message(exc)})


async def database_exception_handler(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": "Database error."})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content={"error": "Internal Server Error"})


def create_app(settings: Settings = None, database: Database = None, chat_model_factory=None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    database = database or Database(settings.mongodb_uri, settings.mongodb_db)
    extractor = AsyncDocumentExtractor(settings.upload_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.connect()
        yield
        extractor.shutdown()
        database.close()

    app = FastAPI(title="StudyBuddy", lifespan=lifespan)

    app.state.settings = settings
    app.state.database = database
    app.state.chat_model_factory = chat_model_factory or (lambda temperature: build_chat_model(settings, temperature))
    app.state.extractor = extractor

    limiter = build_limiter(settings)
    app.state.limiter = limiter

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(PyMongoError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(uploads.router, prefix="/api/uploads", tags=["uploads"])
    app.include_router(flashcards.router, prefix="/api/flashcards", tags=["flashcards"])
    app.include_router(quizzes.router, prefix="/api/quizzes", tags=["quizzes"])
    app.include_router(summaries.router, prefix="/api/summaries", tags=["summaries"])
    app.include_router(chats.router, prefix="/api/chats", tags=["chats"])
    app.include_router(folders.router, prefix="/api/folders", tags=["folders"])
    app.include_router(checkout.router, prefix="/api/checkout", tags=["checkout"])
    app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])
    app.include_router(notion.router, prefix="/api/notion", tags=["notion"])
    app.include_router(public.build_router(limiter), tags=["public"])
    app.include_router(transcripts.router, tags=["transcripts"])

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)
