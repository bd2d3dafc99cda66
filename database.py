import logging

from pymongo import MongoClient

logger = logging.getLogger(__name__)

USERS = "users"
UPLOADS = "uploads"
FLASHCARDS = "flashcards"
QUIZZES = "multiple-choice-quizzes"
SUMMARIES = "summaries"
AICHATS = "aichats"
FOLDERS = "folders"


class Database:
    """Owns the MongoDB client for the lifetime of the application.

    ``client_factory`` is ``MongoClient`` in production; tests pass
    ``mongomock.MongoClient``.
    """

    def __init__(self, uri: str, name: str, client_factory=MongoClient):
        self.uri = uri
        self.name = name
        self.client_factory = client_factory
        self.client = None
        self.db = None

    def connect(self):
        if self.db is not None:
            return self.db
        try:
            self.client = self.client_factory(self.uri)
            self.db = self.client[self.name]
        except Exception:
            logger.exception("❌ MongoDB connection failed")
            raise
        logger.info("✅ MongoDB connection successful (%s)", self.name)
        return self.db

    def close(self):
        if self.client is not None:
            self.client.close()
        self.client = None
        self.db = None

    def __getitem__(self, collection_name: str):
        if self.db is None:
            raise RuntimeError("Database is not connected")
        return self.db[collection_name]

    @property
    def users(self):
        return self[USERS]

    @property
    def uploads(self):
        return self[UPLOADS]

    @property
    def folders(self):
        return self[FOLDERS]
