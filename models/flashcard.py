from typing import List, Optional

from pydantic import BaseModel, Field


class Flashcard(BaseModel):
    question: str
    answer: str


class FlashcardSessionCreate(BaseModel):
    sessionName: str = Field(..., min_length=1)
    studyCards: List[Flashcard]
    transcript: Optional[str] = None
    uploadId: Optional[str] = None
    folderID: Optional[str] = None


class FlashcardsAppend(BaseModel):
    studyCards: List[Flashcard] = Field(..., min_length=1)


class TranscriptIn(BaseModel):
    transcript: str = Field(..., min_length=1)
