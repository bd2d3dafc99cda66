from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime


class ChatCreate(BaseModel):
    uploadId: str
    userMessage: str = Field(..., min_length=1)
    folderID: Optional[str] = None


class ChatMessageIn(BaseModel):
    userMessage: str = Field(..., min_length=1)
