from typing import Optional

from pydantic import BaseModel, Field


class UploadFromText(BaseModel):
    transcript: str = Field(..., min_length=1)
    fileName: Optional[str] = None
    folderID: Optional[str] = None
