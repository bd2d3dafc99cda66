from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    folderName: str = Field(..., min_length=1)
