from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class GenerateFromUpload(BaseModel):
    uploadId: str
    userMessage: Optional[str] = None
    folderID: Optional[str] = None


class RenameRequest(BaseModel):
    newName: str = Field(..., min_length=1, validation_alias=AliasChoices("newName", "sessionName"))


class AssignFolderRequest(BaseModel):
    folderID: Optional[str] = None
