"""Request/response models for subject content."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateContentRequest(BaseModel):
    subject_id: str
    type: str = Field(..., description="video | pdf | summary | exam")
    title: str
    file_url: str = Field(..., description="Public URL returned by object storage after upload")
    description: Optional[str] = None


class EditContentRequest(BaseModel):
    title: str
    description: Optional[str] = None


class UploadPathRequest(BaseModel):
    subject_id: str
    type: str
    filename: str


class UploadPathResponse(BaseModel):
    bucket: str
    path: str


class ContentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    subject_id: str
    type: str
    title: str
    file_url: str
    description: Optional[str] = None
    created_at: datetime


class ContentListResponse(BaseModel):
    content: List[ContentResponse]


class RemoveContentResponse(BaseModel):
    success: bool
    storage: Optional[UploadPathResponse] = Field(None, description="Stored object the caller should delete")
