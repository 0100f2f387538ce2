"""Wire format of the assistant endpoint (camelCase, as the portals send it)."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageIn(BaseModel):
    role: str
    content: str


class AiChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: List[ChatMessageIn] = Field(default_factory=list)
    subject_name: str = Field(..., alias="subjectName")
    subject_id: Optional[str] = Field(None, alias="subjectId")
    stage: Optional[str] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    is_admin: bool = Field(False, alias="isAdmin")


class AiChatResponse(BaseModel):
    response: str
