from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class NoteRequest(BaseModel):
    title: str = Field(..., max_length=255)
    content: Optional[str] = ""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("content")
    @classmethod
    def default_content(cls, v: Optional[str]) -> str:
        return v or ""


class NoteResponse(BaseModel):
    id: str
    title: str
    content: str
    created_at: datetime = Field(
        ..., validation_alias=AliasChoices("created_at", "createdAt"), serialization_alias="createdAt"
    )
    updated_at: datetime = Field(
        ..., validation_alias=AliasChoices("updated_at", "updatedAt"), serialization_alias="updatedAt"
    )

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
