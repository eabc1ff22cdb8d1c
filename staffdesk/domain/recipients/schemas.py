"""Recipient domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RecipientCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    phone_note: Optional[str] = None


class PhoneNoteUpdate(BaseModel):
    phone_note: Optional[str] = None


class RecipientResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    unique_token: str
    email_sent: bool
    phone_note: Optional[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecipientImportRequest(BaseModel):
    content: str


class ImportLineErrorResponse(BaseModel):
    line: int
    content: str
    error: str


class RecipientImportResult(BaseModel):
    success: int
    duplicates: int
    errors: list[ImportLineErrorResponse]
