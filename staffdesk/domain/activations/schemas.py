"""SMS activation domain schemas"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACTIVATED = "activated"
    SMS_REQUESTED = "sms_requested"
    COMPLETED = "completed"


class PhoneNumberCreate(BaseModel):
    phone: str = Field(..., min_length=3, max_length=50)
    access_code: str = Field(..., min_length=1, max_length=50)
    source_url: Optional[str] = None
    source_domain: Optional[str] = None


class PhoneNumberResponse(BaseModel):
    id: int
    phone: str
    access_code: str
    is_used: bool
    used_at: Optional[datetime]
    source_url: Optional[str]
    source_domain: Optional[str]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActivationSubmit(BaseModel):
    phone: str
    access_code: str


class ActivationStatusResponse(BaseModel):
    """What the requesting user sees while waiting for their code"""

    short_id: str
    status: str
    phone: str
    sms_code: Optional[str] = None


class ActivationRequestResponse(BaseModel):
    id: int
    short_id: str
    status: str
    sms_code: Optional[str]
    phone_number_id: int
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
