"""Contract domain schemas - employment contract intake and review"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ContractStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class DocumentSide(str, Enum):
    FRONT = "front"
    BACK = "back"


class ContractRequestResponse(BaseModel):
    """Admin view of an issued intake link"""

    id: int
    appointment_id: int
    token: str
    email_sent: bool
    expires_at: datetime
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContractPrefill(BaseModel):
    """What the intake form shows before the candidate has typed anything"""

    first_name: str
    last_name: str
    email: str
    expires_at: datetime
    already_submitted: bool = False


class DocumentUploadResponse(BaseModel):
    side: DocumentSide
    key: str


class ContractSubmit(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    marital_status: Optional[str] = Field(None, max_length=50)
    start_date: date
    tax_number: str = Field(..., min_length=1, max_length=50)
    social_security_number: str = Field(..., min_length=1, max_length=50)
    health_insurance_name: str = Field(..., min_length=1, max_length=255)
    iban: str = Field(..., min_length=15, max_length=50)
    bic: Optional[str] = Field(None, max_length=20)
    bank_name: Optional[str] = Field(None, max_length=255)
    id_card_front_key: Optional[str] = None
    id_card_back_key: Optional[str] = None


class ContractAccept(BaseModel):
    start_date: date


class ContractResponse(BaseModel):
    id: int
    appointment_id: Optional[int]
    first_name: str
    last_name: str
    email: str
    marital_status: Optional[str]
    start_date: date
    tax_number: str
    social_security_number: str
    health_insurance_name: str
    iban: str
    bic: Optional[str]
    bank_name: Optional[str]
    status: str
    submitted_at: Optional[datetime]
    accepted_at: Optional[datetime]
    account_created: bool
    account_created_at: Optional[datetime]
    user_id: Optional[str]
    id_card_front_url: Optional[str] = None
    id_card_back_url: Optional[str] = None


class ContractAcceptResponse(BaseModel):
    contract: ContractResponse
    user_id: str
    is_new_account: bool
    email_sent: bool
    message: str
