"""
Contract service - employment contract onboarding

After a successful appointment the admin sends an intake link. The candidate
fills in personal, tax and banking data and uploads both sides of their ID card.
Accepting the contract provisions a login and e-mails the credentials.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import CONTRACT_TOKEN_EXPIRE_DAYS
from ...email_service import send_contract_request_email
from ...models import ContractRequestToken, EmploymentContract
from ...services.account_provisioning import (
    EMPLOYEE_ROLE,
    AccountProvisioningError,
    generate_password,
    provision_employee_account,
)
from ...services.notification_service import notify_employment_welcome
from ...services.storage import generate_presigned_url, upload_document
from ...shared.validators import validate_bic, validate_email, validate_iban
from ...utils.sanitization import clean_text
from .repository import ContractRepository
from .schemas import ContractStatus, ContractSubmit, DocumentSide

logger = logging.getLogger(__name__)


def document_prefix(request_token: ContractRequestToken) -> str:
    return f"contract-documents/{request_token.id}"


def serialize_contract(contract: EmploymentContract, include_document_urls: bool = True) -> dict:
    data = {
        "id": contract.id,
        "appointment_id": contract.appointment_id,
        "first_name": contract.first_name,
        "last_name": contract.last_name,
        "email": contract.email,
        "marital_status": contract.marital_status,
        "start_date": contract.start_date,
        "tax_number": contract.tax_number,
        "social_security_number": contract.social_security_number,
        "health_insurance_name": contract.health_insurance_name,
        "iban": contract.iban,
        "bic": contract.bic,
        "bank_name": contract.bank_name,
        "status": contract.status,
        "submitted_at": contract.submitted_at,
        "accepted_at": contract.accepted_at,
        "account_created": contract.account_created,
        "account_created_at": contract.account_created_at,
        "user_id": contract.user_id,
        "id_card_front_url": None,
        "id_card_back_url": None,
    }
    if include_document_urls:
        data["id_card_front_url"] = generate_presigned_url(contract.id_card_front_key)
        data["id_card_back_url"] = generate_presigned_url(contract.id_card_back_key)
    return data


class ContractService:
    """Service layer for contract business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContractRepository()

    # ------------------------------------------------------------------
    # Intake links (admin)
    # ------------------------------------------------------------------

    async def issue_contract_request(self, appointment_id: int) -> ContractRequestToken:
        """Create an intake token for the appointment's recipient and e-mail the link"""
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Termin nicht gefunden")
        recipient = appointment.recipient

        request_token = self.repo.create_request_token(
            self.db,
            appointment_id=appointment.id,
            expires_at=datetime.utcnow() + timedelta(days=CONTRACT_TOKEN_EXPIRE_DAYS),
        )
        logger.info(f"📝 Contract request {request_token.id} issued for appointment {appointment.id}")

        try:
            await send_contract_request_email(
                to=recipient.email,
                first_name=recipient.first_name,
                last_name=recipient.last_name,
                token=request_token.token,
            )
        except Exception as e:
            logger.error(f"❌ Contract request e-mail failed for appointment {appointment.id}: {e}")
            raise HTTPException(status_code=502, detail="E-Mail konnte nicht gesendet werden") from e

        request_token.email_sent = True
        return self.repo.save(self.db, request_token)

    def list_contract_requests(self, appointment_id: int) -> list[ContractRequestToken]:
        return self.repo.list_request_tokens(self.db, appointment_id)

    # ------------------------------------------------------------------
    # Public intake
    # ------------------------------------------------------------------

    def get_valid_request(self, token: str) -> ContractRequestToken:
        request_token = self.repo.get_request_token(self.db, token)
        if not request_token:
            raise HTTPException(status_code=404, detail="Ungültiger Link")
        if request_token.expires_at < datetime.utcnow():
            raise HTTPException(status_code=410, detail="Dieser Link ist abgelaufen")
        return request_token

    def get_prefill(self, token: str) -> dict:
        request_token = self.get_valid_request(token)
        recipient = request_token.appointment.recipient
        return {
            "first_name": recipient.first_name,
            "last_name": recipient.last_name,
            "email": recipient.email,
            "expires_at": request_token.expires_at,
            "already_submitted": self.repo.open_contract_for_appointment(
                self.db, request_token.appointment_id
            )
            is not None,
        }

    def upload_id_document(
        self,
        token: str,
        side: DocumentSide,
        contents: bytes,
        content_type: Optional[str],
        filename: Optional[str] = None,
    ) -> dict:
        request_token = self.get_valid_request(token)
        key = upload_document(
            f"{document_prefix(request_token)}/{side.value}", contents, content_type, filename
        )
        return {"side": side, "key": key}

    def _own_document_key(self, request_token: ContractRequestToken, key: Optional[str], side: str):
        """Only keys produced by this token's own uploads are accepted"""
        if not key:
            return None
        if not key.startswith(f"{document_prefix(request_token)}/{side}/"):
            raise HTTPException(status_code=400, detail="Ungültiges Dokument")
        return key

    def submit_contract(self, token: str, data: ContractSubmit) -> EmploymentContract:
        request_token = self.get_valid_request(token)

        if self.repo.open_contract_for_appointment(self.db, request_token.appointment_id):
            raise HTTPException(status_code=409, detail="Die Vertragsdaten wurden bereits übermittelt")

        try:
            email = validate_email(data.email)
            iban = validate_iban(data.iban)
            bic = validate_bic(data.bic)
            marital_status = clean_text(data.marital_status, max_length=50)
            bank_name = clean_text(data.bank_name, max_length=255)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        contract = self.repo.create_contract(
            self.db,
            appointment_id=request_token.appointment_id,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            email=email,
            marital_status=marital_status,
            start_date=data.start_date,
            tax_number=data.tax_number.strip(),
            social_security_number=data.social_security_number.strip(),
            health_insurance_name=data.health_insurance_name.strip(),
            iban=iban,
            bic=bic,
            bank_name=bank_name,
            id_card_front_key=self._own_document_key(request_token, data.id_card_front_key, "front"),
            id_card_back_key=self._own_document_key(request_token, data.id_card_back_key, "back"),
            status=ContractStatus.PENDING.value,
        )
        logger.info(f"✅ Employment contract {contract.id} submitted")
        return contract

    # ------------------------------------------------------------------
    # Review (admin)
    # ------------------------------------------------------------------

    def list_contracts(self, status: Optional[str] = None) -> list[EmploymentContract]:
        return self.repo.list_contracts(self.db, status)

    def get_contract(self, contract_id: int) -> EmploymentContract:
        contract = self.repo.get_contract(self.db, contract_id)
        if not contract:
            raise HTTPException(status_code=404, detail="Vertrag nicht gefunden")
        return contract

    def _ensure_pending(self, contract: EmploymentContract):
        if contract.status != ContractStatus.PENDING.value:
            raise HTTPException(
                status_code=409,
                detail=f"Vertrag wurde bereits bearbeitet (Status: {contract.status})",
            )

    async def accept_contract(self, contract_id: int, start_date: date) -> dict:
        """
        Accept a pending contract and provision the employee's login

        The generated password only travels in the welcome e-mail; it is not stored.
        """
        contract = self.get_contract(contract_id)
        self._ensure_pending(contract)

        password = generate_password()
        try:
            user_id, account_existed = await provision_employee_account(
                email=contract.email,
                first_name=contract.first_name,
                last_name=contract.last_name,
                password=password,
            )
        except AccountProvisioningError as e:
            logger.error(f"❌ Account provisioning failed for contract {contract.id}: {e}")
            raise HTTPException(status_code=502, detail="Benutzerkonto konnte nicht angelegt werden") from e

        now = datetime.utcnow()
        contract.status = ContractStatus.ACCEPTED.value
        contract.start_date = start_date
        contract.accepted_at = now
        contract.account_created = True
        contract.account_created_at = now
        contract.user_id = user_id
        self.repo.assign_role(self.db, user_id, EMPLOYEE_ROLE)
        contract = self.repo.save(self.db, contract)
        logger.info(f"✅ Contract {contract.id} accepted")

        notification = await notify_employment_welcome(
            email=contract.email,
            first_name=contract.first_name,
            last_name=contract.last_name,
            password=password,
            start_date=start_date,
            account_existed=account_existed,
        )
        if not notification["sent"]:
            logger.warning(f"⚠️ Contract {contract.id} was accepted but the welcome e-mail failed")

        action = "account updated" if account_existed else "account created"
        return {
            "contract": contract,
            "user_id": user_id,
            "is_new_account": not account_existed,
            "email_sent": notification["sent"],
            "message": f"Contract accepted and {action} successfully",
        }

    def reject_contract(self, contract_id: int) -> EmploymentContract:
        contract = self.get_contract(contract_id)
        self._ensure_pending(contract)
        contract.status = ContractStatus.REJECTED.value
        contract = self.repo.save(self.db, contract)
        logger.info(f"🚫 Contract {contract.id} rejected")
        return contract
