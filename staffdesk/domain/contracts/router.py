"""Contract router - intake links, public contract form and admin review"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_admin
from ...database import get_db
from ...rate_limiter import create_rate_limiter
from .schemas import (
    ContractAccept,
    ContractAcceptResponse,
    ContractPrefill,
    ContractRequestResponse,
    ContractResponse,
    ContractSubmit,
    DocumentSide,
    DocumentUploadResponse,
)
from .service import ContractService, serialize_contract

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contracts", tags=["Contracts"])

rate_limit_public_read = create_rate_limiter(limit=60, window_seconds=60, key_prefix="contract_read")
rate_limit_public_write = create_rate_limiter(limit=10, window_seconds=60, key_prefix="contract_write")


def get_contract_service(db: Session = Depends(get_db)) -> ContractService:
    """Dependency injection for ContractService"""
    return ContractService(db)


# ============================================================================
# PUBLIC INTAKE
# ============================================================================


@router.get("/public/{token}", response_model=ContractPrefill)
async def get_contract_form(
    token: str,
    _: None = Depends(rate_limit_public_read),
    service: ContractService = Depends(get_contract_service),
):
    return service.get_prefill(token)


@router.post("/public/{token}/documents/{side}", response_model=DocumentUploadResponse, status_code=201)
async def upload_id_document(
    token: str,
    side: DocumentSide,
    file: UploadFile = File(...),
    _: None = Depends(rate_limit_public_write),
    service: ContractService = Depends(get_contract_service),
):
    """Upload one side of the ID card; the returned key goes into the submission"""
    contents = await file.read()
    return service.upload_id_document(token, side, contents, file.content_type, file.filename)


@router.post("/public/{token}", response_model=ContractResponse, status_code=201)
async def submit_contract(
    token: str,
    data: ContractSubmit,
    _: None = Depends(rate_limit_public_write),
    service: ContractService = Depends(get_contract_service),
):
    contract = service.submit_contract(token, data)
    return serialize_contract(contract, include_document_urls=False)


# ============================================================================
# ADMIN
# ============================================================================


@router.post("/requests/{appointment_id}", response_model=ContractRequestResponse, status_code=201)
async def issue_contract_request(
    appointment_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    return await service.issue_contract_request(appointment_id)


@router.get("/requests", response_model=list[ContractRequestResponse])
async def list_contract_requests(
    appointment_id: int = Query(...),
    _admin: CurrentUser = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    return service.list_contract_requests(appointment_id)


@router.get("", response_model=list[ContractResponse])
async def list_contracts(
    status: Optional[str] = None,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    return [
        serialize_contract(contract, include_document_urls=False)
        for contract in service.list_contracts(status)
    ]


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    return serialize_contract(service.get_contract(contract_id))


@router.post("/{contract_id}/accept", response_model=ContractAcceptResponse)
async def accept_contract(
    contract_id: int,
    data: ContractAccept,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    result = await service.accept_contract(contract_id, data.start_date)
    result["contract"] = serialize_contract(result["contract"], include_document_urls=False)
    return result


@router.post("/{contract_id}/reject", response_model=ContractResponse)
async def reject_contract(
    contract_id: int,
    _admin: CurrentUser = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    return serialize_contract(service.reject_contract(contract_id), include_document_urls=False)
