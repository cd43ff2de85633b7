"""Consent API routes"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from legal_compliance.api.deps import get_caller, get_consent_service
from legal_compliance.api.schemas import ConsentWithdrawRequest, DeletionRequest
from legal_compliance.models.audit import AuditEvent, AuditEventType, AuditQuery
from legal_compliance.models.consent import ConsentRecord, ConsentUpdate
from legal_compliance.models.user import Caller, UserLifecycle
from legal_compliance.services.consent import ConsentService

router = APIRouter()


@router.get("/api/consent/me", response_model=Optional[ConsentRecord])
def get_my_consent(
    caller: Caller = Depends(get_caller),
    service: ConsentService = Depends(get_consent_service),
):
    return service.get_my_consent(caller)


@router.patch("/api/consent/me", response_model=ConsentRecord)
def update_my_consent(
    update: ConsentUpdate,
    caller: Caller = Depends(get_caller),
    service: ConsentService = Depends(get_consent_service),
):
    """Partially update consent grants; omitted grants are left as they are."""
    return service.update_my_consent(caller, update)


@router.post("/api/consent/me/withdraw", response_model=ConsentRecord)
def withdraw_my_consent(
    request: ConsentWithdrawRequest,
    caller: Caller = Depends(get_caller),
    service: ConsentService = Depends(get_consent_service),
):
    """Withdraw optional grants. Required grants are refused with 409."""
    return service.withdraw_my_consent(caller, request.types, request.reason)


@router.get("/api/consent/me/audit", response_model=List[AuditEvent])
def get_my_consent_audit_log(
    limit: Optional[int] = Query(None, ge=1, le=500),
    event_type: Optional[AuditEventType] = Query(None),
    from_timestamp: Optional[datetime] = Query(None, alias="from"),
    to_timestamp: Optional[datetime] = Query(None, alias="to"),
    caller: Caller = Depends(get_caller),
    service: ConsentService = Depends(get_consent_service),
):
    query = AuditQuery(
        limit=limit,
        event_type=event_type,
        from_timestamp=from_timestamp,
        to_timestamp=to_timestamp,
    )
    return service.get_my_audit_log(caller, query)


@router.post("/api/consent/me/export-request", response_model=UserLifecycle)
def request_data_export(
    caller: Caller = Depends(get_caller),
    service: ConsentService = Depends(get_consent_service),
):
    return service.request_data_export(caller)


@router.post("/api/consent/me/deletion-request", response_model=UserLifecycle)
def request_deletion(
    request: DeletionRequest,
    caller: Caller = Depends(get_caller),
    service: ConsentService = Depends(get_consent_service),
):
    return service.request_deletion(caller, request.reason)
