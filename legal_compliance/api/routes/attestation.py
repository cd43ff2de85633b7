"""Attestation API routes: submit, read, status and audit trail."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from legal_compliance.api.deps import get_attestation_service, get_caller
from legal_compliance.models.attestation import (
    AttestationPage,
    AttestationRecord,
    AttestationStatus,
    AttestationSubmission,
    SubmitResult,
)
from legal_compliance.models.audit import AuditEvent, AuditQuery
from legal_compliance.models.user import Caller
from legal_compliance.services.attestation import AttestationService

router = APIRouter()


@router.post("/api/attestation", response_model=SubmitResult)
def submit_attestation(
    payload: AttestationSubmission,
    caller: Caller = Depends(get_caller),
    service: AttestationService = Depends(get_attestation_service),
):
    """Submit or resubmit the caller's attestation (lawyers only)."""
    return service.submit(caller, payload)


@router.get("/api/attestation/me", response_model=Optional[AttestationRecord])
def get_my_attestation(
    caller: Caller = Depends(get_caller),
    service: AttestationService = Depends(get_attestation_service),
):
    return service.get_my_attestation(caller)


@router.get("/api/attestation/me/status", response_model=AttestationStatus)
def check_my_attestation_status(
    caller: Caller = Depends(get_caller),
    service: AttestationService = Depends(get_attestation_service),
):
    return service.check_my_status(caller)


@router.get("/api/attestation/me/audit", response_model=List[AuditEvent])
def get_my_attestation_audit_log(
    limit: Optional[int] = Query(None, ge=1, le=500),
    from_timestamp: Optional[datetime] = Query(None, alias="from"),
    to_timestamp: Optional[datetime] = Query(None, alias="to"),
    caller: Caller = Depends(get_caller),
    service: AttestationService = Depends(get_attestation_service),
):
    """Attestation audit events for the caller, newest first."""
    query = AuditQuery(limit=limit, from_timestamp=from_timestamp, to_timestamp=to_timestamp)
    return service.get_audit_log(caller, query)


@router.get("/api/attestations", response_model=AttestationPage)
def list_attestations(
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    verified: Optional[bool] = Query(None),
    caller: Caller = Depends(get_caller),
    service: AttestationService = Depends(get_attestation_service),
):
    """Page through every attestation (admins only)."""
    return service.list_attestations(caller, limit=limit, offset=offset, verified=verified)


@router.get("/api/attestations/{owner_id}", response_model=AttestationRecord)
def get_attestation_by_owner(
    owner_id: str,
    caller: Caller = Depends(get_caller),
    service: AttestationService = Depends(get_attestation_service),
):
    """Read one owner's attestation; the owner or an admin only."""
    return service.get_attestation_for_owner(caller, owner_id)


@router.get("/api/attestations/{owner_id}/audit", response_model=List[AuditEvent])
def get_owner_attestation_audit_log(
    owner_id: str,
    limit: Optional[int] = Query(None, ge=1, le=500),
    from_timestamp: Optional[datetime] = Query(None, alias="from"),
    to_timestamp: Optional[datetime] = Query(None, alias="to"),
    caller: Caller = Depends(get_caller),
    service: AttestationService = Depends(get_attestation_service),
):
    query = AuditQuery(limit=limit, from_timestamp=from_timestamp, to_timestamp=to_timestamp)
    return service.get_audit_log(caller, query, owner_id=owner_id)
