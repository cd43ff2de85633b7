"""Lawyer attestation workflow: validate, store, audit, report"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from legal_compliance.db.base import DatabaseInterface
from legal_compliance.errors import NotFoundError
from legal_compliance.models.attestation import (
    AttestationPage,
    AttestationRecord,
    AttestationState,
    AttestationStatus,
    AttestationSubmission,
    REQUIRED_AFFIRMATIONS,
    SubmitResult,
)
from legal_compliance.models.audit import ATTESTATION_EVENTS, AuditEvent, AuditEventType, AuditQuery
from legal_compliance.models.user import Caller, UserRole
from legal_compliance.services.access import enforce_access, require_role
from legal_compliance.services.audit import AuditService
from legal_compliance.services.validation import normalize_bar_number, validate_attestation
from legal_compliance.services.verification import verify_lsa_standing
from legal_compliance.utils.config import get_settings

logger = logging.getLogger(__name__)


class AttestationService:
    """Submits and reads lawyer attestations."""

    def __init__(self, db: DatabaseInterface, audit: Optional[AuditService] = None):
        self.db = db
        self.audit = audit or AuditService(db)

    def submit(
        self,
        caller: Caller,
        payload: Union[AttestationSubmission, dict],
    ) -> SubmitResult:
        """Validate and store the caller's attestation, replacing any previous one.

        The store and its audit event run in one transaction. An invalid
        payload raises ValidationError before anything is written.
        """
        require_role(caller, UserRole.LAWYER)
        if isinstance(payload, AttestationSubmission):
            payload = payload.model_dump()
        validate_attestation(payload)

        bar_number = normalize_bar_number(payload["bar_number"])
        version = payload.get("attestation_version") or get_settings().attestation_version
        lsa_verified = verify_lsa_standing(bar_number)

        record = AttestationRecord(
            owner_id=caller.user_id,
            legal_name=payload["legal_name"].strip(),
            bar_number=bar_number,
            is_licensed=payload["is_licensed"],
            is_in_good_standing=payload["is_in_good_standing"],
            no_disciplinary_actions=payload["no_disciplinary_actions"],
            profile_accurate=payload["profile_accurate"],
            will_update_on_change=payload["will_update_on_change"],
            understands_liability=payload["understands_liability"],
            lsa_verified=lsa_verified,
            attestation_version=version,
            attested_at=datetime.now(timezone.utc),
            ip_address=caller.ip_address,
        )

        with self.db.transaction():
            attestation_id, is_update = self.db.upsert_attestation(
                record.model_dump(exclude={"id"})
            )
            event = (
                AuditEventType.ATTESTATION_UPDATED if is_update
                else AuditEventType.ATTESTATION_SUBMITTED
            )
            self.audit.log_event(
                caller.user_id,
                event,
                {
                    "attestation_id": attestation_id,
                    "bar_number": record.bar_number,
                    "legal_name": record.legal_name,
                    "is_update": is_update,
                    "lsa_verified": lsa_verified,
                    "attestation_fields": record.model_dump(include=set(REQUIRED_AFFIRMATIONS)),
                },
                version=version,
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
            )

        logger.info(f"Attestation {'updated' if is_update else 'submitted'} for {caller.user_id}")
        return SubmitResult(
            success=True,
            is_update=is_update,
            message="Attestation updated successfully" if is_update
            else "Attestation submitted successfully",
        )

    def get_current(self, owner_id: str) -> Optional[AttestationRecord]:
        row = self.db.get_attestation(owner_id)
        return AttestationRecord(**row) if row else None

    def get_my_attestation(self, caller: Caller) -> Optional[AttestationRecord]:
        require_role(caller, UserRole.LAWYER)
        return self.get_current(caller.user_id)

    def get_attestation_for_owner(self, caller: Caller, owner_id: str) -> AttestationRecord:
        """Read another owner's attestation. Owner or admin only."""
        enforce_access(caller, owner_id)
        record = self.get_current(owner_id)
        if record is None:
            raise NotFoundError(f"No attestation found for user {owner_id}")
        return record

    def has_valid_attestation(self, owner_id: str) -> bool:
        record = self.get_current(owner_id)
        return record is not None and record.is_valid()

    def status_for(self, owner_id: str) -> AttestationStatus:
        record = self.get_current(owner_id)
        if record is None:
            return AttestationStatus(is_valid=False, has_attestation=False)
        return AttestationStatus(
            is_valid=record.is_valid(),
            has_attestation=True,
            state=AttestationState.VERIFIED if record.lsa_verified else AttestationState.SUBMITTED,
            attested_at=record.attested_at,
            lsa_verified=record.lsa_verified,
        )

    def check_my_status(self, caller: Caller) -> AttestationStatus:
        require_role(caller, UserRole.LAWYER)
        return self.status_for(caller.user_id)

    def get_audit_log(
        self,
        caller: Caller,
        query: Optional[AuditQuery] = None,
        owner_id: Optional[str] = None,
    ) -> List[AuditEvent]:
        """Attestation events for the caller, or for another owner if admin."""
        owner_id = owner_id or caller.user_id
        enforce_access(caller, owner_id)
        if self.db.get_user(owner_id) is None:
            raise NotFoundError(f"User not found: {owner_id}")
        return self.audit.query(owner_id, query, event_types=ATTESTATION_EVENTS)

    def list_attestations(
        self,
        caller: Caller,
        limit: Optional[int] = None,
        offset: int = 0,
        verified: Optional[bool] = None,
    ) -> AttestationPage:
        """Admin listing, newest submission first."""
        require_role(caller, UserRole.ADMIN)
        limit = limit or get_settings().default_page_size
        rows, total = self.db.list_attestations(limit, offset, verified)
        return AttestationPage(
            records=[AttestationRecord(**row) for row in rows],
            total=total,
            has_more=offset + limit < total,
        )
