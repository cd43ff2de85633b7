"""Consent management with audit logging (PIPA/PIPEDA)"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from legal_compliance.db.base import DatabaseInterface
from legal_compliance.errors import (
    NotFoundError,
    RequiredConsentWithdrawalError,
    ValidationError,
    Violation,
)
from legal_compliance.models.audit import AuditEvent, AuditEventType, AuditQuery
from legal_compliance.models.consent import (
    CONSENT_TYPE_ALIASES,
    REQUIRED_CONSENT_TYPES,
    ConsentRecord,
    ConsentType,
    ConsentUpdate,
)
from legal_compliance.models.user import Caller, User, UserLifecycle
from legal_compliance.services.audit import AuditService
from legal_compliance.services.validation import validate_consent
from legal_compliance.utils.config import get_settings

logger = logging.getLogger(__name__)


class ConsentService:
    """Reads, updates and withdraws the consent embedded on a user."""

    def __init__(self, db: DatabaseInterface, audit: Optional[AuditService] = None):
        self.db = db
        self.audit = audit or AuditService(db)

    def _require_user(self, user_id: str) -> User:
        row = self.db.get_user(user_id)
        if row is None:
            raise NotFoundError(f"User not found: {user_id}")
        return User(**row)

    def get_current(self, user_id: str) -> Optional[ConsentRecord]:
        return self._require_user(user_id).consent

    def get_my_consent(self, caller: Caller) -> Optional[ConsentRecord]:
        return self.get_current(caller.user_id)

    def has_valid_consent(self, user_id: str) -> bool:
        row = self.db.get_user(user_id)
        if row is None:
            return False
        consent = User(**row).consent
        return consent is not None and consent.is_valid()

    def update_my_consent(
        self,
        caller: Caller,
        update: Union[ConsentUpdate, dict],
    ) -> ConsentRecord:
        """Merge the supplied grants over the current consent and audit the diff.

        Required grants left out default to false on a first update;
        marketing keeps whatever it was.
        """
        if isinstance(update, dict):
            try:
                update = ConsentUpdate(**update)
            except PydanticValidationError as e:
                raise ValidationError.from_errors("Consent", e.errors()) from e
        payload = update.model_dump(exclude_unset=True)
        validate_consent(payload)

        with self.db.transaction():
            user = self._require_user(caller.user_id)
            current = user.consent
            version = update.version or get_settings().consent_version

            new_consent = ConsentRecord(
                terms=_pick(update.terms, current, "terms"),
                privacy=_pick(update.privacy, current, "privacy"),
                data_processing=_pick(update.data_processing, current, "data_processing"),
                marketing=update.marketing if update.marketing is not None
                else (current.marketing if current else None),
                version=version,
                timestamp=datetime.now(timezone.utc),
            )

            old_snapshot = current.model_dump(mode="json") if current else None
            new_snapshot = new_consent.model_dump(mode="json")
            self.db.update_user_consent(caller.user_id, new_snapshot)
            self.audit.log_consent_changes(
                caller.user_id,
                old_snapshot,
                new_snapshot,
                version,
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
            )

        logger.info(f"Consent updated for {caller.user_id}")
        return new_consent

    def withdraw_my_consent(
        self,
        caller: Caller,
        consent_types: Iterable[str],
        reason: Optional[str] = None,
    ) -> ConsentRecord:
        """Withdraw optional consent grants.

        Asking for a required grant records a blocked-withdrawal event and
        raises RequiredConsentWithdrawalError; nothing else changes.
        """
        requested = list(dict.fromkeys(
            CONSENT_TYPE_ALIASES.get(t, t) for t in consent_types
        ))
        if not requested:
            raise ValidationError("Consent withdrawal", [
                Violation(field="types", message="At least one consent type is required")
            ])
        known = {t.value for t in ConsentType}
        invalid = [t for t in requested if t not in known]
        if invalid:
            raise ValidationError("Consent withdrawal", [
                Violation(field="types", message=f"Invalid consent type: {t}") for t in invalid
            ])

        current = self._require_user(caller.user_id).consent

        required = [t for t in requested if ConsentType(t) in REQUIRED_CONSENT_TYPES]
        if required:
            # Logged on its own so the record survives the error below
            self.audit.log_event(
                caller.user_id,
                AuditEventType.BLOCKED_REQUIRED_CONSENT_WITHDRAWAL,
                {
                    "attempted_withdrawal": required,
                    "reason": reason,
                    "action": "blocked_required_consent_withdrawal",
                    "message": "Required consents cannot be withdrawn without account deletion",
                },
                version=current.version if current else None,
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
            )
            logger.warning(f"Blocked withdrawal of required consent {required} for {caller.user_id}")
            raise RequiredConsentWithdrawalError(required)

        if current is None:
            raise NotFoundError("No consent record found for user")

        previous = current.model_dump(mode="json")
        updated = current.model_copy(update={
            "marketing": None,
            "timestamp": datetime.now(timezone.utc),
        })

        with self.db.transaction():
            self.db.update_user_consent(caller.user_id, updated.model_dump(mode="json"))
            for consent_type in requested:
                self.audit.log_event(
                    caller.user_id,
                    AuditEventType.MARKETING_OPTED_OUT,
                    {
                        "consent_type": consent_type,
                        "previous_value": previous.get(consent_type),
                        "reason": reason,
                        "action": "consent_withdrawn",
                    },
                    version=current.version,
                    ip_address=caller.ip_address,
                    user_agent=caller.user_agent,
                )

        logger.info(f"Consent withdrawn for {caller.user_id}: {requested}")
        return updated

    def get_my_audit_log(
        self,
        caller: Caller,
        query: Optional[AuditQuery] = None,
    ) -> List[AuditEvent]:
        self._require_user(caller.user_id)
        return self.audit.query(caller.user_id, query)

    def request_data_export(self, caller: Caller) -> UserLifecycle:
        """Stamp a data export request on the account and audit it."""
        return self._stamp_lifecycle(
            caller, "export_requested_at", AuditEventType.DATA_EXPORT_REQUESTED, None
        )

    def request_deletion(self, caller: Caller, reason: Optional[str] = None) -> UserLifecycle:
        """Stamp an account deletion request and audit it."""
        return self._stamp_lifecycle(
            caller, "deletion_requested_at", AuditEventType.DELETION_REQUESTED, reason
        )

    def _stamp_lifecycle(
        self,
        caller: Caller,
        field: str,
        event: AuditEventType,
        reason: Optional[str],
    ) -> UserLifecycle:
        now = datetime.now(timezone.utc)
        with self.db.transaction():
            user = self._require_user(caller.user_id)
            lifecycle = (user.lifecycle or UserLifecycle(created_at=now)).model_copy(
                update={field: now, "updated_at": now}
            )
            self.db.update_user_lifecycle(caller.user_id, lifecycle.model_dump(mode="json"))
            self.audit.log_event(
                caller.user_id,
                event,
                {"reason": reason} if reason else {},
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
            )
        return lifecycle


def _pick(value: Optional[bool], current: Optional[ConsentRecord], field: str) -> bool:
    if value is not None:
        return value
    if current is not None:
        return getattr(current, field)
    return False
