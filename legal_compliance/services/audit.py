"""Audit trail service for consent and attestation changes"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from legal_compliance.db.base import DatabaseInterface
from legal_compliance.models.audit import AuditEvent, AuditEventType, AuditQuery
from legal_compliance.models.consent import ConsentType
from legal_compliance.utils.config import get_settings

logger = logging.getLogger(__name__)


class AuditService:
    """Appends and retrieves compliance audit events."""

    def __init__(self, db: DatabaseInterface, strict: Optional[bool] = None):
        self.db = db
        self.strict = get_settings().audit_strict if strict is None else strict

    def log_event(
        self,
        owner_id: str,
        event: AuditEventType,
        metadata: Optional[Dict[str, Any]] = None,
        version: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[str]:
        """Append one event. Returns its ID, or None if the append failed.

        Failures are logged and swallowed unless the service is strict, in
        which case they propagate and roll back the caller's transaction.
        """
        data = {
            "owner_id": owner_id,
            "event": event.value,
            "version": version or get_settings().consent_version,
            "timestamp": datetime.now(timezone.utc),
            "ip_address": ip_address,
            "user_agent": user_agent,
            "metadata": metadata or {},
        }
        try:
            event_id = self.db.insert_audit_event(data)
            logger.info(f"Audit event {event.value} recorded for {owner_id}")
            return event_id
        except Exception as e:
            if self.strict:
                raise
            logger.error(f"Failed to record audit event {event.value} for {owner_id}: {e}")
            return None

    def log_consent_changes(
        self,
        owner_id: str,
        old_consent: Optional[dict],
        new_consent: dict,
        version: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        """Log a coarse update event plus one event per changed consent field."""
        base = dict(metadata or {})
        ids = [self.log_event(
            owner_id,
            AuditEventType.CONSENT_UPDATED,
            {**base, "previous_consent": old_consent, "new_consent": new_consent},
            version=version,
            ip_address=ip_address,
            user_agent=user_agent,
        )]

        for consent_type in ConsentType:
            key = consent_type.value
            old_value = (old_consent or {}).get(key)
            new_value = new_consent.get(key)
            if old_value == new_value:
                continue

            ids.append(self.log_event(
                owner_id,
                consent_change_event(consent_type, new_value),
                {
                    **base,
                    "consent_type": key,
                    "previous_value": old_value,
                    "new_value": new_value,
                    "action": "consent_type_changed",
                },
                version=version,
                ip_address=ip_address,
                user_agent=user_agent,
            ))
        return [i for i in ids if i]

    def query(
        self,
        owner_id: str,
        query: Optional[AuditQuery] = None,
        event_types: Optional[Sequence[AuditEventType]] = None,
    ) -> List[AuditEvent]:
        """Events for one owner, newest first, limit applied after sorting."""
        query = query or AuditQuery()
        types = [t.value for t in event_types] if event_types else []
        if query.event_type is not None:
            if types and query.event_type.value not in types:
                return []
            types = [query.event_type.value]

        rows = self.db.query_audit_events(
            owner_id,
            event_types=types or None,
            from_timestamp=query.from_timestamp,
            to_timestamp=query.to_timestamp,
            limit=query.limit,
        )
        return [AuditEvent(**row) for row in rows]


def consent_change_event(consent_type: ConsentType, new_value: Any) -> AuditEventType:
    """Pick the fine-grained event kind for one changed consent field."""
    if consent_type == ConsentType.TERMS and new_value is True:
        return AuditEventType.TERMS_ACCEPTED
    if consent_type == ConsentType.PRIVACY and new_value is True:
        return AuditEventType.PRIVACY_ACCEPTED
    if consent_type == ConsentType.MARKETING:
        if new_value is True:
            return AuditEventType.MARKETING_OPTED_IN
        return AuditEventType.MARKETING_OPTED_OUT
    return AuditEventType.CONSENT_UPDATED
