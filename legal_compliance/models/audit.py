"""Audit trail models for consent and attestation changes"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class AuditEventType(str, Enum):
    """Kinds of compliance events recorded in the audit log"""
    TERMS_ACCEPTED = "terms_accepted"
    PRIVACY_ACCEPTED = "privacy_accepted"
    CONSENT_WITHDRAWN = "consent_withdrawn"
    CONSENT_UPDATED = "consent_updated"
    MARKETING_OPTED_IN = "marketing_opted_in"
    MARKETING_OPTED_OUT = "marketing_opted_out"
    DATA_EXPORT_REQUESTED = "data_export_requested"
    DELETION_REQUESTED = "deletion_requested"
    BLOCKED_REQUIRED_CONSENT_WITHDRAWAL = "blocked_required_consent_withdrawal"
    ATTESTATION_SUBMITTED = "attestation_submitted"
    ATTESTATION_UPDATED = "attestation_updated"


ATTESTATION_EVENTS = (
    AuditEventType.ATTESTATION_SUBMITTED,
    AuditEventType.ATTESTATION_UPDATED,
)


class AuditEvent(BaseModel):
    """An immutable audit log entry"""
    id: str = ""
    owner_id: str
    event: AuditEventType
    version: str
    timestamp: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Dict[str, Any] = {}


class AuditQuery(BaseModel):
    """Filters for audit log retrieval"""
    limit: Optional[int] = None
    event_type: Optional[AuditEventType] = None
    from_timestamp: Optional[datetime] = None
    to_timestamp: Optional[datetime] = None
