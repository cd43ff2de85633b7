"""Data models"""

from legal_compliance.models.consent import (
    ConsentType,
    REQUIRED_CONSENT_TYPES,
    CONSENT_TYPE_ALIASES,
    ConsentRecord,
    ConsentUpdate,
)
from legal_compliance.models.user import (
    UserRole,
    UserLifecycle,
    User,
    Caller,
)
from legal_compliance.models.audit import (
    AuditEventType,
    ATTESTATION_EVENTS,
    AuditEvent,
    AuditQuery,
)
from legal_compliance.models.attestation import (
    REQUIRED_AFFIRMATIONS,
    AttestationState,
    AttestationSubmission,
    AttestationRecord,
    AttestationStatus,
    SubmitResult,
    AttestationPage,
)

__all__ = [
    "ConsentType",
    "REQUIRED_CONSENT_TYPES",
    "CONSENT_TYPE_ALIASES",
    "ConsentRecord",
    "ConsentUpdate",
    "UserRole",
    "UserLifecycle",
    "User",
    "Caller",
    "AuditEventType",
    "ATTESTATION_EVENTS",
    "AuditEvent",
    "AuditQuery",
    "REQUIRED_AFFIRMATIONS",
    "AttestationState",
    "AttestationSubmission",
    "AttestationRecord",
    "AttestationStatus",
    "SubmitResult",
    "AttestationPage",
]
