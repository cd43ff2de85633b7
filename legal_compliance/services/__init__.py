"""Compliance services"""

from legal_compliance.services.attestation import AttestationService
from legal_compliance.services.audit import AuditService
from legal_compliance.services.consent import ConsentService

__all__ = [
    "AttestationService",
    "AuditService",
    "ConsentService",
]
