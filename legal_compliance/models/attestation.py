"""Lawyer attestation models"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel


# Affirmations that must all be true for an attestation to be valid
REQUIRED_AFFIRMATIONS = (
    "is_licensed",
    "is_in_good_standing",
    "no_disciplinary_actions",
    "profile_accurate",
    "will_update_on_change",
    "understands_liability",
)


class AttestationState(str, Enum):
    """Observable lifecycle of a lawyer's attestation"""
    NONE = "none"
    SUBMITTED = "submitted"
    VERIFIED = "verified"


class AttestationSubmission(BaseModel):
    """Attestation payload as sent by the lawyer.

    Fields are left untyped so the validator sees the payload as sent
    and reports every problem in one pass, wrong types included.
    """
    legal_name: Optional[Any] = None
    bar_number: Optional[Any] = None
    is_licensed: Optional[Any] = None
    is_in_good_standing: Optional[Any] = None
    no_disciplinary_actions: Optional[Any] = None
    profile_accurate: Optional[Any] = None
    will_update_on_change: Optional[Any] = None
    understands_liability: Optional[Any] = None
    attestation_version: Optional[Any] = None


class AttestationRecord(BaseModel):
    """Stored attestation, one per lawyer"""
    id: str = ""
    owner_id: str
    legal_name: str
    bar_number: str
    is_licensed: bool
    is_in_good_standing: bool
    no_disciplinary_actions: bool
    profile_accurate: bool
    will_update_on_change: bool
    understands_liability: bool
    lsa_verified: bool = False
    attestation_version: str = "1.0"
    attested_at: datetime
    ip_address: Optional[str] = None

    def is_valid(self) -> bool:
        return all(getattr(self, name) is True for name in REQUIRED_AFFIRMATIONS)


class AttestationStatus(BaseModel):
    """Summary returned by the status check"""
    is_valid: bool
    has_attestation: bool
    state: AttestationState = AttestationState.NONE
    attested_at: Optional[datetime] = None
    lsa_verified: Optional[bool] = None


class SubmitResult(BaseModel):
    """Outcome of an attestation submission"""
    success: bool
    is_update: bool
    message: str


class AttestationPage(BaseModel):
    """One page of the admin attestation listing"""
    records: List[AttestationRecord] = []
    total: int = 0
    has_more: bool = False
