"""Validation rules for attestation and consent payloads.

Each ``collect_*`` function returns every broken rule as a list of
``Violation``; the ``validate_*`` wrappers raise ``ValidationError`` with
that full list. Payloads are returned unchanged.
"""

import re
from typing import Any, List, Mapping

from legal_compliance.errors import ValidationError, Violation
from legal_compliance.models.attestation import REQUIRED_AFFIRMATIONS
from legal_compliance.models.consent import REQUIRED_CONSENT_TYPES

BAR_NUMBER_PATTERN = re.compile(r"^[A-Z0-9]{4,10}$")
VERSION_PATTERN = re.compile(r"^\d+\.\d+(\.\d+)?$")

VERSION_MESSAGE = "Version must be in semantic version format (e.g., '1.0' or '1.0.0')"


def normalize_bar_number(value: Any) -> str:
    """Strip and upper-case a bar number"""
    if not isinstance(value, str):
        return ""
    return value.strip().upper()


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def _check_version(value: Any, field: str, violations: List[Violation]) -> None:
    if value is None or value == "":
        return
    if not isinstance(value, str) or not VERSION_PATTERN.match(value):
        violations.append(Violation(field=field, message=VERSION_MESSAGE))


def collect_attestation_violations(payload: Mapping[str, Any]) -> List[Violation]:
    violations: List[Violation] = []

    if _is_blank(payload.get("legal_name")):
        violations.append(Violation(field="legal_name", message="Legal name is required"))

    bar_number = payload.get("bar_number")
    if _is_blank(bar_number):
        violations.append(Violation(field="bar_number", message="Bar number is required"))
    elif not BAR_NUMBER_PATTERN.match(normalize_bar_number(bar_number)):
        violations.append(Violation(
            field="bar_number",
            message="Bar number must be 4-10 alphanumeric characters",
        ))

    # Strictly True; truthy strings or 1 do not count
    for field in REQUIRED_AFFIRMATIONS:
        if payload.get(field) is not True:
            violations.append(Violation(field=field, message=f"{field} must be confirmed (true)"))

    _check_version(payload.get("attestation_version"), "attestation_version", violations)
    return violations


def validate_attestation(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Raise ValidationError listing every problem with an attestation payload."""
    violations = collect_attestation_violations(payload)
    if violations:
        raise ValidationError("Attestation", violations)
    return payload


def collect_consent_violations(payload: Mapping[str, Any]) -> List[Violation]:
    """Only fields present in the payload are checked (partial updates)."""
    violations: List[Violation] = []

    for consent_type in REQUIRED_CONSENT_TYPES:
        key = consent_type.value
        if key in payload and payload[key] is not None and not payload[key]:
            violations.append(Violation(
                field=key,
                message=f"{key} consent is required and must be true",
            ))

    _check_version(payload.get("version"), "version", violations)
    return violations


def validate_consent(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Raise ValidationError if a supplied required grant is false."""
    violations = collect_consent_violations(payload)
    if violations:
        raise ValidationError("Consent", violations)
    return payload
