"""Tests for attestation and consent payload validation"""

import pytest

from legal_compliance.errors import ValidationError
from legal_compliance.models.attestation import REQUIRED_AFFIRMATIONS
from legal_compliance.services.validation import (
    collect_attestation_violations,
    collect_consent_violations,
    normalize_bar_number,
    validate_attestation,
    validate_consent,
)


class TestAttestationValidation:

    def test_valid_payload_is_returned_unchanged(self, attestation_payload):
        original = dict(attestation_payload)
        assert validate_attestation(attestation_payload) is attestation_payload
        assert attestation_payload == original

    def test_empty_payload_reports_every_rule(self):
        violations = collect_attestation_violations({})
        fields = [v.field for v in violations]
        assert fields == ["legal_name", "bar_number", *REQUIRED_AFFIRMATIONS]

    def test_whitespace_legal_name_rejected(self, attestation_payload):
        attestation_payload["legal_name"] = "   "
        with pytest.raises(ValidationError) as exc:
            validate_attestation(attestation_payload)
        assert [v.field for v in exc.value.violations] == ["legal_name"]
        assert "Legal name is required" in exc.value.message

    def test_lowercase_bar_number_accepted(self, attestation_payload):
        attestation_payload["bar_number"] = "ab12"
        assert collect_attestation_violations(attestation_payload) == []
        assert normalize_bar_number("  ab12 ") == "AB12"

    @pytest.mark.parametrize("bar_number", ["AB1", "AB1234567890", "AB-1234", "AB 12"])
    def test_bad_bar_number_rejected(self, attestation_payload, bar_number):
        attestation_payload["bar_number"] = bar_number
        violations = collect_attestation_violations(attestation_payload)
        assert [v.field for v in violations] == ["bar_number"]
        assert "4-10 alphanumeric" in violations[0].message

    def test_blank_bar_number_reports_required_only(self, attestation_payload):
        attestation_payload["bar_number"] = ""
        violations = collect_attestation_violations(attestation_payload)
        assert [v.message for v in violations] == ["Bar number is required"]

    @pytest.mark.parametrize("value", [False, None, 1, "true"])
    def test_affirmation_must_be_strictly_true(self, attestation_payload, value):
        attestation_payload["is_licensed"] = value
        violations = collect_attestation_violations(attestation_payload)
        assert [v.field for v in violations] == ["is_licensed"]

    def test_multiple_violations_listed_together(self, attestation_payload):
        attestation_payload["legal_name"] = ""
        attestation_payload["profile_accurate"] = False
        attestation_payload["understands_liability"] = False
        with pytest.raises(ValidationError) as exc:
            validate_attestation(attestation_payload)
        assert len(exc.value.violations) == 3
        assert exc.value.message.startswith("Attestation validation failed: ")

    @pytest.mark.parametrize("version", ["1.0", "2.1.3"])
    def test_semantic_version_accepted(self, attestation_payload, version):
        attestation_payload["attestation_version"] = version
        assert collect_attestation_violations(attestation_payload) == []

    @pytest.mark.parametrize("version", ["1", "v1.0", "1.0.0.0", "one"])
    def test_bad_version_rejected(self, attestation_payload, version):
        attestation_payload["attestation_version"] = version
        violations = collect_attestation_violations(attestation_payload)
        assert [v.field for v in violations] == ["attestation_version"]


class TestConsentValidation:

    def test_absent_fields_not_checked(self):
        assert collect_consent_violations({"marketing": False}) == []

    def test_required_grant_false_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_consent({"terms": False, "privacy": True, "data_processing": False})
        assert [v.field for v in exc.value.violations] == ["terms", "data_processing"]

    def test_explicit_none_is_treated_as_absent(self):
        assert collect_consent_violations({"privacy": None}) == []

    def test_bad_version_rejected(self):
        violations = collect_consent_violations({"terms": True, "version": "latest"})
        assert [v.field for v in violations] == ["version"]
