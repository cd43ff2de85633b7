"""Error taxonomy for the compliance workflows"""

from typing import List, Sequence

from pydantic import BaseModel


class Violation(BaseModel):
    """A single failed validation rule"""
    field: str
    message: str


class ComplianceError(Exception):
    """Base class for errors surfaced to callers"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ComplianceError):
    """Payload broke one or more rules. Carries every violation, not just the first."""

    status_code = 422

    def __init__(self, subject: str, violations: Sequence[Violation]):
        self.subject = subject
        self.violations: List[Violation] = list(violations)
        detail = "; ".join(v.message for v in self.violations)
        super().__init__(f"{subject} validation failed: {detail}")

    @classmethod
    def from_errors(cls, subject: str, errors: Sequence[dict]) -> "ValidationError":
        """Build from pydantic-style error dicts (``loc``, ``msg``)."""
        return cls(subject, [
            Violation(
                field=".".join(str(p) for p in err["loc"] if p != "body"),
                message=err["msg"],
            )
            for err in errors
        ])


class AuthenticationError(ComplianceError):
    """No caller identity could be resolved"""

    status_code = 401


class AuthorizationError(ComplianceError):
    """Caller has the wrong role or does not own the record"""

    status_code = 403


class NotFoundError(ComplianceError):
    """No record exists for the requested owner"""

    status_code = 404


class RequiredConsentWithdrawalError(ComplianceError):
    """Attempt to withdraw a consent grant that is not optional"""

    status_code = 409

    def __init__(self, consent_types: Sequence[str]):
        self.consent_types = list(consent_types)
        super().__init__(
            f"Cannot withdraw required consents: {', '.join(self.consent_types)}. "
            "To withdraw required consents, please request account deletion."
        )
