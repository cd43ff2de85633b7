"""Row-level access rules for compliance records"""

from legal_compliance.errors import AuthorizationError
from legal_compliance.models.user import Caller, UserRole


def can_access(caller_id: str, owner_id: str, caller_role: UserRole) -> bool:
    """Owners can read their own records; admins can read anyone's."""
    if caller_id == owner_id:
        return True
    return caller_role == UserRole.ADMIN


def enforce_access(caller: Caller, owner_id: str) -> None:
    """Raise AuthorizationError unless the caller may read the owner's records."""
    if not can_access(caller.user_id, owner_id, caller.role):
        raise AuthorizationError("Access denied: You can only access your own compliance data")


def require_role(caller: Caller, *roles: UserRole) -> None:
    """Raise AuthorizationError unless the caller holds one of the roles."""
    if caller.role not in roles:
        allowed = " or ".join(f"'{r.value}'" for r in roles)
        raise AuthorizationError(f"Only users with the {allowed} role can perform this action.")
