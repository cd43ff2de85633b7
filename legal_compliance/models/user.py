"""User and caller identity models"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from legal_compliance.models.consent import ConsentRecord


class UserRole(str, Enum):
    """Role assigned by the identity provider"""
    LAWYER = "lawyer"
    END_USER = "end-user"
    ADMIN = "admin"


class UserLifecycle(BaseModel):
    """Account lifecycle timestamps"""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deletion_requested_at: Optional[datetime] = None
    export_requested_at: Optional[datetime] = None


class User(BaseModel):
    """A platform user. Consent is embedded here, not stored separately."""
    id: str
    role: UserRole = UserRole.END_USER
    name: Optional[str] = None
    email: Optional[str] = None
    consent: Optional[ConsentRecord] = None
    lifecycle: Optional[UserLifecycle] = None


class Caller(BaseModel):
    """Identity of whoever is making the current request"""
    user_id: str
    role: UserRole
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
