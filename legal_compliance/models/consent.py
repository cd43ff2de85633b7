"""Consent models (PIPA/PIPEDA-style data handling permissions)"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class ConsentType(str, Enum):
    """Consent grants a user can give"""
    TERMS = "terms"
    PRIVACY = "privacy"
    DATA_PROCESSING = "data_processing"
    MARKETING = "marketing"


# Must be true for the account to be usable; cannot be withdrawn
REQUIRED_CONSENT_TYPES = (
    ConsentType.TERMS,
    ConsentType.PRIVACY,
    ConsentType.DATA_PROCESSING,
)

# Client spellings accepted alongside the enum values
CONSENT_TYPE_ALIASES = {"dataProcessing": ConsentType.DATA_PROCESSING.value}


class ConsentRecord(BaseModel):
    """Current consent snapshot embedded on the user"""
    terms: bool = False
    privacy: bool = False
    data_processing: bool = False
    marketing: Optional[bool] = None
    version: str
    timestamp: datetime

    def is_valid(self) -> bool:
        """All required grants are true"""
        return all(getattr(self, t.value) is True for t in REQUIRED_CONSENT_TYPES)


class ConsentUpdate(BaseModel):
    """Partial consent update; absent fields keep their current value"""
    model_config = ConfigDict(populate_by_name=True)

    terms: Optional[StrictBool] = None
    privacy: Optional[StrictBool] = None
    data_processing: Optional[StrictBool] = Field(default=None, alias="dataProcessing")
    marketing: Optional[StrictBool] = None
    version: Optional[str] = None

