"""Request/response schemas for the compliance API"""

from typing import List, Optional

from pydantic import BaseModel, Field

from legal_compliance.errors import Violation


class ConsentWithdrawRequest(BaseModel):
    """Withdraw one or more consent grants"""
    types: List[str] = Field(..., description="Consent types to withdraw, e.g. ['marketing']")
    reason: Optional[str] = Field(None, max_length=1000)


class DeletionRequest(BaseModel):
    """Ask for the account to be deleted"""
    reason: Optional[str] = Field(None, max_length=1000)


class ErrorResponse(BaseModel):
    """Error body returned for every ComplianceError"""
    detail: str
    violations: List[Violation] = []


class HealthResponse(BaseModel):
    """Health check response"""
    status: str  # "ok" | "error"
    db_mode: str
    version: str = "0.1.0"
