"""Session schema - canonical definition."""

from typing import Literal
from pydantic import BaseModel, Field


class SessionInfo(BaseModel):
    """Per-request session descriptor derived from the visit and headers."""
    fingerprint: str = Field(..., description="Short display hash, not an identity proof")
    visitor_hash: str = Field(..., description="Short hash of address and user agent")
    session_type: Literal["New Session", "Returning Session"] = Field(...)
    session_id: str = Field(...)
    trust_score: int = Field(..., ge=0)
    trust_level: Literal["Low", "Medium", "High"] = Field(...)
