"""Visit classification schema."""

from datetime import datetime
from pydantic import BaseModel, Field


class VisitClassification(BaseModel):
    """Outcome of classifying one observation of a visitor identity."""
    is_unique: bool = Field(..., description="New visit within the dedup window")
    visit_count: int = Field(..., ge=1)
    first_visit: datetime = Field(...)
    last_visit: datetime = Field(..., description="Time of the last unique visit")
