"""
Result models for license plate recognition.
"""

from pydantic import BaseModel, Field
from typing import Optional


class PlateRecognitionResult(BaseModel):
    """
    Outcome of a single recognition call. Transient, never persisted.

    On failure `success` is False and `error` explains why; `plate` and
    `confidence` are then absent.
    """
    success: bool
    plate: Optional[str] = Field(None, description="Normalized plate text (no whitespace, upper case)")
    confidence: Optional[float] = Field(None, ge=0, le=100, description="Detection confidence, percent")
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "PlateRecognitionResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)
