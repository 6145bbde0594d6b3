"""
Result model for reverse geocoding.
"""

from pydantic import BaseModel
from typing import Optional


class GeocodingResult(BaseModel):
    """
    Either an address (`direccion`) or an `error`, never both.

    Field names follow the street-normalization service the frontend was
    built against.
    """
    direccion: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.direccion is not None

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)
