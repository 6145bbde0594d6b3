"""
Pydantic models for metadata extracted from an uploaded photo.
"""

from pydantic import BaseModel, Field
from typing import Optional


class Location(BaseModel):
    """GPS position of the photo, with the street address once geocoded."""
    latitude: float = Field(..., description="Decimal degrees, negative south of the equator")
    longitude: float = Field(..., description="Decimal degrees, negative west of Greenwich")
    address: Optional[str] = Field(None, description="Street address from reverse geocoding (backfilled)")


class ImageMetadata(BaseModel):
    """
    Metadata read from the photo's EXIF block.

    Every field is optional: a photo without EXIF simply produces an empty
    record. Only `location.address` is written after creation.
    """
    date: Optional[str] = Field(None, description="Capture date, DD/MM/YYYY")
    time: Optional[str] = Field(None, description="Capture time, HH:MM")
    location: Optional[Location] = None

    class Config:
        json_schema_extra = {
            "example": {
                "date": "15/01/2024",
                "time": "10:00",
                "location": {
                    "latitude": 40.7128,
                    "longitude": -74.006,
                    "address": "Av. Callao 123",
                },
            }
        }


class ImageArea(BaseModel):
    """Rectangle (in image pixels) the user marked around the plate."""
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    def as_box(self):
        """Pillow crop box: (left, upper, right, lower)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)
