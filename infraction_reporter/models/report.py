"""
Pydantic models for infraction report submission.
"""

from pydantic import BaseModel, Field
from typing import Optional

from infraction_reporter.models.metadata import ImageMetadata


class InfractionReport(BaseModel):
    """
    Submission payload assembled from the review form.

    Created at submission time and discarded once the acknowledgment is
    returned.
    """
    image: bytes = Field(..., repr=False, description="Raw image bytes")
    image_content_type: Optional[str] = None
    metadata: ImageMetadata = Field(default_factory=ImageMetadata)
    infraction_type_id: Optional[str] = Field(None, alias="infractionTypeId")
    license_plate: str = Field("", alias="licensePlate")
    notes: str = ""

    class Config:
        populate_by_name = True


class SubmissionResponse(BaseModel):
    """Acknowledgment returned by the submission endpoint."""
    success: bool
    message: str
    report_id: Optional[str] = Field(None, alias="reportId")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "success": True,
                "message": "Infraction report submitted successfully",
                "reportId": "REP482913",
            }
        }

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
