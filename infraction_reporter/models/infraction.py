"""
Infraction catalogue.

Static configuration: the set of infraction types a citizen can pick from.
Nothing here is mutated at runtime.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class InfractionTypeId(str, Enum):
    PARKING = "parking"
    REDLIGHT = "redlight"
    SPEEDING = "speeding"
    OTHER = "other"


class InfractionType(BaseModel):
    id: InfractionTypeId
    name: str = Field(..., description="Display name")
    description: str

    class Config:
        frozen = True


INFRACTION_TYPES: List[InfractionType] = [
    InfractionType(
        id=InfractionTypeId.PARKING,
        name="Illegal Parking",
        description="Vehicle parked in a no-parking zone, a disabled space without a permit, etc.",
    ),
    InfractionType(
        id=InfractionTypeId.REDLIGHT,
        name="Red Light",
        description="Vehicle running a red light or a stop sign.",
    ),
    InfractionType(
        id=InfractionTypeId.SPEEDING,
        name="Speeding",
        description="Vehicle exceeding the speed limit.",
    ),
    InfractionType(
        id=InfractionTypeId.OTHER,
        name="Other Infraction",
        description="Any other traffic infraction not listed above.",
    ),
]

_BY_ID: Dict[str, InfractionType] = {t.id.value: t for t in INFRACTION_TYPES}


def get_infraction_type(type_id: Optional[str]) -> Optional[InfractionType]:
    """Look up a catalogue entry by id; None for unknown or empty ids."""
    if not type_id:
        return None
    return _BY_ID.get(type_id)


def list_infraction_types() -> List[InfractionType]:
    return list(INFRACTION_TYPES)
