"""
Coordinate utilities: EXIF degrees/minutes/seconds to decimal degrees.
"""

import math
from typing import Optional, Sequence

# Hemisphere references that flip the sign
NEGATIVE_REFS = {"S", "W"}


def convert_dms_to_decimal(degrees: float, minutes: float, seconds: float, ref: Optional[str]) -> float:
    """
    Convert a DMS triple to signed decimal degrees.

    degrees + minutes/60 + seconds/3600, negated for S and W. Any other
    reference (including None) leaves the value positive.

    Examples:
        convert_dms_to_decimal(40, 30, 0, "N")  -> 40.5
        convert_dms_to_decimal(40, 30, 0, "S")  -> -40.5
    """
    decimal = degrees + minutes / 60 + seconds / 3600

    if ref in NEGATIVE_REFS:
        decimal = decimal * -1

    return decimal


def dms_to_decimal(dms: Sequence, ref: Optional[str]) -> float:
    """
    Convert an EXIF GPS value (sequence of three rationals) to decimal degrees.

    Missing components become NaN, so a malformed value yields NaN instead of
    raising. Callers must check the result with math.isnan().
    """
    parts = [float(v) for v in list(dms)[:3]]
    while len(parts) < 3:
        parts.append(math.nan)

    degrees, minutes, seconds = parts
    return convert_dms_to_decimal(degrees, minutes, seconds, normalize_ref(ref))


def normalize_ref(ref) -> Optional[str]:
    """EXIF refs may come back as bytes or with trailing NULs."""
    if ref is None:
        return None
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", errors="ignore")
    ref = str(ref).strip("\x00 ").upper()
    return ref or None
