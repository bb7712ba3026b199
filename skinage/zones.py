from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ZoneType(str, Enum):
    """10 clinical analysis zones. Value is the internal identifier."""

    FOREHEAD = "forehead"
    GLABELLA = "glabella"
    CROWSFEET_LEFT = "eye_crowsfeet_left"
    CROWSFEET_RIGHT = "eye_crowsfeet_right"
    UPPER_CHEEK_LEFT = "upper_cheek_left"
    UPPER_CHEEK_RIGHT = "upper_cheek_right"
    NASOLABIAL_LEFT = "nasolabial_left"
    NASOLABIAL_RIGHT = "nasolabial_right"
    LOWER_CHEEK_LEFT = "lower_cheek_left"
    LOWER_CHEEK_RIGHT = "lower_cheek_right"


class ConcernCategory(str, Enum):
    EXPRESSION_LINES = "expression_lines"  # forehead / glabella
    CROWS_FEET = "crows_feet"
    CHEEK = "cheek"
    NASOLABIAL = "nasolabial"


@dataclass(frozen=True)
class ZoneSpec:
    display_name: str
    confidence: float  # static quality-of-fit indicator for the zone shape
    weight: float  # skin age model weight
    category: ConcernCategory


# NOTE: the weights sum to 1.17 (1.24 with the pigmentation weight), not 1.0.
# Kept as-is so composite indices stay comparable with historical results.
ZONE_SPECS: Dict[ZoneType, ZoneSpec] = {
    ZoneType.FOREHEAD: ZoneSpec("Forehead", 0.95, 0.11, ConcernCategory.EXPRESSION_LINES),
    ZoneType.GLABELLA: ZoneSpec("Glabellar", 0.92, 0.12, ConcernCategory.EXPRESSION_LINES),
    ZoneType.CROWSFEET_LEFT: ZoneSpec(
        "Crow's Feet (Left)", 0.88, 0.10, ConcernCategory.CROWS_FEET
    ),
    ZoneType.CROWSFEET_RIGHT: ZoneSpec(
        "Crow's Feet (Right)", 0.88, 0.10, ConcernCategory.CROWS_FEET
    ),
    ZoneType.UPPER_CHEEK_LEFT: ZoneSpec(
        "Upper Cheek (Left)", 0.90, 0.12, ConcernCategory.CHEEK
    ),
    ZoneType.UPPER_CHEEK_RIGHT: ZoneSpec(
        "Upper Cheek (Right)", 0.90, 0.12, ConcernCategory.CHEEK
    ),
    ZoneType.NASOLABIAL_LEFT: ZoneSpec(
        "Nasolabial Fold (Left)", 0.85, 0.13, ConcernCategory.NASOLABIAL
    ),
    ZoneType.NASOLABIAL_RIGHT: ZoneSpec(
        "Nasolabial Fold (Right)", 0.85, 0.13, ConcernCategory.NASOLABIAL
    ),
    ZoneType.LOWER_CHEEK_LEFT: ZoneSpec(
        "Lower Cheek (Left)", 0.87, 0.12, ConcernCategory.CHEEK
    ),
    ZoneType.LOWER_CHEEK_RIGHT: ZoneSpec(
        "Lower Cheek (Right)", 0.87, 0.12, ConcernCategory.CHEEK
    ),
}

_missing = set(ZoneType) - set(ZONE_SPECS)
if _missing:
    raise RuntimeError(f"ZONE_SPECS is missing entries for: {sorted(_missing)}")

PIGMENTATION_WEIGHT = 0.07


def zone_spec(name) -> ZoneSpec:
    """Look up the static table by ZoneType or its string identifier."""
    return ZONE_SPECS[ZoneType(name)]
