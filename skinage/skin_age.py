import logging
from typing import List, Tuple

from .schemas import ClinicalScore, SkinAgeEstimate, TopConcern, ZoneContribution
from .zones import PIGMENTATION_WEIGHT, zone_spec

logger = logging.getLogger("skinage.skin_age")

NORMALIZATION_FACTOR = 33.33  # 0-3 score -> 0-100 scale
TOP_CONCERN_COUNT = 3

# (upper bound exclusive, age offset, reasoning). Last band is open-ended.
AGE_OFFSET_BANDS: Tuple[Tuple[float, int, str], ...] = (
    (15.0, -5, "Index < 15: Excellent skin condition (Age - 5)"),
    (30.0, -2, "Index 15-29: Very good skin condition (Age - 2)"),
    (45.0, 2, "Index 30-44: Good skin condition (Age + 2)"),
    (55.0, 5, "Index 45-54: Moderate aging signs (Age + 5)"),
)
FINAL_BAND = (8, "Index ≥ 55: Accelerated aging (Age + 8)")


def normalize_score(score: int) -> float:
    return score * NORMALIZATION_FACTOR


def age_offset_for_index(composite_index: float) -> Tuple[int, str]:
    """Map the Composite Aging Index to (years offset, reasoning)."""
    for upper, offset, reasoning in AGE_OFFSET_BANDS:
        if composite_index < upper:
            return offset, reasoning
    return FINAL_BAND


def select_top_concerns(clinical_score: ClinicalScore) -> List[TopConcern]:
    """Top zones by raw wrinkle score; ties keep zone order (sorted() is stable)."""
    ranked = sorted(clinical_score.zones, key=lambda z: z.wrinkle_score, reverse=True)
    return [
        TopConcern(
            zone_name=z.zone_name,
            display_name=z.display_name,
            score=z.wrinkle_score,
            weight=zone_spec(z.zone_name).weight,
        )
        for z in ranked[:TOP_CONCERN_COUNT]
    ]


def calculate_skin_age(clinical_score: ClinicalScore, actual_age: int) -> SkinAgeEstimate:
    """
    Estimate skin age from the clinical score.

    Each zone's wrinkle score is normalized to 0-100 and weighted by the
    zone table; the overall pigmentation score is added with weight 0.07.
    The sum (Composite Aging Index, not clamped) selects an age offset.
    ``actual_age`` is taken as given.
    """
    breakdown = []
    for zone in clinical_score.zones:
        normalized = normalize_score(zone.wrinkle_score)
        weight = zone_spec(zone.zone_name).weight
        breakdown.append(
            ZoneContribution(
                zone_name=zone.zone_name,
                display_name=zone.display_name,
                score=zone.wrinkle_score,
                normalized_score=normalized,
                weight=weight,
                weighted_contribution=normalized * weight,
            )
        )

    pigmentation_contribution = (
        normalize_score(clinical_score.overall_pigmentation_score) * PIGMENTATION_WEIGHT
    )
    composite_index = (
        sum(c.weighted_contribution for c in breakdown) + pigmentation_contribution
    )

    offset, reasoning = age_offset_for_index(composite_index)
    estimated = actual_age + offset

    logger.info(
        f"Composite aging index {composite_index:.2f} -> skin age {estimated} "
        f"(actual {actual_age}, {offset:+d})"
    )

    return SkinAgeEstimate(
        estimated_skin_age=estimated,
        actual_age=actual_age,
        age_difference=estimated - actual_age,
        composite_index=composite_index,
        age_offset=offset,
        reasoning=reasoning,
        breakdown=breakdown,
        pigmentation_contribution=pigmentation_contribution,
        top_concerns=select_top_concerns(clinical_score),
    )
