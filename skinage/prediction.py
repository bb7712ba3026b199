import logging
from typing import Dict, List, Optional, Sequence

from .config import settings
from .schemas import ClinicalScore, FuturePrediction, Intervention, Scenario, SkinAgeEstimate
from .utils import round_half_up
from .zones import ConcernCategory, zone_spec

logger = logging.getLogger("skinage.prediction")

HEALTHY_AGING_RATE = 0.8  # skin-aging years per calendar year
CURRENT_AGING_RATE = 1.2

SEVERITY_LABELS = ("None", "Mild", "Moderate", "Severe")

RECOMMENDATIONS: Dict[ConcernCategory, List[str]] = {
    ConcernCategory.EXPRESSION_LINES: [
        "Retinol 0.025-0.1% nightly (start low, increase gradually)",
        "Hydrating serums with hyaluronic acid",
        "Consider Botox for dynamic lines (consult dermatologist)",
        "Avoid excessive facial expressions and squinting",
    ],
    ConcernCategory.CROWS_FEET: [
        "Eye cream with peptides and retinol",
        "Daily sunglasses outdoors (UV protection)",
        "Gentle application - no rubbing or pulling",
        "Consider professional treatments (RF microneedling)",
    ],
    ConcernCategory.CHEEK: [
        "Vitamin C serum daily (morning application)",
        "Retinol at night for collagen stimulation",
        "Daily SPF 50+ (reapply every 2 hours in sun)",
        "Consider professional treatments (laser, microneedling)",
    ],
    ConcernCategory.NASOLABIAL: [
        "Retinol or tretinoin for collagen support",
        "Hyaluronic acid fillers (consult dermatologist)",
        "Facial exercises for muscle tone",
        "Daily SPF and antioxidant serums",
    ],
}

UNEVEN_TONE_CONCERN = "Uneven Skin Tone"
UNEVEN_TONE_RECOMMENDATIONS = [
    "Vitamin C serum 10-20% (morning application)",
    "Niacinamide 5-10% for tone evening",
    "Strict daily SPF 50+ (most important for pigmentation)",
    "Consider professional treatments (chemical peels, laser)",
]


def project_scenario(
    current_skin_age: int, actual_age: int, years: int, rate: float
) -> Scenario:
    """One horizon, computed from today's estimate (no compounding)."""
    aging_years = years * rate
    return Scenario(
        years_from_now=years,
        actual_age=actual_age + years,
        skin_age=round_half_up(current_skin_age + aging_years),
        aging_years_added=round_half_up(aging_years),
    )


def calculate_future_prediction(
    estimate: SkinAgeEstimate, years_to_predict: Optional[Sequence[int]] = None
) -> FuturePrediction:
    """
    Project skin age under a healthy path (0.8 years/year) and the current
    path (1.2 years/year) for each requested year offset.
    """
    if years_to_predict is None:
        years_to_predict = settings.DEFAULT_PREDICTION_YEARS

    healthy = []
    current = []
    for years in years_to_predict:
        healthy.append(
            project_scenario(
                estimate.estimated_skin_age, estimate.actual_age, years, HEALTHY_AGING_RATE
            )
        )
        current.append(
            project_scenario(
                estimate.estimated_skin_age, estimate.actual_age, years, CURRENT_AGING_RATE
            )
        )
        logger.debug(
            f"+{years}y: healthy {healthy[-1].skin_age}, current {current[-1].skin_age}"
        )

    return FuturePrediction(
        current_skin_age=estimate.estimated_skin_age,
        current_actual_age=estimate.actual_age,
        healthy_scenarios=healthy,
        current_path_scenarios=current,
        healthy_aging_rate=HEALTHY_AGING_RATE,
        current_aging_rate=CURRENT_AGING_RATE,
    )


def severity_label(score: int) -> str:
    return SEVERITY_LABELS[min(max(score, 0), 3)]


def recommendations_for_zone(zone_name: str) -> List[str]:
    return list(RECOMMENDATIONS[zone_spec(zone_name).category])


def generate_interventions(
    estimate: SkinAgeEstimate, clinical_score: ClinicalScore
) -> List[Intervention]:
    """Prioritized recommendations for the top concerns, plus uneven tone if present."""
    interventions = [
        Intervention(
            concern=concern.display_name,
            severity=severity_label(concern.score),
            priority=priority,
            recommendations=recommendations_for_zone(concern.zone_name),
        )
        for priority, concern in enumerate(estimate.top_concerns, start=1)
    ]

    if clinical_score.overall_pigmentation_score > 0:
        interventions.append(
            Intervention(
                concern=UNEVEN_TONE_CONCERN,
                severity="Moderate",
                priority=len(interventions) + 1,
                recommendations=list(UNEVEN_TONE_RECOMMENDATIONS),
            )
        )

    logger.info(f"Generated {len(interventions)} interventions")
    return interventions
