import pytest

from skinage.prediction import (
    CURRENT_AGING_RATE,
    HEALTHY_AGING_RATE,
    calculate_future_prediction,
    generate_interventions,
    project_scenario,
    severity_label,
)
from skinage.schemas import SkinAgeEstimate
from skinage.skin_age import age_offset_for_index, calculate_skin_age


def make_estimate(skin_age, actual_age):
    return SkinAgeEstimate(
        estimated_skin_age=skin_age,
        actual_age=actual_age,
        age_difference=skin_age - actual_age,
        composite_index=0.0,
        age_offset=skin_age - actual_age,
        reasoning="",
        breakdown=[],
        pigmentation_contribution=0.0,
        top_concerns=[],
    )


def test_end_to_end_scenario():
    offset, _ = age_offset_for_index(32.5)
    estimate = make_estimate(40 + offset, 40)
    assert estimate.estimated_skin_age == 42

    prediction = calculate_future_prediction(estimate, [10])

    healthy = prediction.healthy_scenarios[0]
    current = prediction.current_path_scenarios[0]
    assert healthy.skin_age == 50
    assert healthy.aging_years_added == 8
    assert current.skin_age == 54
    assert current.aging_years_added == 12
    assert healthy.actual_age == current.actual_age == 50


def test_default_horizons():
    prediction = calculate_future_prediction(make_estimate(42, 40))

    assert [s.years_from_now for s in prediction.healthy_scenarios] == [5, 10, 15, 20]
    assert [s.skin_age for s in prediction.healthy_scenarios] == [46, 50, 54, 58]
    assert [s.skin_age for s in prediction.current_path_scenarios] == [48, 54, 60, 66]
    assert prediction.healthy_aging_rate == HEALTHY_AGING_RATE == 0.8
    assert prediction.current_aging_rate == CURRENT_AGING_RATE == 1.2
    assert prediction.current_skin_age == 42
    assert prediction.current_actual_age == 40


def test_horizons_do_not_compound():
    direct = project_scenario(42, 40, 14, HEALTHY_AGING_RATE)

    step = project_scenario(42, 40, 7, HEALTHY_AGING_RATE)
    stepped_twice = project_scenario(step.skin_age, step.actual_age, 7, HEALTHY_AGING_RATE)

    # 42 + 11.2 -> 53, whereas 42 + 5.6 -> 48, 48 + 5.6 -> 54
    assert direct.skin_age == 53
    assert stepped_twice.skin_age == 54
    assert direct.skin_age != stepped_twice.skin_age
    assert direct.aging_years_added == 11


def test_each_horizon_uses_current_estimate():
    prediction = calculate_future_prediction(make_estimate(42, 40), [7, 14])
    assert [s.skin_age for s in prediction.healthy_scenarios] == [48, 53]


@pytest.mark.parametrize("score, label", [(0, "None"), (1, "Mild"), (2, "Moderate"), (3, "Severe")])
def test_severity_labels(score, label):
    assert severity_label(score) == label


def test_interventions_for_top_concerns(make_clinical_score):
    clinical = make_clinical_score([0, 3, 2, 0, 0, 0, 0, 0, 0, 1], 3)
    estimate = calculate_skin_age(clinical, 40)

    interventions = generate_interventions(estimate, clinical)

    assert [i.concern for i in interventions] == [
        "Glabellar",
        "Crow's Feet (Left)",
        "Lower Cheek (Right)",
        "Uneven Skin Tone",
    ]
    assert [i.priority for i in interventions] == [1, 2, 3, 4]
    assert [i.severity for i in interventions] == ["Severe", "Moderate", "Mild", "Moderate"]
    assert interventions[0].recommendations[0].startswith("Retinol 0.025-0.1%")
    assert interventions[1].recommendations[0] == "Eye cream with peptides and retinol"
    assert interventions[2].recommendations[0] == "Vitamin C serum daily (morning application)"
    assert interventions[3].recommendations[1] == "Niacinamide 5-10% for tone evening"


def test_nasolabial_recommendations_and_no_tone_entry(make_clinical_score):
    clinical = make_clinical_score([0, 0, 0, 0, 0, 0, 2, 0, 0, 0], 0)
    estimate = calculate_skin_age(clinical, 40)

    interventions = generate_interventions(estimate, clinical)

    assert len(interventions) == 3
    assert interventions[0].concern == "Nasolabial Fold (Left)"
    assert "Facial exercises for muscle tone" in interventions[0].recommendations
    # Ties at score 0 keep zone order
    assert interventions[1].concern == "Forehead"
    assert interventions[1].severity == "None"
