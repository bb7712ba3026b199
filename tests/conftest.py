import os
import sys

import numpy as np
import pytest

# Add repo root to path so we can import skinage
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from skinage.classifier import get_zone_health_rating
from skinage.schemas import ClinicalScore, Point, ZoneMetrics
from skinage.zones import ZoneType, zone_spec

IMAGE_SIZE = 400  # square test images

# Normalized positions of the landmarks the pipeline reads.
# Everything else sits at the face center.
KEY_POINTS = {
    10: (0.5, 0.1),  # forehead top
    152: (0.5, 0.9),  # chin
    234: (0.2, 0.5),  # face left
    454: (0.8, 0.5),  # face right
    33: (0.3, 0.4),  # left eye outer
    263: (0.7, 0.4),  # right eye outer
    133: (0.42, 0.4),  # left eye inner
    362: (0.58, 0.4),  # right eye inner
    159: (0.36, 0.38),  # left upper eyelid
    386: (0.64, 0.38),  # right upper eyelid
    1: (0.5, 0.55),  # nose tip
    48: (0.45, 0.55),  # left nostril base
    278: (0.55, 0.55),  # right nostril base
    61: (0.4, 0.7),  # left mouth corner
    291: (0.6, 0.7),  # right mouth corner
}


def build_landmarks(count=478, overrides=None):
    points = {**KEY_POINTS, **(overrides or {})}
    return [
        Point(x=points[i][0], y=points[i][1]) if i in points else Point(x=0.5, y=0.5)
        for i in range(count)
    ]


def build_clinical_score(wrinkle_scores, overall_pigmentation_score=0):
    """ClinicalScore with the given wrinkle scores, in ZoneType order."""
    zones = []
    for zone_type, wrinkle in zip(ZoneType, wrinkle_scores):
        entry = zone_spec(zone_type)
        zones.append(
            ZoneMetrics(
                zone_name=zone_type.value,
                display_name=entry.display_name,
                texture_variance=0.0,
                pigmentation_variance=0.0,
                average_brightness=200.0,
                wrinkle_score=wrinkle,
                pigmentation_score=0,
                radiance_score=0,
                weight=entry.weight,
                pixel_count=100,
                health_rating=get_zone_health_rating(wrinkle, 0, 0),
            )
        )
    total = sum(wrinkle_scores) + overall_pigmentation_score
    return ClinicalScore(
        zones=zones,
        overall_pigmentation_variance=0.0,
        overall_pigmentation_score=overall_pigmentation_score,
        total_score=total,
        max_score=21,
        rating="Excellent",
        rating_message="Excellent - aging well",
    )


@pytest.fixture
def landmarks():
    return build_landmarks()


@pytest.fixture
def make_landmarks():
    return build_landmarks


@pytest.fixture
def make_clinical_score():
    return build_clinical_score


@pytest.fixture
def uniform_rgb():
    """Flat gray skin: no texture, no pigmentation variance, bright."""
    return np.full((IMAGE_SIZE, IMAGE_SIZE, 3), 200, dtype=np.uint8)


@pytest.fixture
def checkerboard_rgb():
    """Alternating black/white pixels: maximal texture in every zone."""
    ys, xs = np.mgrid[0:IMAGE_SIZE, 0:IMAGE_SIZE]
    board = np.where((xs + ys) % 2 == 0, 255, 0).astype(np.uint8)
    return np.stack([board, board, board], axis=-1)
