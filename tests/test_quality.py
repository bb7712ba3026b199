import math

import pytest

from skinage.errors import RejectionReason
from skinage.quality import validate_face_quality

WIDTH = HEIGHT = 1000


def eyes(right_x, right_y=0.4, left=(0.25, 0.4)):
    return {33: left, 263: (right_x, right_y)}


def tilted_right_eye_y(angle_deg, dx_px=300.0):
    # tilt = atan2(dy, hypot(dx, dy))  =>  dy = t * dx / sqrt(1 - t^2)
    t = math.tan(math.radians(angle_deg))
    dy_px = t * dx_px / math.sqrt(1 - t * t)
    return 0.4 + dy_px / HEIGHT


def test_boundary_values_pass(make_landmarks):
    # 468 points, no tilt, eye distance exactly 15% of the width
    lms = make_landmarks(468, eyes(0.4))
    result = validate_face_quality(lms, WIDTH, HEIGHT)
    assert result.valid
    assert result.reason_code is None
    assert result.interocular_distance == pytest.approx(150.0)
    assert result.tilt_angle == 0.0


def test_467_landmarks_rejected(make_landmarks):
    result = validate_face_quality(make_landmarks(467, eyes(0.7)), WIDTH, HEIGHT)
    assert not result.valid
    assert result.reason_code == RejectionReason.INSUFFICIENT_LANDMARKS.value


def test_empty_landmarks_rejected():
    result = validate_face_quality([], WIDTH, HEIGHT)
    assert result.reason_code == RejectionReason.INSUFFICIENT_LANDMARKS.value


def test_tilt_just_over_limit_rejected(make_landmarks):
    lms = make_landmarks(468, eyes(0.55, tilted_right_eye_y(20.01)))
    result = validate_face_quality(lms, WIDTH, HEIGHT)
    assert not result.valid
    assert result.reason_code == RejectionReason.EXCESSIVE_TILT.value
    assert result.tilt_angle == pytest.approx(20.01, abs=1e-6)


def test_tilt_under_limit_passes(make_landmarks):
    lms = make_landmarks(468, eyes(0.55, tilted_right_eye_y(19.99)))
    assert validate_face_quality(lms, WIDTH, HEIGHT).valid


def test_face_too_small_rejected(make_landmarks):
    # 14.99% of the width
    lms = make_landmarks(468, eyes(0.3999))
    result = validate_face_quality(lms, WIDTH, HEIGHT)
    assert not result.valid
    assert result.reason_code == RejectionReason.FACE_TOO_SMALL.value
    assert result.reason == "Face too small in frame"


def test_tilt_checked_before_size(make_landmarks):
    # Small and tilted: tilt is reported
    lms = make_landmarks(468, {33: (0.25, 0.4), 263: (0.3, 0.45)})
    result = validate_face_quality(lms, WIDTH, HEIGHT)
    assert result.reason_code == RejectionReason.EXCESSIVE_TILT.value


@pytest.mark.parametrize("bad", [float("nan"), float("inf")])
def test_non_finite_eye_corner_rejected(make_landmarks, bad):
    lms = make_landmarks(468, {33: (bad, 0.4), 263: (0.7, 0.4)})
    result = validate_face_quality(lms, WIDTH, HEIGHT)
    assert not result.valid
    assert result.reason_code == RejectionReason.FACE_TOO_SMALL.value
