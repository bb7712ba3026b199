import logging
import math
from typing import Sequence

from .errors import REJECTION_MESSAGES, RejectionReason
from .schemas import QualityCheck

logger = logging.getLogger("skinage.quality")

MIN_LANDMARKS = 468  # MediaPipe Face Mesh without iris refinement
MAX_TILT_DEGREES = 20.0
MIN_INTEROCULAR_RATIO = 0.15  # of image width

IDX_LEFT_EYE_OUTER = 33
IDX_RIGHT_EYE_OUTER = 263


def _reject(reason: RejectionReason, distance: float = 0.0, tilt: float = 0.0) -> QualityCheck:
    logger.warning(f"Quality gate rejected input: {reason.value}")
    return QualityCheck(
        valid=False,
        reason_code=reason.value,
        reason=REJECTION_MESSAGES[reason],
        interocular_distance=distance,
        tilt_angle=tilt,
    )


def validate_face_quality(
    landmarks: Sequence, image_width: int, image_height: int
) -> QualityCheck:
    """
    Check that a landmark set is usable for zone segmentation.

    Args:
        landmarks: normalized landmarks (objects with .x/.y in 0-1)
        image_width, image_height: source image size in pixels

    Returns:
        QualityCheck. ``valid`` is False with a RejectionReason code when
        there are too few points, the head is tilted more than 20 degrees,
        or the eyes are closer than 15% of the image width.
    """
    if landmarks is None or len(landmarks) < MIN_LANDMARKS:
        return _reject(RejectionReason.INSUFFICIENT_LANDMARKS)

    left_eye = landmarks[IDX_LEFT_EYE_OUTER]
    right_eye = landmarks[IDX_RIGHT_EYE_OUTER]

    # Pixel space, so non-square images are not distorted
    lx, ly = left_eye.x * image_width, left_eye.y * image_height
    rx, ry = right_eye.x * image_width, right_eye.y * image_height

    eye_distance = math.hypot(rx - lx, ry - ly)
    vertical_tilt = abs(ly - ry)
    tilt_angle = math.degrees(math.atan2(vertical_tilt, eye_distance))

    if tilt_angle > MAX_TILT_DEGREES:
        return _reject(RejectionReason.EXCESSIVE_TILT, eye_distance, tilt_angle)

    # NaN fails every comparison, so it is rejected explicitly
    if not math.isfinite(eye_distance) or eye_distance < image_width * MIN_INTEROCULAR_RATIO:
        return _reject(RejectionReason.FACE_TOO_SMALL, eye_distance, tilt_angle)

    logger.debug(
        f"Quality gate passed: eye distance {eye_distance:.1f}px, tilt {tilt_angle:.2f}°"
    )
    return QualityCheck(valid=True, interocular_distance=eye_distance, tilt_angle=tilt_angle)
