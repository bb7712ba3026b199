import logging
import math
from typing import Any, List, Optional, Sequence

import numpy as np

from .classifier import ClinicalScorer
from .errors import InvalidLandmarksError, QualityRejectedError, RejectionReason
from .geometric import ZoneSegmenter
from .pixels import ArrayPixelBuffer, PixelBuffer
from .prediction import calculate_future_prediction, generate_interventions
from .schemas import AnalysisReport, Point
from .skin_age import calculate_skin_age

logger = logging.getLogger("skinage.analyzer")


def parse_landmarks(raw: Any) -> List[Point]:
    """
    Accept landmarks as a list of {"x": .., "y": ..} dicts, [x, y] pairs or
    objects with .x/.y (e.g. MediaPipe NormalizedLandmark).
    """
    if not isinstance(raw, (list, tuple)):
        raise InvalidLandmarksError("Landmarks must be a list")

    points = []
    for i, item in enumerate(raw):
        try:
            if isinstance(item, dict):
                points.append(Point(x=float(item["x"]), y=float(item["y"])))
            elif isinstance(item, (list, tuple)):
                points.append(Point(x=float(item[0]), y=float(item[1])))
            else:
                points.append(Point(x=float(item.x), y=float(item.y)))
        except (KeyError, IndexError, AttributeError, TypeError, ValueError) as e:
            raise InvalidLandmarksError(f"Landmark {i} is malformed: {e}") from e
        # json.loads accepts NaN and Infinity literals
        if not (math.isfinite(points[-1].x) and math.isfinite(points[-1].y)):
            raise InvalidLandmarksError(f"Landmark {i} has a non-finite coordinate")
    return points


class SkinAnalyzer:
    """
    肌年齢診断システムのメインFacadeクラス。
    Quality gate -> Zones -> Pixel statistics -> Clinical score -> Skin age -> Prediction

    Stateless between runs: every call builds fresh zones and scores, so a
    single instance can be shared.
    """

    def __init__(self):
        self.segmenter = ZoneSegmenter()
        self.scorer = ClinicalScorer()

    def analyze(
        self,
        landmarks: Sequence,
        buffer: PixelBuffer,
        actual_age: int,
        years_to_predict: Optional[Sequence[int]] = None,
    ) -> AnalysisReport:
        """
        Args:
            landmarks: normalized landmarks from an external detector
            buffer: RGB pixel access for the same image
            actual_age: chronological age (validated by the caller)
            years_to_predict: future offsets, defaults to settings

        Returns:
            AnalysisReport. On quality rejection only ``segmentation`` and the
            reason fields are filled.
        """
        w, h = buffer.width, buffer.height

        # 1. Quality gate + zones
        segmentation = self.segmenter.segment(landmarks, w, h)
        if segmentation.status != "OK":
            return AnalysisReport(
                status="QUALITY_REJECTED",
                reason_code=segmentation.reason_code,
                reason=segmentation.reason,
                segmentation=segmentation,
            )

        # 2. Pixel statistics & clinical scores
        clinical = self.scorer.score(buffer, segmentation.zones, w, h)

        # 3. Skin age
        skin_age = calculate_skin_age(clinical, actual_age)

        # 4. Future prediction & interventions
        prediction = calculate_future_prediction(skin_age, years_to_predict)
        interventions = generate_interventions(skin_age, clinical)

        return AnalysisReport(
            status="OK",
            segmentation=segmentation,
            clinical_score=clinical,
            skin_age=skin_age,
            prediction=prediction,
            interventions=interventions,
        )

    def analyze_or_raise(
        self,
        landmarks: Sequence,
        buffer: PixelBuffer,
        actual_age: int,
        years_to_predict: Optional[Sequence[int]] = None,
    ) -> AnalysisReport:
        """Same as analyze() but raises QualityRejectedError instead of returning it."""
        report = self.analyze(landmarks, buffer, actual_age, years_to_predict)
        if report.status != "OK":
            raise QualityRejectedError(RejectionReason(report.reason_code), report.reason)
        return report

    def analyze_from_array(
        self,
        img_bgr: np.ndarray,
        landmarks: Sequence,
        actual_age: int,
        years_to_predict: Optional[Sequence[int]] = None,
    ) -> AnalysisReport:
        """
        img_bgr: OpenCV BGR image
        """
        buffer = ArrayPixelBuffer.from_bgr(img_bgr)
        logger.info(
            f"Analyzing {buffer.width}x{buffer.height} image "
            f"with {len(landmarks)} landmarks, age {actual_age}"
        )
        return self.analyze(landmarks, buffer, actual_age, years_to_predict)
