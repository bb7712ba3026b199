import logging
import math
from typing import List, Sequence, Tuple

import yaml

from .quality import validate_face_quality
from .schemas import Point, SegmentationResult, Zone
from .utils import round_half_up
from .zones import ZoneType, zone_spec

logger = logging.getLogger("skinage.geometric")


def polygon_centroid(polygon: Sequence[Point]) -> Point:
    """Vertex average. Inside for the convex quads produced here."""
    n = len(polygon)
    return Point(x=sum(p.x for p in polygon) / n, y=sum(p.y for p in polygon) / n)


def signed_area(polygon: Sequence[Point]) -> float:
    """
    Shoelace area. Positive for clockwise order in image space (y down).
    """
    area = 0.0
    for i, p in enumerate(polygon):
        q = polygon[(i + 1) % len(polygon)]
        area += p.x * q.y - q.x * p.y
    return area / 2.0


def create_clockwise_polygon(points: Sequence[Point]) -> Tuple[Point, ...]:
    """Sort vertices by angle around their centroid (clockwise when y points down)."""
    centroid = polygon_centroid(points)
    return tuple(
        sorted(points, key=lambda p: math.atan2(p.y - centroid.y, p.x - centroid.x))
    )


class ZoneSegmenter:
    """
    MediaPipe Face Mesh (468+ points) から10個の臨床評価ゾーンを生成するクラス。

    Zone geometry is expressed as proportional offsets of the face bounding
    box around a handful of anatomical reference landmarks. All offset
    constants live in this class so they can be tuned without touching the
    pixel statistics or scoring code.

    Input landmarks are normalized (x, y in 0-1) objects, e.g. MediaPipe
    NormalizedLandmark or schemas.Point.
    """

    def __init__(self):
        # Indices for MediaPipe Face Mesh
        self.IDX_LEFT_EYE_OUTER = 33
        self.IDX_RIGHT_EYE_OUTER = 263
        self.IDX_LEFT_EYE_INNER = 133
        self.IDX_RIGHT_EYE_INNER = 362
        self.IDX_LEFT_EYE_TOP = 159  # upper eyelid
        self.IDX_RIGHT_EYE_TOP = 386
        self.IDX_NOSE_TIP = 1
        self.IDX_LEFT_NOSTRIL = 48  # nostril base
        self.IDX_RIGHT_NOSTRIL = 278
        self.IDX_LEFT_MOUTH = 61  # mouth corner
        self.IDX_RIGHT_MOUTH = 291

        # Proportional offsets (fractions of face box width / height)
        self.FOREHEAD_GAP = 0.02
        self.GLABELLA_LIFT = 0.015
        self.GLABELLA_SIZE = (0.08, 0.04)
        self.CROWSFEET_SIZE = (0.08, 0.06)
        self.CROWSFEET_SPAN = (0.2, 1.2)  # near / far edge, in crow's feet widths
        self.UPPER_CHEEK_OUTER = 0.08
        self.UPPER_CHEEK_INNER = 0.02
        self.UPPER_CHEEK_DROP = 0.02
        self.LOWER_CHEEK_OUTER = 0.10
        self.LOWER_CHEEK_INNER = 0.03
        self.LOWER_CHEEK_TOP = 0.05
        self.LOWER_CHEEK_BOTTOM = 0.08
        self.NASOLABIAL_HALF_WIDTH = 0.025

    def segment(
        self, landmarks, image_width: int, image_height: int
    ) -> SegmentationResult:
        """
        Args:
            landmarks: normalized landmark list
            image_width, image_height: pixel size of the analysed image

        Returns:
            SegmentationResult with 10 zones, or 0 zones and
            status QUALITY_REJECTED when the quality gate fails.
        """
        image_size = (image_width, image_height)
        quality = validate_face_quality(landmarks, image_width, image_height)
        if not quality.valid:
            return SegmentationResult(
                zones=[],
                image_size=image_size,
                status="QUALITY_REJECTED",
                reason_code=quality.reason_code,
                reason=quality.reason,
            )

        zones = self.build_zones(landmarks, image_width, image_height)
        logger.info(f"Segmented {len(zones)} zones on {image_width}x{image_height} image")
        return SegmentationResult(zones=zones, image_size=image_size, status="OK")

    def build_zones(self, landmarks, image_width: int, image_height: int) -> List[Zone]:
        """Zone geometry only. Callers must have passed the quality gate."""
        w, h = image_width, image_height

        def lm(idx):
            # IndexError here is a precondition violation, not recoverable
            return landmarks[idx]

        def to_px(x, y) -> Point:
            return Point(x=round_half_up(x * w), y=round_half_up(y * h))

        def rect(x0, y0, x1, y1) -> List[Point]:
            return [to_px(x0, y0), to_px(x1, y0), to_px(x1, y1), to_px(x0, y1)]

        left_eye_outer = lm(self.IDX_LEFT_EYE_OUTER)
        right_eye_outer = lm(self.IDX_RIGHT_EYE_OUTER)
        left_eye_inner = lm(self.IDX_LEFT_EYE_INNER)
        right_eye_inner = lm(self.IDX_RIGHT_EYE_INNER)
        left_eye_top = lm(self.IDX_LEFT_EYE_TOP)
        right_eye_top = lm(self.IDX_RIGHT_EYE_TOP)
        nose_tip = lm(self.IDX_NOSE_TIP)
        left_nostril = lm(self.IDX_LEFT_NOSTRIL)
        right_nostril = lm(self.IDX_RIGHT_NOSTRIL)
        left_mouth = lm(self.IDX_LEFT_MOUTH)
        right_mouth = lm(self.IDX_RIGHT_MOUTH)

        # Face bounding box over all landmarks, normalized
        xs = [pt.x for pt in landmarks]
        ys = [pt.y for pt in landmarks]
        face_left, face_right = min(xs), max(xs)
        face_top, face_bottom = min(ys), max(ys)
        fw = face_right - face_left
        fh = face_bottom - face_top

        eye_line_y = (left_eye_top.y + right_eye_top.y) / 2

        polygons = {}

        # 1. Forehead: full face width, from hairline down to just above the eyes
        polygons[ZoneType.FOREHEAD] = rect(
            face_left, face_top, face_right, eye_line_y - fh * self.FOREHEAD_GAP
        )

        # 2. Glabella: small box between the inner eye corners
        gx = (left_eye_inner.x + right_eye_inner.x) / 2
        gy = eye_line_y - fh * self.GLABELLA_LIFT
        gw, gh = fw * self.GLABELLA_SIZE[0], fh * self.GLABELLA_SIZE[1]
        polygons[ZoneType.GLABELLA] = rect(gx - gw / 2, gy - gh / 2, gx + gw / 2, gy + gh / 2)

        # 3. Crow's feet: lateral to each outer eye corner
        cw, ch = fw * self.CROWSFEET_SIZE[0], fh * self.CROWSFEET_SIZE[1]
        near, far = self.CROWSFEET_SPAN
        polygons[ZoneType.CROWSFEET_LEFT] = rect(
            left_eye_outer.x - cw * far,
            left_eye_outer.y - ch / 2,
            left_eye_outer.x - cw * near,
            left_eye_outer.y + ch / 2,
        )
        polygons[ZoneType.CROWSFEET_RIGHT] = rect(
            right_eye_outer.x + cw * near,
            right_eye_outer.y - ch / 2,
            right_eye_outer.x + cw * far,
            right_eye_outer.y + ch / 2,
        )

        # 4. Upper cheeks: below the eye, down to the nose tip
        polygons[ZoneType.UPPER_CHEEK_LEFT] = rect(
            left_eye_outer.x - fw * self.UPPER_CHEEK_OUTER,
            left_eye_outer.y + fh * self.UPPER_CHEEK_DROP,
            left_eye_inner.x + fw * self.UPPER_CHEEK_INNER,
            nose_tip.y,
        )
        polygons[ZoneType.UPPER_CHEEK_RIGHT] = rect(
            right_eye_inner.x - fw * self.UPPER_CHEEK_INNER,
            right_eye_outer.y + fh * self.UPPER_CHEEK_DROP,
            right_eye_outer.x + fw * self.UPPER_CHEEK_OUTER,
            nose_tip.y,
        )

        # 5. Nasolabial folds: oriented quads from nostril base to mouth corner
        half_width_px = fw * w * self.NASOLABIAL_HALF_WIDTH
        polygons[ZoneType.NASOLABIAL_LEFT] = self._segment_quad(
            left_nostril, left_mouth, half_width_px, w, h
        )
        polygons[ZoneType.NASOLABIAL_RIGHT] = self._segment_quad(
            right_nostril, right_mouth, half_width_px, w, h
        )

        # 6. Lower cheeks: beside the mouth, below the nose
        polygons[ZoneType.LOWER_CHEEK_LEFT] = rect(
            left_eye_outer.x - fw * self.LOWER_CHEEK_OUTER,
            nose_tip.y + fh * self.LOWER_CHEEK_TOP,
            left_mouth.x - fw * self.LOWER_CHEEK_INNER,
            left_mouth.y + fh * self.LOWER_CHEEK_BOTTOM,
        )
        polygons[ZoneType.LOWER_CHEEK_RIGHT] = rect(
            right_mouth.x + fw * self.LOWER_CHEEK_INNER,
            nose_tip.y + fh * self.LOWER_CHEEK_TOP,
            right_eye_outer.x + fw * self.LOWER_CHEEK_OUTER,
            right_mouth.y + fh * self.LOWER_CHEEK_BOTTOM,
        )

        zones = []
        for zone_type in ZoneType:
            entry = zone_spec(zone_type)
            zones.append(
                Zone(
                    name=zone_type.value,
                    display_name=entry.display_name,
                    polygon=create_clockwise_polygon(polygons[zone_type]),
                    confidence=entry.confidence,
                    weight=entry.weight,
                )
            )
        return zones

    def _segment_quad(self, start, end, half_width_px: float, w: int, h: int) -> List[Point]:
        """Quad of constant width swept along start -> end, in pixel space."""
        sx, sy = start.x * w, start.y * h
        ex, ey = end.x * w, end.y * h
        length = math.hypot(ex - sx, ey - sy)

        def px(x, y) -> Point:
            return Point(x=round_half_up(x), y=round_half_up(y))

        if length == 0:
            # Nostril on the mouth corner: square of the same half-width
            d = half_width_px
            return [px(sx - d, sy - d), px(sx + d, sy - d), px(sx + d, sy + d), px(sx - d, sy + d)]

        # Perpendicular unit vector
        nx, ny = -(ey - sy) / length, (ex - sx) / length
        ox, oy = nx * half_width_px, ny * half_width_px

        return [
            px(sx - ox, sy - oy),
            px(sx + ox, sy + oy),
            px(ex + ox, ey + oy),
            px(ex - ox, ey - oy),
        ]


def segmentation_to_yaml(result: SegmentationResult) -> str:
    """Zone polygons as YAML, for overlays and offline inspection."""
    data = {
        "zones": [
            {
                "name": zone.name,
                "polygon": [[int(p.x), int(p.y)] for p in zone.polygon],
                "confidence": round(zone.confidence, 2),
            }
            for zone in result.zones
        ],
        "image_size": list(result.image_size),
        "status": result.status,
    }
    if result.reason:
        data["reason"] = result.reason
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=None)
