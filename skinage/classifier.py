import logging
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, List, Sequence, Tuple

from .pixels import (
    PixelBuffer,
    calculate_average_brightness,
    calculate_pigmentation_variance,
    calculate_texture_variance,
    extract_polygon_pixels,
)
from .schemas import ClinicalScore, Zone, ZoneMetrics
from .zones import zone_spec

logger = logging.getLogger("skinage.classifier")


# 臨床スコア閾値 (固定値。設定で変更しない)
TEXTURE_THRESHOLDS = (15.0, 25.0, 40.0)  # texture variance -> wrinkle 0/1/2/3
PIGMENTATION_THRESHOLD = 20.0  # binary: below -> 0, else 3
BRIGHTNESS_THRESHOLDS = (140.0, 120.0, 100.0)  # >140 -> 0, >=120 -> 1, >=100 -> 2

# NOTE: 21 predates the 10-zone layout. The summed quantity can reach
# 10 * 3 + 3 = 33, so total_score may exceed max_score. Kept for parity with
# stored results; display layers should clamp the ratio.
MAX_CLINICAL_SCORE = 21
THEORETICAL_MAX_SCORE = 33

RATING_BANDS = (
    (6, "Excellent", "Excellent - aging well"),
    (12, "Moderate", "Moderate - normal aging"),
)
FALLBACK_RATING = ("Accelerated", "Accelerated - needs attention")


def score_texture_variance(variance: float) -> int:
    """Wrinkle score (0-3) from brightness std."""
    for score, threshold in enumerate(TEXTURE_THRESHOLDS):
        if variance < threshold:
            return score
    return 3


def score_pigmentation_evenness(variance: float) -> int:
    return 0 if variance < PIGMENTATION_THRESHOLD else 3


def score_brightness(brightness: float) -> int:
    """Radiance score (0-3). Inverse scale: brighter skin scores lower."""
    if brightness > BRIGHTNESS_THRESHOLDS[0]:
        return 0
    if brightness >= BRIGHTNESS_THRESHOLDS[1]:
        return 1
    if brightness >= BRIGHTNESS_THRESHOLDS[2]:
        return 2
    return 3


def get_zone_health_rating(
    wrinkle_score: int, pigmentation_score: int, radiance_score: int
) -> str:
    """Per-zone label from the sum of its three sub-scores."""
    total = wrinkle_score + pigmentation_score + radiance_score
    if total == 0:
        return "Excellent"
    if total <= 3:
        return "Good"
    if total <= 6:
        return "Fair"
    return "Poor"


def get_rating(total_score: int) -> Tuple[str, str]:
    for upper, rating, message in RATING_BANDS:
        if total_score <= upper:
            return rating, message
    return FALLBACK_RATING


def weighted_pigmentation_variance(zones: Iterable[ZoneMetrics]) -> float:
    """Pixel-count weighted mean of the zones' pigmentation variances."""
    weighted_sum, pixels = reduce(
        lambda acc, z: (acc[0] + z.pigmentation_variance * z.pixel_count, acc[1] + z.pixel_count),
        zones,
        (0.0, 0),
    )
    return weighted_sum / pixels if pixels > 0 else 0.0


@dataclass
class ZoneStatistics:
    texture_variance: float
    pigmentation_variance: float
    average_brightness: float
    pixel_count: int


class ClinicalScorer:
    """
    ゾーンごとのピクセル統計から臨床スコアを算出するクラス。

    Each zone gets wrinkle / pigmentation / radiance sub-scores from fixed
    thresholds. The total is the sum of wrinkle scores plus one overall
    pigmentation score computed over all zones' pixels.
    """

    def measure_zone(
        self, buffer: PixelBuffer, zone: Zone, image_width: int, image_height: int
    ) -> ZoneStatistics:
        samples = extract_polygon_pixels(buffer, zone.polygon, image_width, image_height)
        return ZoneStatistics(
            texture_variance=calculate_texture_variance(samples),
            pigmentation_variance=calculate_pigmentation_variance(samples),
            average_brightness=calculate_average_brightness(samples),
            pixel_count=samples.count,
        )

    def score_zone(self, zone: Zone, stats: ZoneStatistics) -> ZoneMetrics:
        wrinkle = score_texture_variance(stats.texture_variance)
        pigmentation = score_pigmentation_evenness(stats.pigmentation_variance)
        radiance = score_brightness(stats.average_brightness)
        return ZoneMetrics(
            zone_name=zone.name,
            display_name=zone_spec(zone.name).display_name,
            texture_variance=stats.texture_variance,
            pigmentation_variance=stats.pigmentation_variance,
            average_brightness=stats.average_brightness,
            wrinkle_score=wrinkle,
            pigmentation_score=pigmentation,
            radiance_score=radiance,
            weight=zone_spec(zone.name).weight,
            pixel_count=stats.pixel_count,
            health_rating=get_zone_health_rating(wrinkle, pigmentation, radiance),
        )

    def aggregate(self, zone_metrics: List[ZoneMetrics]) -> ClinicalScore:
        overall_variance = weighted_pigmentation_variance(zone_metrics)
        overall_score = score_pigmentation_evenness(overall_variance)

        total_score = sum(z.wrinkle_score for z in zone_metrics) + overall_score
        rating, message = get_rating(total_score)

        if total_score > MAX_CLINICAL_SCORE:
            logger.info(
                f"Total score {total_score} exceeds nominal max {MAX_CLINICAL_SCORE} "
                f"(reachable max {THEORETICAL_MAX_SCORE})"
            )

        return ClinicalScore(
            zones=zone_metrics,
            overall_pigmentation_variance=overall_variance,
            overall_pigmentation_score=overall_score,
            total_score=total_score,
            max_score=MAX_CLINICAL_SCORE,
            rating=rating,
            rating_message=message,
        )

    def score(
        self,
        buffer: PixelBuffer,
        zones: Sequence[Zone],
        image_width: int,
        image_height: int,
    ) -> ClinicalScore:
        """
        Args:
            buffer: RGB pixel access for the analysed image
            zones: segmented zones (absolute pixel polygons)
            image_width, image_height: image size in pixels

        Zones without any pixel inside the image are left out of the result
        rather than scored as zero.
        """
        zone_metrics = []
        for zone in zones:
            stats = self.measure_zone(buffer, zone, image_width, image_height)
            if stats.pixel_count == 0:
                logger.warning(f"Zone {zone.name}: no pixels extracted, skipping")
                continue

            metrics = self.score_zone(zone, stats)
            logger.debug(
                f"Zone {zone.name}: {stats.pixel_count}px "
                f"texture={stats.texture_variance:.2f} "
                f"pigmentation={stats.pigmentation_variance:.2f} "
                f"brightness={stats.average_brightness:.2f} -> "
                f"W{metrics.wrinkle_score} P{metrics.pigmentation_score} R{metrics.radiance_score}"
            )
            zone_metrics.append(metrics)

        result = self.aggregate(zone_metrics)
        logger.info(
            f"Clinical score {result.total_score}/{result.max_score} ({result.rating}) "
            f"over {len(zone_metrics)} zones"
        )
        return result
