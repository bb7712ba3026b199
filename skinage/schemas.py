from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional, Tuple


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class QualityCheck(BaseModel):
    valid: bool
    reason_code: Optional[str] = None  # RejectionReason value
    reason: Optional[str] = None
    interocular_distance: float = 0.0  # px
    tilt_angle: float = 0.0  # degrees


class Zone(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str  # ZoneType value, e.g. "eye_crowsfeet_left"
    display_name: str
    polygon: Tuple[Point, ...] = Field(
        ..., description="Absolute pixel vertices, clockwise around the centroid"
    )
    confidence: float
    weight: float


class SegmentationResult(BaseModel):
    zones: List[Zone]
    image_size: Tuple[int, int]  # (width, height)
    status: Literal["OK", "QUALITY_REJECTED"]
    reason_code: Optional[str] = None
    reason: Optional[str] = None


class ZoneMetrics(BaseModel):
    zone_name: str
    display_name: str
    texture_variance: float
    pigmentation_variance: float
    average_brightness: float
    wrinkle_score: int = Field(..., ge=0, le=3)
    pigmentation_score: int = Field(..., ge=0, le=3)
    radiance_score: int = Field(..., ge=0, le=3)
    weight: float
    pixel_count: int
    health_rating: str  # Excellent / Good / Fair / Poor


class ClinicalScore(BaseModel):
    zones: List[ZoneMetrics]
    overall_pigmentation_variance: float
    overall_pigmentation_score: int = Field(..., ge=0, le=3)
    total_score: int
    max_score: int
    rating: Literal["Excellent", "Moderate", "Accelerated"]
    rating_message: str


class ZoneContribution(BaseModel):
    zone_name: str
    display_name: str
    score: int
    normalized_score: float  # 0-100
    weight: float
    weighted_contribution: float


class TopConcern(BaseModel):
    zone_name: str
    display_name: str
    score: int
    weight: float


class SkinAgeEstimate(BaseModel):
    estimated_skin_age: int
    actual_age: int
    age_difference: int
    composite_index: float = Field(..., description="Composite Aging Index, nominally 0-100")
    age_offset: int
    reasoning: str
    breakdown: List[ZoneContribution]
    pigmentation_contribution: float
    top_concerns: List[TopConcern]


class Scenario(BaseModel):
    years_from_now: int
    actual_age: int
    skin_age: int
    aging_years_added: int


class FuturePrediction(BaseModel):
    current_skin_age: int
    current_actual_age: int
    healthy_scenarios: List[Scenario]
    current_path_scenarios: List[Scenario]
    healthy_aging_rate: float
    current_aging_rate: float


class Intervention(BaseModel):
    concern: str
    severity: Literal["None", "Mild", "Moderate", "Severe"]
    priority: int
    recommendations: List[str]


class AnalysisReport(BaseModel):
    status: Literal["OK", "QUALITY_REJECTED"]
    reason_code: Optional[str] = None
    reason: Optional[str] = None
    segmentation: SegmentationResult
    clinical_score: Optional[ClinicalScore] = None
    skin_age: Optional[SkinAgeEstimate] = None
    prediction: Optional[FuturePrediction] = None
    interventions: List[Intervention] = []


class PredictionRequest(BaseModel):
    skin_age: SkinAgeEstimate
    years: Optional[List[int]] = Field(
        None, description="Year offsets to project; defaults to [5, 10, 15, 20]"
    )


class HealthResponse(BaseModel):
    status: str
    message: str
