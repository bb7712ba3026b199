from enum import Enum


class RejectionReason(str, Enum):
    INSUFFICIENT_LANDMARKS = "InsufficientLandmarks"
    EXCESSIVE_TILT = "ExcessiveTilt"
    FACE_TOO_SMALL = "FaceTooSmall"


REJECTION_MESSAGES = {
    RejectionReason.INSUFFICIENT_LANDMARKS: "Insufficient landmarks detected",
    RejectionReason.EXCESSIVE_TILT: "Face tilt exceeds ±20°",
    RejectionReason.FACE_TOO_SMALL: "Face too small in frame",
}


class SkinAnalysisError(Exception):
    """Base class for errors raised by the skin analysis pipeline."""


class QualityRejectedError(SkinAnalysisError):
    """The landmark set failed the quality gate; a new photo is needed."""

    def __init__(self, reason_code: RejectionReason, message: str = None):
        self.reason_code = reason_code
        self.message = message or REJECTION_MESSAGES[reason_code]
        super().__init__(f"{self.reason_code.value}: {self.message}")


class InvalidLandmarksError(SkinAnalysisError):
    """Landmark payload could not be parsed into points."""
