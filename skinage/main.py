import json
import logging
import time
from typing import List, Optional

import cv2
import numpy as np
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from .analyzer import SkinAnalyzer, parse_landmarks
from .config import configure_logging, settings
from .errors import InvalidLandmarksError
from .prediction import calculate_future_prediction
from .schemas import AnalysisReport, FuturePrediction, HealthResponse, PredictionRequest

configure_logging()
logger = logging.getLogger("skinage.api")

app = FastAPI(
    title="Skin Age API",
    description="Clinical zone scoring and skin age estimation from facial landmarks",
    version="1.0.0",
)


@app.get("/", response_model=HealthResponse)
def health_check():
    return {"status": "ok", "message": "Skin Age API is running."}


# CORS Setup
origins = [
    "http://localhost:3000",
    "http://localhost:8000",
    "*",  # Relaxed for dev, tighten in production if needed
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Stateless, safe to share across requests
analyzer = SkinAnalyzer()


def parse_years(years: Optional[str]) -> Optional[List[int]]:
    """'5,10,20' -> [5, 10, 20]. Empty/None -> default horizons."""
    if not years:
        return None
    try:
        return [int(y) for y in years.split(",") if y.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid years list: {years!r}")


@app.post("/analyze", response_model=AnalysisReport)
async def analyze_skin(
    file: UploadFile = File(...),
    landmarks: str = Form(..., description="JSON list of normalized {x, y} landmarks"),
    age: int = Form(..., ge=0, le=120),
    years: Optional[str] = Form(None, description="Comma separated year offsets"),
):
    start_time = time.time()

    # 1. Validation
    if file.content_type not in settings.ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed: {', '.join(settings.ALLOWED_CONTENT_TYPES)}.",
        )

    try:
        points = parse_landmarks(json.loads(landmarks))
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Landmarks are not valid JSON: {e}")
    except InvalidLandmarksError as e:
        raise HTTPException(status_code=400, detail=str(e))

    horizons = parse_years(years)

    # 2. In-memory Read
    contents = await file.read()
    nparr = np.frombuffer(contents, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        raise HTTPException(status_code=400, detail="Failed to decode image data.")

    # 3. Analyze
    try:
        report = analyzer.analyze_from_array(image, points, age, horizons)
    except Exception as e:
        logger.exception("Analysis failed")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    if report.status != "OK":
        raise HTTPException(
            status_code=422,
            detail={"reason_code": report.reason_code, "reason": report.reason},
        )

    logger.info(f"/analyze completed in {time.time() - start_time:.3f}s")
    return report


@app.post("/predict", response_model=FuturePrediction)
def predict(request: PredictionRequest):
    """Re-run the projection for an existing estimate with other horizons."""
    return calculate_future_prediction(request.skin_age, request.years)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
