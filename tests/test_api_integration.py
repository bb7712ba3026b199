import json

import cv2
import pytest
from fastapi.testclient import TestClient

from skinage.main import app

from conftest import build_landmarks

client = TestClient(app)


def encode_png(image_rgb):
    _, encoded = cv2.imencode(".png", cv2.cvtColor(image_rgb, cv2.COLOR_RGB2BGR))
    return encoded.tobytes()


def landmarks_json(points):
    return json.dumps([p.model_dump() for p in points])


@pytest.fixture
def png_bytes(uniform_rgb):
    return encode_png(uniform_rgb)


def test_health_check():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "message": "Skin Age API is running.",
    }


def test_analyze_success(png_bytes):
    response = client.post(
        "/analyze",
        files={"file": ("face.png", png_bytes, "image/png")},
        data={"landmarks": landmarks_json(build_landmarks()), "age": "40", "years": "5,10"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert len(data["segmentation"]["zones"]) == 10
    assert data["clinical_score"]["rating"] == "Excellent"
    assert data["clinical_score"]["max_score"] == 21
    assert data["skin_age"]["estimated_skin_age"] == 35
    assert [s["years_from_now"] for s in data["prediction"]["healthy_scenarios"]] == [5, 10]
    assert len(data["interventions"]) == 3


def test_analyze_quality_rejected(png_bytes):
    response = client.post(
        "/analyze",
        files={"file": ("face.png", png_bytes, "image/png")},
        data={"landmarks": landmarks_json(build_landmarks(100)), "age": "40"},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["reason_code"] == "InsufficientLandmarks"


def test_invalid_file_type():
    response = client.post(
        "/analyze",
        files={"file": ("test.txt", b"not an image", "text/plain")},
        data={"landmarks": "[]", "age": "40"},
    )
    assert response.status_code == 400


def test_undecodable_image():
    response = client.post(
        "/analyze",
        files={"file": ("face.png", b"not really a png", "image/png")},
        data={"landmarks": landmarks_json(build_landmarks()), "age": "40"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Failed to decode image data."


@pytest.mark.parametrize("landmarks", ["not json", '{"x": 1}', '[{"x": 0.5}]'])
def test_malformed_landmarks(png_bytes, landmarks):
    response = client.post(
        "/analyze",
        files={"file": ("face.png", png_bytes, "image/png")},
        data={"landmarks": landmarks, "age": "40"},
    )
    assert response.status_code == 400


def test_invalid_years(png_bytes):
    response = client.post(
        "/analyze",
        files={"file": ("face.png", png_bytes, "image/png")},
        data={"landmarks": landmarks_json(build_landmarks()), "age": "40", "years": "5,ten"},
    )
    assert response.status_code == 400


def test_predict_endpoint():
    estimate = {
        "estimated_skin_age": 42,
        "actual_age": 40,
        "age_difference": 2,
        "composite_index": 32.5,
        "age_offset": 2,
        "reasoning": "Index 30-44: Good skin condition (Age + 2)",
        "breakdown": [],
        "pigmentation_contribution": 0.0,
        "top_concerns": [],
    }
    response = client.post("/predict", json={"skin_age": estimate, "years": [10]})

    assert response.status_code == 200
    data = response.json()
    assert data["healthy_scenarios"][0]["skin_age"] == 50
    assert data["current_path_scenarios"][0]["skin_age"] == 54


def test_nan_landmark_is_bad_request(png_bytes):
    points = build_landmarks(overrides={33: (float("nan"), 0.4)})
    payload = landmarks_json(points)
    assert "NaN" in payload

    response = client.post(
        "/analyze",
        files={"file": ("face.png", png_bytes, "image/png")},
        data={"landmarks": payload, "age": "40"},
    )
    assert response.status_code == 400
    assert "non-finite" in response.json()["detail"]
