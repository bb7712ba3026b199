"""
Batch skin age scoring over a folder of photos.

Each image needs a sidecar JSON file with the same stem:
    {"age": 42, "landmarks": [{"x": 0.31, "y": 0.40}, ...]}

Writes one CSV row per image plus a mean / std summary of the composite index.
"""

import argparse
import csv
import glob
import json
import os

import cv2
import numpy as np
from tqdm import tqdm

from skinage.analyzer import SkinAnalyzer, parse_landmarks
from skinage.config import configure_logging
from skinage.errors import InvalidLandmarksError

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

FIELDNAMES = [
    "image",
    "status",
    "reason_code",
    "actual_age",
    "skin_age",
    "composite_index",
    "total_score",
    "rating",
    "zones_scored",
]


def score_image(analyzer: SkinAnalyzer, path: str):
    """1枚の画像を解析してCSV行を返す。サイドカーが無い/壊れている場合はNone"""
    sidecar = os.path.splitext(path)[0] + ".json"
    if not os.path.exists(sidecar):
        return None

    image = cv2.imread(path)
    if image is None:
        return None

    try:
        with open(sidecar, encoding="utf-8") as f:
            meta = json.load(f)
        landmarks = parse_landmarks(meta["landmarks"])
        age = int(meta["age"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, InvalidLandmarksError) as e:
        print(f"Skipping {path}: bad sidecar ({e})")
        return None

    report = analyzer.analyze_from_array(image, landmarks, age)
    row = {
        "image": os.path.basename(path),
        "status": report.status,
        "reason_code": report.reason_code or "",
        "actual_age": age,
    }
    if report.status == "OK":
        row.update(
            {
                "skin_age": report.skin_age.estimated_skin_age,
                "composite_index": round(report.skin_age.composite_index, 2),
                "total_score": report.clinical_score.total_score,
                "rating": report.clinical_score.rating,
                "zones_scored": len(report.clinical_score.zones),
            }
        )
    return row


def main():
    parser = argparse.ArgumentParser(description="Batch skin age scoring")
    parser.add_argument("dataset", help="Folder with images and sidecar JSON files")
    parser.add_argument("--output", default="skin_age_results.csv", help="CSV output path")
    args = parser.parse_args()

    configure_logging("WARNING")
    analyzer = SkinAnalyzer()

    image_paths = sorted(
        p
        for p in glob.glob(os.path.join(args.dataset, "*.*"))
        if p.lower().endswith(IMAGE_EXTENSIONS)
    )
    print(f"[{args.dataset}] {len(image_paths)} images")

    rows = []
    for path in tqdm(image_paths):
        row = score_image(analyzer, path)
        if row:
            rows.append(row)

    if not rows:
        print("Warning: no images with valid sidecar files found.")
        return

    with open(args.output, mode="w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)

    indices = [r["composite_index"] for r in rows if r["status"] == "OK"]
    rejected = len(rows) - len(indices)

    print("\n" + "=" * 50)
    print(f"Scored: {len(indices)}  Rejected by quality gate: {rejected}")
    if indices:
        print(f"Composite index: mean {np.mean(indices):.2f} (±{np.std(indices):.2f})")
    print(f"結果を {args.output} に保存しました。")


if __name__ == "__main__":
    main()
