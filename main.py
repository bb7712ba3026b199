import argparse
import json
import os
import sys

import cv2

# skinageモジュールが見つかるようにパスを追加
sys.path.append(os.path.join(os.path.dirname(__file__), "."))

from skinage.analyzer import SkinAnalyzer, parse_landmarks
from skinage.config import configure_logging
from skinage.errors import InvalidLandmarksError
from skinage.geometric import segmentation_to_yaml


def print_report(report) -> None:
    print("\n" + "=" * 50)
    print("          CLINICAL SKIN AGE RESULT          ")
    print("=" * 50)

    if report.status != "OK":
        print(f"Rejected ({report.reason_code}): {report.reason}")
        print("Please retake the photo facing the camera, closer and level.")
        return

    clinical = report.clinical_score
    print("[Zone Scores]  wrinkle / pigmentation / radiance")
    for z in clinical.zones:
        print(
            f"  - {z.display_name:<24}: {z.wrinkle_score}/{z.pigmentation_score}/{z.radiance_score}"
            f"  (texture {z.texture_variance:5.1f}, {z.health_rating})"
        )
    print(f"  Overall pigmentation : {clinical.overall_pigmentation_score}/3")
    print(
        f"  TOTAL CLINICAL SCORE : {clinical.total_score}/{clinical.max_score} "
        f"-> {clinical.rating_message}"
    )

    est = report.skin_age
    print("-" * 50)
    print(f"Composite Aging Index : {est.composite_index:.2f}")
    print(f"  {est.reasoning}")
    print(
        f"Skin Age    : {est.estimated_skin_age} "
        f"(actual {est.actual_age}, {est.age_difference:+d})"
    )

    print("\n[Future Prediction]")
    for healthy, current in zip(
        report.prediction.healthy_scenarios, report.prediction.current_path_scenarios
    ):
        print(
            f"  In {healthy.years_from_now:>2} years (age {healthy.actual_age}): "
            f"healthy {healthy.skin_age} / current {current.skin_age}"
        )

    print("\n[Interventions]")
    for item in report.interventions:
        print(f"  {item.priority}. {item.concern} ({item.severity})")
        for rec in item.recommendations:
            print(f"     • {rec}")


def main():
    parser = argparse.ArgumentParser(description="Clinical Skin Age Estimation")
    parser.add_argument("image_path", help="Path to the face image file")
    parser.add_argument(
        "--landmarks",
        required=True,
        help="JSON file with normalized landmarks ([{x, y}, ...] or [[x, y], ...])",
    )
    parser.add_argument("--age", type=int, required=True, help="Chronological age")
    parser.add_argument(
        "--years",
        type=int,
        nargs="+",
        default=None,
        help="Year offsets to project (default: 5 10 15 20)",
    )
    parser.add_argument("--json", action="store_true", help="Print the raw JSON report")
    parser.add_argument("--zones-yaml", default=None, help="Write the zone polygons to this YAML file")
    parser.add_argument("--log-level", default=None, help="Override SKINAGE_LOG_LEVEL")

    args = parser.parse_args()
    configure_logging(args.log_level)

    img = cv2.imread(args.image_path)
    if img is None:
        print(f"Error loading image: {args.image_path}")
        return 1

    try:
        with open(args.landmarks, encoding="utf-8") as f:
            landmarks = parse_landmarks(json.load(f))
    except (OSError, json.JSONDecodeError, InvalidLandmarksError) as e:
        print(f"Error loading landmarks: {e}")
        return 1

    analyzer = SkinAnalyzer()
    report = analyzer.analyze_from_array(img, landmarks, args.age, args.years)

    if args.zones_yaml:
        with open(args.zones_yaml, "w", encoding="utf-8") as f:
            f.write(segmentation_to_yaml(report.segmentation))

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_report(report)

    return 0 if report.status == "OK" else 2


if __name__ == "__main__":
    sys.exit(main())
