from __future__ import annotations

import argparse
import json
import logging
import math
from pathlib import Path

import numpy as np

from raycost.eval.scoring import METRICS, score_observations
from raycost.logging_utils import make_logger, timed
from raycost.meta import load_scene_meta
from raycost.projection import is_within_depth_band


def _nan_to_none(values: np.ndarray) -> list[float | None]:
    return [float(v) if np.isfinite(v) else None for v in values]


def _strict_json(obj: dict, **kwargs) -> str:
    """Dump as standard JSON: nan and inf become null."""
    clean = json.loads(json.dumps(obj), parse_constant=lambda _c: None)
    return json.dumps(clean, **kwargs)


def run_score(
    scene_path: Path,
    *,
    metric: str,
    threshold: float | None,
    per_point: bool,
    out_json: Path | None,
    logger: logging.Logger,
) -> dict:
    scene = load_scene_meta(scene_path)
    with timed(logger, f"Scoring {scene.num_observations} observations ({metric})"):
        scores = score_observations(
            scene.uv_px, scene.xyz, scene.pose, scene.camera, metric=metric, threshold=threshold
        )
    report: dict = {"scene": str(scene_path), "metric": metric, "threshold": threshold, "summary": scores.summary()}
    if per_point:
        report["errors"] = _nan_to_none(scores.errors)
        report["in_depth_band"] = scores.in_depth_band.tolist()
        report["inliers"] = scores.inliers.tolist()
    if out_json is not None:
        out_json.parent.mkdir(parents=True, exist_ok=True)
        out_json.write_text(_strict_json(report, indent=2, sort_keys=True), encoding="utf-8")
        logger.info("Wrote %s", out_json)
    return report


def main(argv: list[str] | None = None) -> int:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")

    parser = argparse.ArgumentParser(prog="raycost")
    sub = parser.add_subparsers(dest="cmd", required=True)

    score = sub.add_parser("score", parents=[common], help="Score scene observations against one camera pose.")
    score.add_argument("scene", type=Path, help="Scene JSON (schema raycost.scene.v0).")
    score.add_argument("--metric", type=str, default="angular", choices=list(METRICS))
    thr = score.add_mutually_exclusive_group()
    thr.add_argument("--threshold", type=float, default=None, help="Inlier threshold in metric units.")
    thr.add_argument(
        "--threshold-deg",
        type=float,
        default=None,
        help="Inlier threshold as an angle in degrees (converted to the metric's units).",
    )
    score.add_argument("--per-point", action="store_true", help="Include per-observation errors in the report.")
    score.add_argument("--out-json", type=Path, default=None)

    depth = sub.add_parser("depth-check", parents=[common], help="Count scene points within the admissible depth band.")
    depth.add_argument("scene", type=Path)

    args = parser.parse_args(argv)
    logger = make_logger("raycost", logging.DEBUG if args.verbose else logging.INFO)

    if args.cmd == "score":
        threshold = args.threshold
        if args.threshold_deg is not None:
            angle = math.radians(args.threshold_deg)
            # reprojection metric is 4 tan^2(angle/2)
            threshold = angle if args.metric == "angular" else 4.0 * math.tan(0.5 * angle) ** 2
        report = run_score(
            args.scene,
            metric=args.metric,
            threshold=threshold,
            per_point=args.per_point,
            out_json=args.out_json,
            logger=logger,
        )
        print(_strict_json(report["summary"], sort_keys=True))
        return 0

    if args.cmd == "depth-check":
        scene = load_scene_meta(args.scene)
        ok = np.asarray(is_within_depth_band(scene.pose, scene.xyz), dtype=bool).reshape(-1)
        print(json.dumps({"count": int(ok.size), "in_depth_band": int(np.count_nonzero(ok))}, sort_keys=True))
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
