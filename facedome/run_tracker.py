#!/usr/bin/env python3
"""CLI for running RetinaFace detection + face tracking over a video file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import cv2
import pandas as pd

from facedome.detectors.face_retina import load_face_detector
from facedome.io_utils import dump_json, ensure_dir, infer_video_stem, load_yaml, setup_logging
from facedome.tracking.config import TrackerConfig
from facedome.tracking.driver import FrameDriver
from facedome.tracking.lifecycle import FaceTracker
from facedome.types import TrackedFace

LOGGER = logging.getLogger("facedome.run_tracker")

FACE_COLUMNS = ["frame_idx", "timestamp_ms", "track_id", "origin_x", "origin_y", "width", "height", "score"]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track faces across a video and export per-frame boxes")
    parser.add_argument("video", type=Path, help="Input video file")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data/outputs"),
        help="Output directory root",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/tracker.yaml"),
        help="Tracker configuration YAML",
    )
    parser.add_argument(
        "--providers",
        type=str,
        nargs="*",
        default=None,
        help="ONNX execution providers (overrides platform defaults)",
    )
    parser.add_argument(
        "--det-size",
        type=int,
        nargs=2,
        default=None,
        metavar=("WIDTH", "HEIGHT"),
        help="Override RetinaFace detection size",
    )
    parser.add_argument("--face-det-threshold", type=float, default=None)
    parser.add_argument("--expiry-window-ms", type=float, default=None)
    parser.add_argument("--match-factor", type=float, default=None)
    parser.add_argument(
        "--stride",
        type=int,
        default=None,
        help="Override frame sampling stride",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_tracker_config(args: argparse.Namespace, cfg: Dict) -> TrackerConfig:
    """Merge CLI overrides over the ``tracker`` section of the config file."""
    tracker_cfg = dict(cfg.get("tracker") or {})
    if args.expiry_window_ms is not None:
        tracker_cfg["expiry_window_ms"] = args.expiry_window_ms
    if args.match_factor is not None:
        tracker_cfg["match_factor"] = args.match_factor
    return TrackerConfig.from_dict(tracker_cfg)


def face_rows(frame_idx: int, timestamp_ms: float, faces: Sequence[TrackedFace]) -> List[Dict]:
    rows = []
    for face in faces:
        box = face.bounding_box
        rows.append(
            {
                "frame_idx": frame_idx,
                "timestamp_ms": timestamp_ms,
                "track_id": face.id,
                "origin_x": box.origin_x,
                "origin_y": box.origin_y,
                "width": box.width,
                "height": box.height,
                "score": face.score,
            }
        )
    return rows


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    cfg = load_yaml(args.config) if args.config.exists() else {}
    if not cfg:
        LOGGER.warning("Config %s missing or empty; using defaults", args.config)
    detector_cfg = cfg.get("detector") or {}

    stride = args.stride if args.stride is not None else int(cfg.get("stride", 1))
    if stride < 1:
        LOGGER.warning("Invalid stride %s requested; defaulting to 1", stride)
        stride = 1
    det_size = tuple(args.det_size) if args.det_size else tuple(detector_cfg.get("det_size", [640, 640]))
    det_thresh = (
        args.face_det_threshold if args.face_det_threshold is not None else float(detector_cfg.get("det_thresh", 0.5))
    )
    providers = args.providers if args.providers else detector_cfg.get("providers")

    tracker = FaceTracker(build_tracker_config(args, cfg))
    detector = load_face_detector(providers=providers, det_size=det_size, det_thresh=det_thresh)
    if detector is None:
        LOGGER.warning("Running without a face detector; every frame will report no faces")
    driver = FrameDriver(tracker, detector)

    video_path = args.video
    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise RuntimeError(f"Unable to open video {video_path}")
    fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    frame_count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT)) or 0
    LOGGER.info(
        "Running tracker video=%s fps=%.2f frames=%s stride=%d",
        video_path,
        fps,
        frame_count or "unknown",
        stride,
    )

    progress_step = max(1, frame_count // 20) if frame_count else 500
    rows: List[Dict] = []
    annotations: Dict[int, List[Dict]] = {}
    seen_ids = set()
    frame_idx = -1
    while True:
        ret, frame = cap.read()
        if not ret:
            break
        frame_idx += 1
        if frame_idx % stride != 0:
            continue
        timestamp_ms = (frame_idx / fps) * 1000.0
        faces = driver.tick(frame, timestamp_ms)
        seen_ids.update(face.id for face in faces)
        if faces:
            annotations[frame_idx] = [face.to_dict() for face in faces]
            rows.extend(face_rows(frame_idx, timestamp_ms, faces))
        if (frame_idx + 1) % progress_step == 0:
            LOGGER.info(
                "Tracker progress: %d frames seen (processed=%d, live tracks=%d, ids issued=%d)",
                frame_idx + 1,
                driver.frames_processed,
                len(tracker.tracks),
                len(seen_ids),
            )
    cap.release()

    video_stem = infer_video_stem(video_path)
    output_dir = ensure_dir(args.output_dir / video_stem)
    faces_csv = output_dir / f"{video_stem}-faces.csv"
    annotations_json = output_dir / f"{video_stem}-annotations.json"
    faces_df = pd.DataFrame(rows, columns=FACE_COLUMNS)
    faces_df.to_csv(faces_csv, index=False)
    dump_json(annotations_json, annotations)
    LOGGER.info(
        "Track summary: frames=%d processed=%d face_rows=%d identities=%d",
        frame_idx + 1,
        driver.frames_processed,
        len(faces_df),
        len(seen_ids),
    )
    LOGGER.info("Wrote %s and %s", faces_csv, annotations_json)


if __name__ == "__main__":
    main()
