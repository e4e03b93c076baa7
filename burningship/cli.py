from __future__ import annotations

import argparse
import logging
import os
import subprocess
from typing import Optional

from burningship.config import load_config, normalise_config
from burningship.pipeline import render_bursts
from burningship.util.logging_setup import get_logger, logging_session
from burningship.util.manifest import build_manifest, write_manifest
from burningship.video.opencv_writer import encode_with_opencv

MANIFEST_PATH = os.path.join("artifacts", "run.json")


def _git_commit() -> Optional[str]:
    try:
        r = subprocess.run(["git", "rev-parse", "HEAD"], capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError):
        return None
    return r.stdout.strip()


def _burst_count(value: str) -> int:
    try:
        bursts = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"burst count must be an integer, got {value!r}")
    if bursts < 0:
        raise argparse.ArgumentTypeError(f"burst count must be non-negative, got {bursts}")
    return bursts


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="burningship", description="Burning Ship fractal zoom renderer.")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON. If omitted, built-in defaults are used.")
    p.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    p.add_argument("--log-file", type=str, default="render.log", help="Log file path (rotating). Set empty to disable file logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("render", help="Render bursts of frames into the frames directory.")
    r.add_argument("bursts", type=_burst_count, help="Number of bursts; each burst renders chunk_size frames.")
    r.add_argument("--frames-dir", type=str, default=None, help="Override frames_dir from config.")
    r.add_argument("--workers", type=int, default=None, help="Override the worker process count.")

    e = sub.add_parser("encode", help="Encode rendered frames into an MP4 video using OpenCV.")
    e.add_argument("--input-dir", type=str, default=None, help="Frames directory (defaults to config frames_dir).")
    e.add_argument("--output", type=str, default=None, help="Output MP4 file (defaults to config output_video).")
    e.add_argument("--fps", type=int, default=None, help="Frames per second (defaults to config fps).")

    return p


def _apply_overrides(args, cfg) -> None:
    if args.cmd != "render":
        return
    if args.frames_dir:
        cfg["frames_dir"] = args.frames_dir
    if args.workers is not None:
        cfg["workers"] = args.workers


def _render(args, cfg, queue, log_level: int) -> int:
    logger = get_logger()
    summary = render_bursts(cfg, args.bursts, log_queue=queue, log_level=log_level)

    manifest = build_manifest(config=cfg, bursts=args.bursts, results=summary.results, git_commit=_git_commit())
    write_manifest(MANIFEST_PATH, manifest)
    logger.info("Run manifest written: %s", MANIFEST_PATH)

    if summary.failures:
        logger.error("%s of %s frames failed to persist", len(summary.failures), len(summary.results))
        return 1
    return 0


def _encode(args, cfg) -> int:
    logger = get_logger()
    input_dir = args.input_dir or str(cfg["frames_dir"])
    output = args.output or str(cfg["output_video"])
    fps = args.fps or int(cfg["fps"])
    try:
        encode_with_opencv(input_dir=input_dir, output_file=output, fps=fps)
    except (RuntimeError, ValueError) as e:
        logger.error("Encoding failed: %s", e)
        return 1
    return 0


def main(argv: Optional[list] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    log_file = args.log_file if args.log_file and args.log_file.strip() else None

    with logging_session(level=log_level, log_file=log_file) as queue:
        logger = get_logger()
        try:
            cfg = load_config(args.config)
            _apply_overrides(args, cfg)
            cfg = normalise_config(cfg)
        except (TypeError, ValueError) as e:
            logger.error("Invalid configuration: %s", e)
            return 2

        if args.cmd == "render":
            try:
                os.makedirs(cfg["frames_dir"], exist_ok=True)
            except OSError as e:
                logger.error("Cannot create frames directory %s: %s", cfg["frames_dir"], e)
                return 2
            return _render(args, cfg, queue, log_level)
        if args.cmd == "encode":
            return _encode(args, cfg)
        raise RuntimeError(f"Unknown command: {args.cmd}")
