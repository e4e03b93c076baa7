from __future__ import annotations

import logging
import os
import time
from concurrent.futures import Executor, ProcessPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from burningship.fractal.frame import build_frame
from burningship.fractal.geometry import Range
from burningship.fractal.iterator import MAX_ITERATIONS
from burningship.imaging.painter import encode_and_save, frame_path, generate_palette
from burningship.util.logging_setup import get_logger, logging_initialiser

PRINT_ROW = "=" * 45


@dataclass(frozen=True)
class PersistResult:
    frame_number: int
    path: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RenderSummary:
    bursts: int
    results: List[PersistResult] = field(default_factory=list)

    @property
    def frames_written(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failures(self) -> List[PersistResult]:
        return [r for r in self.results if not r.ok]


def burst_ranges(bursts: int, chunk_size: int) -> Iterator[Tuple[int, int]]:
    for i in range(bursts):
        first_frame = i * chunk_size
        yield first_frame, first_frame + chunk_size


def generate_frames(
    img_width: int,
    img_height: int,
    base_range_x: Range,
    base_range_y: Range,
    zoom_rate: float,
    first_frame: int,
    last_frame: int,
    *,
    executor: Executor,
) -> List[np.ndarray]:
    """
    Escape-time grids for frames [first_frame, last_frame).

    Position i of the result is frame first_frame + i whatever order the
    workers finish in.
    """
    build = partial(build_frame, img_width, img_height, base_range_x, base_range_y, zoom_rate=zoom_rate)
    return list(executor.map(build, range(first_frame, last_frame)))


def _persist_one(
    frame_number: int,
    grid: np.ndarray,
    *,
    img_width: int,
    img_height: int,
    palette: np.ndarray,
    frames_dir: str,
    image_format: str,
) -> PersistResult:
    logger = get_logger()
    try:
        path = encode_and_save(
            img_width, img_height, grid, palette, frame_number,
            frames_dir=frames_dir, image_format=image_format,
        )
    except (OSError, ValueError, KeyError) as e:
        # Pillow raises KeyError for formats it can read but not write
        return PersistResult(
            frame_number=frame_number,
            path=frame_path(frames_dir, frame_number, image_format),
            error=f"{type(e).__name__}: {e}",
        )
    logger.debug("[Frame %s] saved -> %s", frame_number, path)
    return PersistResult(frame_number=frame_number, path=path)


def persist_frames(
    img_width: int,
    img_height: int,
    first_frame: int,
    palette: np.ndarray,
    grids: Sequence[np.ndarray],
    *,
    frames_dir: str,
    image_format: str = "png",
    executor: Executor,
) -> List[PersistResult]:
    """Paint and save each grid as frame first_frame + i; failures are returned, not raised."""
    save = partial(
        _persist_one,
        img_width=img_width,
        img_height=img_height,
        palette=palette,
        frames_dir=frames_dir,
        image_format=image_format,
    )
    frame_numbers = range(first_frame, first_frame + len(grids))
    return list(executor.map(save, frame_numbers, grids))


def gen_and_save_frames(
    cfg: Dict[str, Any],
    first_frame: int,
    last_frame: int,
    palette: np.ndarray,
    *,
    executor: Executor,
) -> List[PersistResult]:
    logger = get_logger()
    logger.info("%s", PRINT_ROW)
    logger.info("Generating frames %s-%s", first_frame, last_frame - 1)

    started = time.perf_counter()
    grids = generate_frames(
        cfg["width"], cfg["height"], cfg["x_range"], cfg["y_range"], cfg["zoom_rate"],
        first_frame, last_frame, executor=executor,
    )
    build_time = time.perf_counter() - started

    results = persist_frames(
        cfg["width"], cfg["height"], first_frame, palette, grids,
        frames_dir=cfg["frames_dir"], image_format=cfg["image_format"], executor=executor,
    )
    paint_time = time.perf_counter() - started - build_time

    logger.info("Built frames in %.2fs, painted in %.2fs, total %.2fs",
                build_time, paint_time, build_time + paint_time)
    return results


def render_bursts(
    cfg: Dict[str, Any],
    bursts: int,
    *,
    log_queue=None,
    log_level: int = logging.INFO,
    executor: Optional[Executor] = None,
) -> RenderSummary:
    """
    Render bursts * chunk_size frames, one burst at a time.

    Only one burst's grids are held in memory at once. Without an explicit
    executor a process pool is created for the run, its workers logging
    through log_queue.
    """
    if executor is None:
        with ProcessPoolExecutor(
            max_workers=cfg.get("workers"),
            initializer=logging_initialiser,
            initargs=(log_queue, log_level),
        ) as pool:
            return render_bursts(cfg, bursts, executor=pool)

    logger = get_logger()
    frames_dir = str(cfg["frames_dir"])
    chunk_size = int(cfg["chunk_size"])
    os.makedirs(frames_dir, exist_ok=True)

    palette = generate_palette(MAX_ITERATIONS, seed=cfg.get("palette_seed"))
    summary = RenderSummary(bursts=bursts)

    logger.info("Render start bursts=%s chunk=%s size=%sx%s zoom_rate=%s frames_dir=%s",
                bursts, chunk_size, cfg["width"], cfg["height"], cfg["zoom_rate"], frames_dir)
    total_started = time.perf_counter()

    for first_frame, last_frame in tqdm(burst_ranges(bursts, chunk_size), total=bursts, desc="Bursts", unit="burst"):
        results = gen_and_save_frames(cfg, first_frame, last_frame, palette, executor=executor)
        for r in results:
            if not r.ok:
                logger.error("[Frame %s] failed to persist %s: %s", r.frame_number, r.path, r.error)
        summary.results.extend(results)

    logger.info("%s", PRINT_ROW)
    logger.info("Render complete frames_written=%s failed=%s runtime=%.2fs",
                summary.frames_written, len(summary.failures), time.perf_counter() - total_started)
    return summary
