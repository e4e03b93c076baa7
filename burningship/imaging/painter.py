from __future__ import annotations

import os
from typing import Optional

import numpy as np
from PIL import Image


def generate_palette(max_iterations: int, seed: Optional[int] = None) -> np.ndarray:
    """Random RGB table with one colour per escape-time value, 0..max_iterations inclusive."""
    rng = np.random.default_rng(seed)
    palette = rng.integers(0, 256, size=(max_iterations + 1, 3), dtype=np.uint8)
    palette.flags.writeable = False
    return palette


def paint_frame(width: int, height: int, grid: np.ndarray, palette: np.ndarray) -> Image.Image:
    if grid.shape != (height, width):
        raise ValueError(f"grid shape {grid.shape} does not match {height}x{width}")
    if grid.size and int(grid.max()) >= len(palette):
        raise ValueError(f"escape time {int(grid.max())} outside palette of {len(palette)} colours")
    rgb = palette[grid]
    return Image.fromarray(np.ascontiguousarray(rgb))


def frame_path(frames_dir: str, frame_number: int, image_format: str = "png") -> str:
    return os.path.join(frames_dir, f"{frame_number:08d}.{image_format}")


def encode_and_save(
    width: int,
    height: int,
    grid: np.ndarray,
    palette: np.ndarray,
    frame_number: int,
    *,
    frames_dir: str = "frames",
    image_format: str = "png",
) -> str:
    img = paint_frame(width, height, grid, palette)
    path = frame_path(frames_dir, frame_number, image_format)
    img.save(path)
    return path
