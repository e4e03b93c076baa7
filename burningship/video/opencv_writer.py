from __future__ import annotations

import glob
import os
from typing import Iterator, List, Sequence, Tuple

import cv2
import numpy as np
from natsort import natsorted
from tqdm import tqdm

from burningship.util.logging_setup import get_logger

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "bmp")
FOURCC = "mp4v"


def collect_frames(input_dir: str, extensions: Sequence[str] = IMAGE_EXTENSIONS) -> List[str]:
    paths = [p for ext in extensions for p in glob.glob(os.path.join(input_dir, f"*.{ext}"))]
    return natsorted(paths)


def _load_bgr(path: str) -> np.ndarray:
    img = cv2.imread(path)
    if img is None:
        raise RuntimeError(f"Unreadable frame image: {path}")
    return img


def _fitted_frames(paths: Sequence[str], size: Tuple[int, int]) -> Iterator[np.ndarray]:
    # frames that drift from the first frame's size are scaled to match it
    w, h = size
    for path in paths:
        img = _load_bgr(path)
        if img.shape[1] != w or img.shape[0] != h:
            img = cv2.resize(img, size, interpolation=cv2.INTER_AREA)
        yield img


def _open_writer(output_file: str, fps: int, size: Tuple[int, int]) -> "cv2.VideoWriter":
    writer = cv2.VideoWriter(output_file, cv2.VideoWriter_fourcc(*FOURCC), fps, size)
    if not writer.isOpened():
        raise RuntimeError(f"OpenCV could not open {output_file} for writing")
    return writer


def encode_with_opencv(*, input_dir: str, output_file: str, fps: int) -> int:
    """Stitch the frame images in input_dir into an mp4v video; returns the frame count."""
    logger = get_logger()

    paths = collect_frames(input_dir)
    if not paths:
        raise ValueError(f"No frames found in {input_dir}")

    height, width = _load_bgr(paths[0]).shape[:2]
    writer = _open_writer(output_file, fps, (width, height))
    logger.info("Encoding %s: %s frames at %sx%s, %s fps", output_file, len(paths), width, height, fps)
    try:
        for img in tqdm(_fitted_frames(paths, (width, height)), total=len(paths), desc="Encoding", unit="frame"):
            writer.write(img)
    finally:
        writer.release()

    logger.info("Video written: %s", output_file)
    return len(paths)
