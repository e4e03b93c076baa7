import importlib.metadata as importlib_metadata
import json
import os
import platform
import sys
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from burningship.fractal.geometry import frame_window
from burningship.fractal.iterator import MAX_ITERATIONS

_PACKAGES = ["numpy", "numba", "Pillow", "tqdm", "opencv-python-headless", "natsort"]


@dataclass(frozen=True)
class RunManifest:
    started_utc: str
    config: Dict[str, Any]
    max_iterations: int
    python: Dict[str, Any]
    packages: Dict[str, str]
    git: Dict[str, Any]
    system: Dict[str, Any]
    windows: Dict[str, Any]
    frames: Dict[str, Any]


def _utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _pkg_version(name: str) -> Optional[str]:
    try:
        return importlib_metadata.version(name)
    except importlib_metadata.PackageNotFoundError:
        return None


def _windows(config: Dict[str, Any], total_frames: int) -> Dict[str, Any]:
    # first and last plane windows, handy for judging float64 exhaustion
    if total_frames <= 0:
        return {}
    out = {}
    for label, index in (("first", 0), ("last", total_frames - 1)):
        range_x, range_y = frame_window(config["x_range"], config["y_range"], index, config["zoom_rate"])
        out[label] = {"frame": index, "x_range": list(range_x), "y_range": list(range_y)}
    return out


def build_manifest(
    *,
    config: Dict[str, Any],
    bursts: int,
    results: List[Any],
    git_commit: Optional[str],
) -> RunManifest:
    pkgs = {}
    for name in _PACKAGES:
        v = _pkg_version(name)
        if v:
            pkgs[name] = v

    failed = [{"frame": r.frame_number, "path": r.path, "error": r.error} for r in results if not r.ok]
    total_frames = bursts * int(config["chunk_size"])

    return RunManifest(
        started_utc=_utc_iso(),
        config=config,
        max_iterations=MAX_ITERATIONS,
        python={"version": sys.version, "executable": sys.executable},
        packages=pkgs,
        git={"commit": git_commit},
        system={"platform": platform.platform(), "machine": platform.machine(), "cpu_count": os.cpu_count()},
        windows=_windows(config, total_frames),
        frames={"bursts": bursts, "requested": total_frames, "written": len(results) - len(failed), "failed": failed},
    )


def write_manifest(path: str, manifest: RunManifest) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(manifest), f, indent=2, sort_keys=True)
