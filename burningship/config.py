import json
from typing import Any, Dict, FrozenSet, Optional

from PIL import Image

DEFAULT_CONFIG: Dict[str, Any] = {
    "width": 4000,
    "height": 2300,
    "x_range": [-3.45, 0.05],
    "y_range": [-0.99, 0.99],
    "zoom_rate": 0.96,
    "chunk_size": 4,
    "frames_dir": "frames",
    "image_format": "png",
    "workers": None,
    "palette_seed": None,
    "fps": 30,
    "output_video": "burning_ship_zoom.mp4",
}


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Read a JSON config over the defaults; with no path the defaults are returned as-is."""
    cfg = dict(DEFAULT_CONFIG)
    if not config_path:
        return cfg

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_cfg = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Could not read config {config_path}: {e}") from e
    if not isinstance(user_cfg, dict):
        raise ValueError("Config JSON must be an object.")

    unknown = sorted(set(user_cfg) - set(DEFAULT_CONFIG))
    if unknown:
        raise ValueError(f"Unknown config field(s): {', '.join(unknown)}")
    cfg.update(user_cfg)
    return cfg


def writable_formats() -> FrozenSet[str]:
    """File extensions (no dot) whose Pillow format has a save handler."""
    return frozenset(
        ext.lstrip(".").lower()
        for ext, fmt in Image.registered_extensions().items()
        if fmt in Image.SAVE
    )


def _plane_range(cfg: Dict[str, Any], key: str):
    value = cfg[key]
    if not (isinstance(value, (list, tuple)) and len(value) == 2):
        raise ValueError(f"{key} must be [low, high].")
    low, high = float(value[0]), float(value[1])
    if low == high:
        raise ValueError(f"{key} must span a non-empty interval.")
    return (low, high)


def normalise_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    required = ["width", "height", "x_range", "y_range", "zoom_rate", "chunk_size", "frames_dir"]
    for r in required:
        if r not in cfg:
            raise ValueError(f"Missing config field: {r}")

    width = int(cfg["width"])
    height = int(cfg["height"])
    chunk_size = int(cfg["chunk_size"])
    if width <= 0 or height <= 0 or chunk_size <= 0:
        raise ValueError("width/height/chunk_size must be positive.")

    zoom_rate = float(cfg["zoom_rate"])
    if zoom_rate <= 0:
        raise ValueError("zoom_rate must be positive.")

    workers = cfg.get("workers")
    if workers is not None:
        workers = int(workers)
        if workers <= 0:
            raise ValueError("workers must be positive when set.")

    seed = cfg.get("palette_seed")
    if seed is not None:
        seed = int(seed)
        if seed < 0:
            raise ValueError("palette_seed must be non-negative when set.")

    image_format = str(cfg.get("image_format", "png")).lower().lstrip(".")
    if image_format not in writable_formats():
        raise ValueError(f"image_format {image_format!r} cannot be written by Pillow.")

    out = dict(cfg)
    out["width"] = width
    out["height"] = height
    out["x_range"] = _plane_range(cfg, "x_range")
    out["y_range"] = _plane_range(cfg, "y_range")
    out["zoom_rate"] = zoom_rate
    out["chunk_size"] = chunk_size
    out["frames_dir"] = str(cfg["frames_dir"])
    out["image_format"] = image_format
    out["workers"] = workers
    out["palette_seed"] = seed
    out["fps"] = int(cfg.get("fps", 30))
    out["output_video"] = str(cfg.get("output_video", "burning_ship_zoom.mp4"))
    return out
