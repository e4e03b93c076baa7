import json

import pytest

from burningship.config import DEFAULT_CONFIG, load_config, normalise_config, writable_formats


def _write(tmp_path, payload):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_defaults_without_path():
    cfg = load_config(None)
    assert cfg == DEFAULT_CONFIG
    cfg["width"] = 1
    assert DEFAULT_CONFIG["width"] == 4000


def test_defaults_normalise():
    cfg = normalise_config(load_config(None))
    assert cfg["width"] == 4000 and cfg["height"] == 2300
    assert cfg["x_range"] == (-3.45, 0.05)
    assert cfg["y_range"] == (-0.99, 0.99)
    assert cfg["zoom_rate"] == 0.96
    assert cfg["chunk_size"] == 4
    assert cfg["workers"] is None


def test_json_overrides_defaults(tmp_path):
    cfg = normalise_config(load_config(_write(tmp_path, {"width": 64, "chunk_size": 2, "palette_seed": "7"})))
    assert cfg["width"] == 64
    assert cfg["chunk_size"] == 2
    assert cfg["palette_seed"] == 7
    assert cfg["height"] == 2300


def test_unknown_field_rejected(tmp_path):
    with pytest.raises(ValueError, match="max_iter"):
        load_config(_write(tmp_path, {"max_iter": 500}))


def test_non_object_rejected(tmp_path):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, [1, 2]))


def test_bad_json_rejected(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_missing_file_rejected(tmp_path):
    with pytest.raises(ValueError):
        load_config(str(tmp_path / "nope.json"))


@pytest.mark.parametrize(
    "override",
    [
        {"width": 0},
        {"chunk_size": -1},
        {"x_range": [1.0]},
        {"y_range": [0.5, 0.5]},
        {"zoom_rate": 0},
        {"workers": 0},
        {"palette_seed": -3},
        {"image_format": "psd"},
        {"image_format": "notaformat"},
    ],
)
def test_invalid_values(override):
    cfg = load_config(None)
    cfg.update(override)
    with pytest.raises(ValueError):
        normalise_config(cfg)


def test_zoom_out_rate_allowed():
    cfg = load_config(None)
    cfg["zoom_rate"] = 1.05
    assert normalise_config(cfg)["zoom_rate"] == 1.05


def test_missing_field():
    cfg = load_config(None)
    del cfg["zoom_rate"]
    with pytest.raises(ValueError, match="zoom_rate"):
        normalise_config(cfg)


def test_writable_formats():
    formats = writable_formats()
    assert {"png", "jpg", "bmp"} <= formats
    assert "psd" not in formats


def test_image_format_normalised():
    cfg = load_config(None)
    cfg["image_format"] = ".PNG"
    assert normalise_config(cfg)["image_format"] == "png"
