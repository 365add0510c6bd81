from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from cruxview.config import ViewerConfig, load_config
from cruxview.examples.synthetic import StaticFetcher, encode_stream, generate_point_table
from cruxview.sdk import load_from_config


def _write_config(path: Path, **overrides) -> None:
    config = {
        "server": {"host": "example.org", "port": 8080},
        "collection": "survey",
        "loader": {"max_workers": 2, "timeout_s": 5.0},
        "color": {"attribute": "classification"},
    }
    config.update(overrides)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    cfg_path = tmp_path / "viewer.yaml"
    _write_config(cfg_path)
    cfg = load_config(cfg_path)
    assert cfg.server.base_url == "http://example.org:8080/points"
    assert cfg.collection == "survey"
    assert cfg.color.attribute == "classification"
    assert cfg.color.intensity_max == 255.0


def test_load_config_rejects_bad_values(tmp_path: Path) -> None:
    cfg_path = tmp_path / "viewer.yaml"
    _write_config(cfg_path, color={"gradient": "not-a-colormap"})
    with pytest.raises(ValidationError):
        load_config(cfg_path)
    with pytest.raises(ValidationError):
        ViewerConfig.model_validate({"color": {"fallback_rgba": [2.0, 0.0, 0.0, 1.0]}})


def test_load_from_config_path(tmp_path: Path) -> None:
    cfg_path = tmp_path / "viewer.yaml"
    _write_config(cfg_path)
    payload = encode_stream(generate_point_table(400, seed=5), batch_size=100)
    fetcher = StaticFetcher({"http://example.org:8080/points?p=0.01": payload})

    result = load_from_config(cfg_path, fraction=0.01, fetcher=fetcher, timeout_s=10.0)

    assert result.completed
    assert result.num_points == 400
    assert len(result.instances) == 400
    assert result.framing is not None
    assert result.config.collection == "survey"
    # instances live in a small local frame around the origin
    assert np.abs(result.instances.centers).max() < 200.0


def test_load_from_config_object_override() -> None:
    cfg = ViewerConfig()
    payload = encode_stream(generate_point_table(50))
    result = load_from_config(cfg, attribute="intensity", fetcher=StaticFetcher(default=payload), timeout_s=10.0)
    assert result.config.color.attribute == "intensity"
    assert cfg.color.attribute == "z"
    assert len(result.instances) == 50


def test_load_from_config_survives_bad_payload() -> None:
    result = load_from_config(ViewerConfig(), fetcher=StaticFetcher(default=b"garbage"), timeout_s=10.0)
    assert result.completed
    assert result.num_points == 0
    assert len(result.instances) == 0
    assert result.framing is None
    assert result.spatial.origin is None
