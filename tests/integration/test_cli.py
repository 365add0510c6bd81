from __future__ import annotations

from pathlib import Path

import yaml
from typer.testing import CliRunner

from cruxview.cli.main import app
from cruxview.core.fetcher import RemoteFetcher
from cruxview.examples.synthetic import encode_stream, generate_point_table


def test_demo_command() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["demo", "--points", "500", "--attribute", "classification"])
    assert result.exit_code == 0, result.stdout
    assert "Loaded 500 points → 500 instances" in result.stdout
    assert "Data Origin:" in result.stdout


def test_url_command_sample() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["url", "--fraction", "0.01"])
    assert result.exit_code == 0, result.stdout
    assert result.stdout.strip() == "http://0.0.0.0:3000/points?p=0.01"


def test_url_command_bounds(tmp_path: Path) -> None:
    cfg_path = tmp_path / "viewer.yaml"
    with open(cfg_path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"server": {"host": "pc.local", "port": 9000}}, f)
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["url", "--config", str(cfg_path), "--radius", "4", "--focus", "10", "--focus", "20", "--focus", "30"],
    )
    assert result.exit_code == 0, result.stdout
    assert result.stdout.strip() == "http://pc.local:9000/points?bounds=8.0,18.0,28.0,12.0,22.0,32.0,0,0.0005"


def test_url_command_rejects_bad_fraction() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["url", "--fraction", "2"])
    assert result.exit_code != 0


def test_load_command_with_config(tmp_path: Path, monkeypatch) -> None:
    payload = encode_stream(generate_point_table(120, seed=9))
    requested = []

    def fake_fetch(self, url: str) -> bytes:
        requested.append(url)
        return payload

    monkeypatch.setattr(RemoteFetcher, "fetch", fake_fetch)

    cfg_path = tmp_path / "viewer.yaml"
    with open(cfg_path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"server": {"host": "pc.local", "port": 9000}, "color": {"attribute": "intensity"}}, f)

    runner = CliRunner()
    result = runner.invoke(app, ["load", str(cfg_path), "--fraction", "0.001", "--timeout", "10", "--log-level", "DEBUG"])
    assert result.exit_code == 0, result.stdout
    assert requested == ["http://pc.local:9000/points?p=0.001"]
    assert "Loaded 120 points → 120 instances" in result.stdout
    assert "Framing:" in result.stdout
