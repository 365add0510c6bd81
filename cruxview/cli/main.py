from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from ..config import ViewerConfig, load_config
from ..core.query import PointsEndpoint
from ..examples.synthetic import StaticFetcher, encode_stream, generate_point_table
from ..sdk.run import LoadRunResult, load_from_config

app = typer.Typer(help="cruxview point-cloud streaming utilities")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("cruxview").setLevel(numeric)


def _resolve_config(config: Optional[Path]) -> ViewerConfig:
    return load_config(config) if config is not None else ViewerConfig()


def _echo_result(result: LoadRunResult) -> None:
    typer.echo(f"Loaded {result.num_points} points → {len(result.instances)} instances")
    typer.echo(result.spatial.describe())
    if result.framing is not None:
        f = result.framing
        typer.echo(f"Framing: depth {f.depth_scale:.3f}, horizontal {f.horizontal_scale:.3f}")


@app.command("load")
def load(
    config: Optional[Path] = typer.Argument(None, exists=True, readable=True, help="Path to YAML configuration file."),
    fraction: Optional[float] = typer.Option(None, "--fraction", "-p", help="Sampling fraction (omit for the full dataset)."),
    radius: Optional[float] = typer.Option(None, "--radius", "-r", help="Issue a bounds query of this edge length instead."),
    focus: Optional[List[float]] = typer.Option(None, "--focus", help="Bounds query centre (source coordinates), repeat 3 times."),
    attribute: Optional[str] = typer.Option(None, "--attribute", "-a", help="Override color attribute."),
    timeout: Optional[float] = typer.Option(60.0, "--timeout", help="Seconds to wait for the load to finish."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Fetch a dataset headlessly and report what would be rendered."""

    _configure_logging(log_level)
    if focus and len(focus) != 3:
        raise typer.BadParameter("--focus takes exactly three values.", param_hint="--focus")
    cfg = _resolve_config(config)
    result = load_from_config(cfg, fraction=fraction, radius=radius, focus=focus or None,
                              attribute=attribute, timeout_s=timeout)
    _echo_result(result)
    if not result.completed:
        raise typer.Exit(code=1)


@app.command("url")
def url(
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, readable=True, help="Path to YAML configuration file."),
    fraction: Optional[float] = typer.Option(None, "--fraction", "-p", help="Sampling fraction."),
    radius: Optional[float] = typer.Option(None, "--radius", "-r", help="Bounds query edge length."),
    focus: List[float] = typer.Option([], "--focus", help="Bounds query centre, repeat 3 times."),
) -> None:
    """Print the query URL a load command would fetch."""

    cfg = _resolve_config(config)
    endpoint = PointsEndpoint(cfg.server.base_url)
    try:
        if radius is not None:
            centre = focus or [0.0, 0.0, 0.0]
            if len(centre) != 3:
                raise typer.BadParameter("--focus takes exactly three values.", param_hint="--focus")
            typer.echo(endpoint.bounds_url(centre, radius))
        else:
            typer.echo(endpoint.sample_url(fraction))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("demo")
def demo(
    points: int = typer.Option(10_000, "--points", "-n", help="Number of synthetic points."),
    attribute: str = typer.Option("z", "--attribute", "-a", help="Color attribute."),
    seed: int = typer.Option(0, "--seed", help="Random seed for the synthetic dataset."),
    batch_size: int = typer.Option(4096, "--batch-size", help="Rows per Arrow record batch."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Run the full pipeline over a synthetic dataset without a server."""

    if points <= 0:
        raise typer.BadParameter("points must be positive.", param_hint="--points")
    _configure_logging(log_level)
    payload = encode_stream(generate_point_table(points, seed=seed), batch_size=batch_size)
    result = load_from_config(ViewerConfig(), attribute=attribute,
                              fetcher=StaticFetcher(default=payload), timeout_s=30.0)
    _echo_result(result)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
