from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

from cruxview.config import ViewerConfig, load_config
from cruxview.core.colors import unpack_rgba
from cruxview.core.instances import RenderInstances
from cruxview.examples.synthetic import StaticFetcher, encode_stream, generate_point_table
from cruxview.sdk import load_from_config

matplotlib.use("Agg")

IMAGE_DIR = Path("examples/images")


def render_instances(name: str, instances: RenderInstances, max_points: int = 200_000) -> Path:
    if len(instances) == 0:
        raise ValueError(f"No instances to render for {name}")
    centers = instances.centers
    colors = unpack_rgba(instances.colors).astype(np.float32) / 255.0
    if centers.shape[0] > max_points:
        idx = np.random.default_rng(0).choice(centers.shape[0], size=max_points, replace=False)
        centers, colors = centers[idx], colors[idx]

    # render axes: x right, y up, z back → top-down is (x, -z)
    x, up, back = centers[:, 0], centers[:, 1], centers[:, 2]

    fig = plt.figure(figsize=(8, 6), dpi=150)
    ax_top = fig.add_subplot(2, 1, 1)
    ax_top.scatter(x, -back, c=colors, s=1)
    ax_top.set_title(f"{name.replace('_', ' ').title()} – top-down (local frame)")
    ax_top.set_xlabel("East [m]")
    ax_top.set_ylabel("North [m]")
    ax_top.set_aspect("equal", adjustable="box")

    ax_side = fig.add_subplot(2, 1, 2)
    ax_side.scatter(x, up, c=colors, s=1)
    ax_side.set_title("Elevation profile")
    ax_side.set_xlabel("East [m]")
    ax_side.set_ylabel("Up [m]")

    fig.tight_layout()
    IMAGE_DIR.mkdir(parents=True, exist_ok=True)
    out_path = IMAGE_DIR / f"{name}.png"
    fig.savefig(out_path)
    plt.close(fig)
    return out_path


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a preview image of cruxview instances.")
    parser.add_argument("--config", type=Path, help="Viewer config; omit to use a synthetic dataset.")
    parser.add_argument("--fraction", type=float, default=None, help="Sampling fraction for remote loads.")
    parser.add_argument("--attribute", "-a", default="z", help="Color attribute (default: z).")
    parser.add_argument("--points", type=int, default=20_000, help="Synthetic point count.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="[%(levelname)s] %(message)s")
    fetcher: Optional[StaticFetcher] = None
    if args.config is not None:
        cfg = load_config(args.config)
        name = f"{cfg.collection}_{args.attribute}"
    else:
        cfg = ViewerConfig()
        fetcher = StaticFetcher(default=encode_stream(generate_point_table(args.points)))
        name = f"synthetic_{args.attribute}"
    result = load_from_config(cfg, fraction=args.fraction, attribute=args.attribute, fetcher=fetcher)
    image_path = render_instances(name, result.instances)
    logging.info("Saved %s", image_path)


if __name__ == "__main__":
    main()
