from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Tuple
import numpy as np

from .colors import pack_rgba
from .pointcloud import AABB, PointCloudBatchSet
from .spatial import SpatialReference
from .utils import get_logger, to_render_axes

_log = get_logger()

DEPTH_BIAS = 0


@dataclass(frozen=True)
class RenderInstance:
    """One axis-aligned box in render space."""
    min: Tuple[float, float, float]
    max: Tuple[float, float, float]
    color: int
    depth_bias: int = DEPTH_BIAS


@dataclass(eq=False)
class RenderInstances:
    """Columnar list of render instances; row i belongs to source point i."""
    mins: np.ndarray    # (N, 3) float32
    maxs: np.ndarray    # (N, 3) float32
    colors: np.ndarray  # (N,) uint32 packed RGBA
    depth_bias: int = DEPTH_BIAS

    def __post_init__(self) -> None:
        n = len(self.mins)
        if self.maxs.shape != self.mins.shape or len(self.colors) != n:
            raise ValueError(f"Instance arrays disagree: mins {self.mins.shape}, maxs {self.maxs.shape}, colors {self.colors.shape}")

    @classmethod
    def empty(cls) -> "RenderInstances":
        return cls(np.zeros((0, 3), np.float32), np.zeros((0, 3), np.float32), np.zeros((0,), np.uint32))

    def __len__(self) -> int:
        return len(self.mins)

    def __getitem__(self, i: int) -> RenderInstance:
        return RenderInstance(
            min=tuple(float(v) for v in self.mins[i]),
            max=tuple(float(v) for v in self.maxs[i]),
            color=int(self.colors[i]),
            depth_bias=self.depth_bias,
        )

    def __iter__(self) -> Iterator[RenderInstance]:
        for i in range(len(self)):
            yield self[i]

    @property
    def centers(self) -> np.ndarray:
        return (self.mins + self.maxs) / 2.0


def half_extent(aabb: AABB, num_points: int) -> float:
    """Box half size so that uniformly dense points roughly tile the volume."""
    if num_points <= 0:
        return 0.0
    return float(np.cbrt(aabb.volume / num_points) / 10.0)


class InstanceGenerator:
    def generate(self, batch_set: PointCloudBatchSet, spatial: SpatialReference, colors: np.ndarray) -> RenderInstances:
        n = batch_set.num_points
        if len(colors) != n:
            raise ValueError(f"Got {len(colors)} colors for {n} points")
        if n == 0:
            return RenderInstances.empty()
        if spatial.origin is None:
            raise ValueError("Spatial reference has no origin; load data or reset first")

        xyz = batch_set.points()
        half = np.float32(half_extent(AABB.from_points(xyz), n))
        # shift in float64, then drop to render precision
        p = to_render_axes(xyz - spatial.origin).astype(np.float32)
        _log.info("Generating %d instances", n)
        return RenderInstances(
            mins=p - half,
            maxs=p + half,
            colors=pack_rgba(colors),
        )
