from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple
import numpy as np

from .pointcloud import AABB
from .utils import from_render_axes, get_logger

_log = get_logger()


@dataclass(frozen=True)
class CameraState:
    """Snapshot of the external orbit camera, in render space."""
    focus: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    radius: Optional[float] = None
    alpha: Optional[float] = None
    beta: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "focus", tuple(float(v) for v in self.focus))


@dataclass(frozen=True)
class CameraFraming:
    """One-shot hint for the camera after a reset."""
    depth_scale: float       # max(dy, dz)
    horizontal_scale: float  # max(dx, dy)

    @classmethod
    def from_aabb(cls, aabb: AABB) -> "CameraFraming":
        dx, dy, dz = (float(v) for v in aabb.extent)
        return cls(depth_scale=max(dy, dz), horizontal_scale=max(dx, dy))

    @property
    def target_focus(self) -> Tuple[float, float, float]:
        return (0.0, -self.depth_scale / 10.0, self.depth_scale / 10.0)

    @property
    def target_alpha(self) -> float:
        return 0.0

    @property
    def target_beta(self) -> float:
        return 0.8

    @property
    def target_radius(self) -> float:
        return self.horizontal_scale


@dataclass
class SpatialReference:
    """Local-frame origin plus the camera focus in source coordinates.

    ``origin`` is unset until the first load and sticky afterwards; only
    :meth:`reset` moves it.
    """
    origin: Optional[np.ndarray] = None
    focus: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @property
    def has_origin(self) -> bool:
        return self.origin is not None

    def ensure_origin(self, aabb: AABB) -> bool:
        if self.origin is not None:
            return False
        if aabb.is_empty:
            return False
        center = aabb.center.astype(np.float64)
        self.origin = center
        self.focus = center.copy()
        _log.info("Origin set to [%.3f, %.3f, %.3f]", *center)
        return True

    def reset(self, aabbs: Iterable[AABB]) -> Optional[CameraFraming]:
        merged = AABB.empty()
        for box in aabbs:
            merged = merged.merged(box)
        if merged.is_empty:
            _log.warning("Reset requested with no data loaded; spatial reference unchanged.")
            return None
        center = merged.center.astype(np.float64)
        self.origin = center
        self.focus = center.copy()
        _log.info("Origin reset to [%.3f, %.3f, %.3f]", *center)
        return CameraFraming.from_aabb(merged)

    def track_camera(self, offset: Iterable[float]) -> None:
        """Update ``focus`` from a render-space camera offset relative to the origin."""
        if self.origin is None:
            return
        self.focus = self.origin + from_render_axes(np.asarray(list(offset), dtype=np.float64))

    def describe(self, camera: Optional[CameraState] = None) -> str:
        lines = []
        if camera is not None:
            f = camera.focus
            lines += [
                "Camera parameters",
                f"Focus: [{f[0]:.3f}, {f[1]:.3f}, {f[2]:.3f}]",
                f"Alpha: {camera.alpha or 0.0:.3f}",
                f"Beta: {camera.beta or 0.0:.3f}",
                f"Radius: {camera.radius or 0.0:.3f}",
            ]
        origin = self.origin if self.origin is not None else np.full(3, np.nan)
        lines += [
            f"Focus in SRS: [{self.focus[0]:.3f}, {self.focus[1]:.3f}, {self.focus[2]:.3f}]",
            f"Data Origin: [{origin[0]:.3f}, {origin[1]:.3f}, {origin[2]:.3f}]",
        ]
        return "\n".join(lines)
