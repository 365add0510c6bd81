from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import math
import numpy as np

# Load presets offered by the viewer: full dataset, then decreasing sample fractions.
SAMPLING_PRESETS: Tuple[Optional[float], ...] = (None, 0.1, 0.01, 0.001, 0.0001)


def resolution_hint(radius: float) -> float:
    """Density-vs-performance term sent with bounds queries (not a physical unit)."""
    return 1.0 / math.sqrt(radius) / 1000.0


@dataclass(frozen=True)
class PointsEndpoint:
    """Builds GET URLs for the ``/points`` resource of a point server."""
    base_url: str

    @classmethod
    def from_parts(cls, host: str, port: int, path: str = "/points", scheme: str = "http") -> "PointsEndpoint":
        if not path.startswith("/"):
            path = "/" + path
        return cls(f"{scheme}://{host}:{port}{path}")

    def full_url(self) -> str:
        return self.base_url

    def sample_url(self, fraction: Optional[float]) -> str:
        if fraction is None:
            return self.full_url()
        if not (0.0 < fraction <= 1.0):
            raise ValueError(f"Sampling fraction must be within (0, 1], got {fraction}")
        return f"{self.base_url}?p={fraction}"

    def bounds_url(self, focus: Sequence[float], radius: Optional[float]) -> str:
        """Query a cube of edge ``radius`` centred on ``focus`` (source frame)."""
        r = 1.0 if radius is None else float(radius)
        if r <= 0.0:
            raise ValueError(f"Query radius must be positive, got {r}")
        focus_arr = np.asarray(focus, dtype=np.float64)
        lower = focus_arr - r / 2.0
        upper = focus_arr + r / 2.0
        fields = [*lower.tolist(), *upper.tolist(), 0, resolution_hint(r)]
        return f"{self.base_url}?bounds=" + ",".join(str(v) for v in fields)
