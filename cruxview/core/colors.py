from __future__ import annotations
from enum import Enum
from typing import Dict, Optional, Tuple
import numpy as np
import pyarrow as pa
from matplotlib import colormaps

from .errors import AttributeMissing, AttributeUnsupported, ColorAttributeError, DegenerateRange
from .pointcloud import PointCloudBatchSet
from .utils import get_logger

_log = get_logger()

RGBA = Tuple[float, float, float, float]

ORANGE: RGBA = (1.0, 0.65, 0.0, 1.0)
FALLBACK_COLOR: RGBA = ORANGE
UNKNOWN_CLASS_COLOR: RGBA = ORANGE

# ASPRS classification codes
CLASSIFICATION_PALETTE: Dict[int, RGBA] = {
    0: (0.5, 0.5, 0.5, 1.0),      # created, never classified
    1: (0.96, 0.96, 0.86, 1.0),   # unclassified
    2: (0.5, 0.5, 0.0, 1.0),      # ground
    3: (0.2, 0.8, 0.2, 1.0),      # low vegetation
    4: (0.0, 1.0, 0.0, 1.0),      # medium vegetation
    5: (0.0, 0.5, 0.0, 1.0),      # high vegetation
    6: (0.5, 0.0, 0.0, 1.0),      # building
    9: (0.0, 0.0, 1.0, 1.0),      # water
    11: (0.25, 0.25, 0.25, 1.0),  # road surface
}


class ColorStrategy(Enum):
    """Closed set of attribute → color mappings, keyed by column name."""
    CLASSIFICATION = "classification"
    INTENSITY = "intensity"
    HEIGHT = "z"

    @property
    def column_type(self) -> pa.DataType:
        return _REQUIRED_TYPES[self]


_REQUIRED_TYPES: Dict[ColorStrategy, pa.DataType] = {
    ColorStrategy.CLASSIFICATION: pa.uint8(),
    ColorStrategy.INTENSITY: pa.uint16(),
    ColorStrategy.HEIGHT: pa.float64(),
}


def resolve_strategy(batch_set: PointCloudBatchSet, attribute: str) -> ColorStrategy:
    typ = batch_set.column_type(attribute)
    if typ is None:
        raise AttributeMissing(attribute)
    try:
        strategy = ColorStrategy(attribute)
    except ValueError:
        raise AttributeUnsupported(attribute) from None
    if typ != strategy.column_type:
        raise AttributeUnsupported(attribute, typ)
    return strategy


def normalize(values: np.ndarray, lo: float, hi: float) -> np.ndarray:
    if not hi > lo:
        raise DegenerateRange(lo, hi)
    return (np.asarray(values, dtype=np.float64) - lo) / (hi - lo)


def pack_rgba(colors: np.ndarray) -> np.ndarray:
    """(N, 4) float RGBA in [0, 1] → (N,) uint32, bytes R, G, B, A little-endian."""
    c = np.asarray(colors, dtype=np.float32).reshape(-1, 4)
    u8 = (np.clip(np.nan_to_num(c, nan=0.0), 0.0, 1.0) * 255.0).astype(np.uint32)
    return (u8[:, 0] | (u8[:, 1] << 8) | (u8[:, 2] << 16) | (u8[:, 3] << 24)).astype(np.uint32)


def unpack_rgba(packed: np.ndarray) -> np.ndarray:
    p = np.asarray(packed, dtype=np.uint32).reshape(-1)
    return np.column_stack([(p >> s) & 0xFF for s in (0, 8, 16, 24)]).astype(np.uint8)


class ColorMapper:
    """Maps one attribute column to one RGBA color per point.

    Output rows follow :meth:`PointCloudBatchSet.points` order. Missing or
    unmapped attributes degrade to ``fallback`` with a single warning.
    """
    def __init__(
        self,
        fallback: RGBA = FALLBACK_COLOR,
        intensity_max: float = 255.0,
        gradient: str = "turbo",
        unknown_class: RGBA = UNKNOWN_CLASS_COLOR,
    ) -> None:
        if intensity_max <= 0:
            raise ValueError("intensity_max must be positive")
        self.fallback = np.asarray(fallback, dtype=np.float32)
        self.intensity_max = float(intensity_max)
        self.gradient_name = gradient
        self._gradient = colormaps[gradient]
        lut = np.tile(np.asarray(unknown_class, dtype=np.float32), (256, 1))
        for code, rgba in CLASSIFICATION_PALETTE.items():
            lut[code] = rgba
        self._class_lut = lut

    def gradient_at(self, t: np.ndarray | float) -> np.ndarray:
        return np.asarray(self._gradient(np.asarray(t, dtype=np.float64)), dtype=np.float32)

    def fill(self, n: int, color: Optional[np.ndarray] = None) -> np.ndarray:
        c = self.fallback if color is None else color
        return np.tile(np.asarray(c, dtype=np.float32), (n, 1))

    def map_colors(self, batch_set: PointCloudBatchSet, attribute: str) -> np.ndarray:
        n = batch_set.num_points
        try:
            strategy = resolve_strategy(batch_set, attribute)
        except ColorAttributeError as exc:
            _log.warning("%s, fallback color used!", exc)
            return self.fill(n)

        if strategy is ColorStrategy.CLASSIFICATION:
            codes = batch_set.column(attribute).astype(np.intp, copy=False)
            return self._class_lut[codes]
        if strategy is ColorStrategy.INTENSITY:
            # TODO: confirm the server's intensity range; 16-bit columns can exceed intensity_max
            v = np.clip(batch_set.column(attribute).astype(np.float32) / self.intensity_max, 0.0, 1.0)
            out = np.empty((n, 4), dtype=np.float32)
            out[:, 0] = out[:, 1] = out[:, 2] = v
            out[:, 3] = 1.0
            return out
        return self._height_colors(batch_set, attribute)

    def _height_colors(self, batch_set: PointCloudBatchSet, attribute: str) -> np.ndarray:
        n = batch_set.num_points
        if n == 0:
            return np.zeros((0, 4), dtype=np.float32)
        aabb = batch_set.aabb()
        try:
            t = normalize(batch_set.column(attribute), float(aabb.lower[2]), float(aabb.upper[2]))
        except DegenerateRange:
            _log.debug("Flat z range %.3f, using gradient midpoint", aabb.lower[2])
            return self.fill(n, self.gradient_at(0.5))
        return self.gradient_at(t)
