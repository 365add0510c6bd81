from __future__ import annotations
import numpy as np
import logging

def get_logger(name: str = "cruxview") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger

def to_render_axes(v: np.ndarray) -> np.ndarray:
    """East/north/up (x, y, z) → right/up/back (x, z, -y).

    Accepts a single point (3,) or an (N, 3) array.
    """
    v = np.asarray(v)
    return np.stack([v[..., 0], v[..., 2], -v[..., 1]], axis=-1)

def from_render_axes(v: np.ndarray) -> np.ndarray:
    """Inverse of :func:`to_render_axes`: (x, y, z) → (x, -z, y)."""
    v = np.asarray(v)
    return np.stack([v[..., 0], -v[..., 2], v[..., 1]], axis=-1)
