from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np
import pyarrow as pa
import pyarrow.ipc as ipc

from ..core.errors import TransportError

# Roughly a UTM easting/northing, far enough from zero to need the origin shift.
DEFAULT_ORIGIN: Tuple[float, float, float] = (691_000.0, 5_334_000.0, 500.0)


def generate_point_table(
    n: int = 10_000,
    seed: int = 0,
    origin: Tuple[float, float, float] = DEFAULT_ORIGIN,
    size: float = 100.0,
) -> pa.Table:
    """Gently rolling terrain patch with classification and intensity columns."""
    rng = np.random.default_rng(seed)
    ox, oy, oz = origin
    x = rng.uniform(0.0, size, n)
    y = rng.uniform(0.0, size, n)
    z = 5.0 * np.sin(x / size * 2 * np.pi) * np.cos(y / size * 2 * np.pi) + rng.normal(0.0, 0.1, n)

    classification = np.where(z < -1.0, 2, np.where(z < 2.0, 3, 5)).astype(np.uint8)
    building = rng.random(n) < 0.05
    classification[building] = 6
    intensity = rng.integers(0, 256, n, dtype=np.uint16)

    return pa.table({
        "x": pa.array(x + ox, type=pa.float64()),
        "y": pa.array(y + oy, type=pa.float64()),
        "z": pa.array(z + oz, type=pa.float64()),
        "classification": pa.array(classification, type=pa.uint8()),
        "intensity": pa.array(intensity, type=pa.uint16()),
    })


def encode_stream(table: pa.Table, batch_size: Optional[int] = None) -> bytes:
    """Serialize ``table`` as an Arrow IPC stream, as served by ``GET /points``."""
    sink = pa.BufferOutputStream()
    with ipc.new_stream(sink, table.schema) as writer:
        for batch in table.to_batches(max_chunksize=batch_size):
            writer.write_batch(batch)
    return sink.getvalue().to_pybytes()


@dataclass
class StaticFetcher:
    """Serves fixed payloads by URL; unknown URLs fail like a 404."""
    payloads: Dict[str, bytes] = field(default_factory=dict)
    default: Optional[bytes] = None

    def fetch(self, url: str) -> bytes:
        if url in self.payloads:
            return self.payloads[url]
        if self.default is not None:
            return self.default
        raise TransportError(f"GET {url} failed: 404 Not Found", url=url)
