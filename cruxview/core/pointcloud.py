from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple
import numpy as np
import pyarrow as pa
import pyarrow.compute as pc

POSITION_COLUMNS: Tuple[str, str, str] = ("x", "y", "z")


def _column_values(arr: pa.Array) -> np.ndarray:
    # null slots read as 0 in integer columns, NaN in float ones
    if arr.null_count and pa.types.is_integer(arr.type):
        arr = pc.fill_null(arr, 0)
    return arr.to_numpy(zero_copy_only=False)


@dataclass(frozen=True, eq=False)
class AABB:
    """Axis-aligned bounding box over a point set (float64 corners).

    Rows with a non-finite coordinate do not contribute.
    """
    lower: np.ndarray
    upper: np.ndarray

    @classmethod
    def empty(cls) -> "AABB":
        return cls(lower=np.full(3, np.inf), upper=np.full(3, -np.inf))

    @classmethod
    def from_points(cls, xyz: np.ndarray) -> "AABB":
        xyz = np.asarray(xyz, dtype=np.float64).reshape(-1, 3)
        xyz = xyz[np.isfinite(xyz).all(axis=1)]
        if xyz.size == 0:
            return cls.empty()
        return cls(lower=xyz.min(axis=0), upper=xyz.max(axis=0))

    @property
    def is_empty(self) -> bool:
        return bool(np.any(self.lower > self.upper))

    def merged(self, other: "AABB") -> "AABB":
        return AABB(lower=np.minimum(self.lower, other.lower), upper=np.maximum(self.upper, other.upper))

    @property
    def center(self) -> np.ndarray:
        if self.is_empty:
            return np.zeros(3)
        return (self.lower + self.upper) / 2.0

    @property
    def extent(self) -> np.ndarray:
        if self.is_empty:
            return np.zeros(3)
        return self.upper - self.lower

    @property
    def volume(self) -> float:
        return float(np.prod(self.extent))


@dataclass(frozen=True)
class PointCloudBatchSet:
    """Ordered Arrow record batches sharing one schema.

    Replaced wholesale on reload, never mutated. Every per-point array
    returned here follows the same order: batch by batch, row by row.
    """
    schema: pa.Schema
    batches: Tuple[pa.RecordBatch, ...] = ()
    _num_points: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        batches = tuple(self.batches)
        for b in batches:
            if not b.schema.equals(self.schema):
                raise ValueError(f"Batch schema {b.schema} != set schema {self.schema}")
        object.__setattr__(self, "batches", batches)
        object.__setattr__(self, "_num_points", sum(b.num_rows for b in batches))

    @classmethod
    def from_batches(cls, batches: Iterable[pa.RecordBatch], schema: Optional[pa.Schema] = None) -> "PointCloudBatchSet":
        batches = list(batches)
        if schema is None:
            if not batches:
                raise ValueError("Cannot infer schema from an empty batch list.")
            schema = batches[0].schema
        return cls(schema=schema, batches=tuple(batches))

    @classmethod
    def from_table(cls, table: pa.Table) -> "PointCloudBatchSet":
        return cls(schema=table.schema, batches=tuple(table.to_batches()))

    def __len__(self) -> int:
        return self._num_points

    @property
    def num_points(self) -> int:
        return self._num_points

    @property
    def column_names(self) -> List[str]:
        return list(self.schema.names)

    def has_column(self, name: str) -> bool:
        return self.schema.get_field_index(name) >= 0

    def column_type(self, name: str) -> Optional[pa.DataType]:
        idx = self.schema.get_field_index(name)
        if idx < 0:
            return None
        return self.schema.field(idx).type

    def column(self, name: str) -> np.ndarray:
        idx = self.schema.get_field_index(name)
        if idx < 0:
            raise KeyError(name)
        if not self.batches:
            return np.empty((0,), dtype=self.schema.field(idx).type.to_pandas_dtype())
        return np.concatenate([_column_values(b.column(idx)) for b in self.batches])

    def points(self) -> np.ndarray:
        """(N, 3) float64 source-frame coordinates."""
        if self._num_points == 0:
            return np.zeros((0, 3), dtype=np.float64)
        cols: Sequence[np.ndarray] = [self.column(c).astype(np.float64, copy=False) for c in POSITION_COLUMNS]
        return np.column_stack(cols)

    def aabb(self) -> AABB:
        return AABB.from_points(self.points())
