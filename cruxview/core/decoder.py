from __future__ import annotations
from typing import Sequence
import pyarrow as pa
import pyarrow.ipc as ipc

from .errors import DecodeError
from .pointcloud import POSITION_COLUMNS, PointCloudBatchSet
from .utils import get_logger

_log = get_logger()


def _check_schema(schema: pa.Schema) -> None:
    for name in POSITION_COLUMNS:
        idx = schema.get_field_index(name)
        if idx < 0:
            raise DecodeError(f"Stream has no '{name}' column (columns: {schema.names})")
        typ = schema.field(idx).type
        if not (pa.types.is_floating(typ) or pa.types.is_integer(typ)):
            raise DecodeError(f"Column '{name}' has non-numeric type {typ}")


def _check_positions(batches: Sequence[pa.RecordBatch]) -> None:
    for batch in batches:
        for name in POSITION_COLUMNS:
            nulls = batch.column(batch.schema.get_field_index(name)).null_count
            if nulls:
                raise DecodeError(f"Column '{name}' has {nulls} null values")


def decode_stream(payload: bytes) -> PointCloudBatchSet:
    """Decode an Arrow IPC stream into a :class:`PointCloudBatchSet`."""
    try:
        reader = ipc.open_stream(pa.BufferReader(payload))
        schema = reader.schema
        batches = [batch for batch in reader]
    except (pa.ArrowException, OSError) as exc:
        raise DecodeError(f"Malformed Arrow stream: {exc}") from exc
    _check_schema(schema)
    _check_positions(batches)
    try:
        batch_set = PointCloudBatchSet(schema=schema, batches=tuple(batches))
    except ValueError as exc:
        raise DecodeError(str(exc)) from exc
    _log.debug("Decoded %d points in %d batches", batch_set.num_points, len(batches))
    return batch_set
