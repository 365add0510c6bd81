from __future__ import annotations
from typing import Dict, Iterator, List, Optional

from .pointcloud import PointCloudBatchSet
from .utils import get_logger

_log = get_logger()


class PointCloudStore:
    """Collection name → latest successfully decoded batch set.

    Only the tick loop writes here. ``revision`` increases on every install
    so callers can detect changes without comparing data.
    """
    def __init__(self) -> None:
        self._data: Dict[str, PointCloudBatchSet] = {}
        self.revision = 0

    def install(self, name: str, batch_set: PointCloudBatchSet) -> None:
        replaced = name in self._data
        self._data[name] = batch_set
        self.revision += 1
        _log.info("%s collection '%s' (%d points)", "Replaced" if replaced else "Installed",
                  name, batch_set.num_points)

    def get(self, name: str) -> Optional[PointCloudBatchSet]:
        return self._data.get(name)

    def names(self) -> List[str]:
        return list(self._data)

    def values(self) -> List[PointCloudBatchSet]:
        return list(self._data.values())

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)
