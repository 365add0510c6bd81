from __future__ import annotations

from typing import Optional

from ..config import ViewerConfig
from ..core.colors import ColorMapper
from ..core.fetcher import Fetcher, RemoteFetcher
from ..core.loader import LoadTaskManager
from ..core.query import PointsEndpoint
from ..core.session import ViewerSession


def build_endpoint(cfg: ViewerConfig) -> PointsEndpoint:
    return PointsEndpoint(cfg.server.base_url)


def build_fetcher(cfg: ViewerConfig) -> RemoteFetcher:
    return RemoteFetcher(timeout_s=cfg.loader.timeout_s)


def build_color_mapper(cfg: ViewerConfig) -> ColorMapper:
    color_cfg = cfg.color
    return ColorMapper(
        fallback=color_cfg.fallback_rgba,
        intensity_max=color_cfg.intensity_max,
        gradient=color_cfg.gradient,
    )


def build_loader(cfg: ViewerConfig, fetcher: Optional[Fetcher] = None) -> LoadTaskManager:
    return LoadTaskManager(
        fetcher if fetcher is not None else build_fetcher(cfg),
        max_workers=cfg.loader.max_workers,
    )


def build_session(cfg: ViewerConfig, fetcher: Optional[Fetcher] = None) -> ViewerSession:
    return ViewerSession(
        loader=build_loader(cfg, fetcher),
        endpoint=build_endpoint(cfg),
        collection=cfg.collection,
        color_attribute=cfg.color.attribute,
        color_mapper=build_color_mapper(cfg),
    )
