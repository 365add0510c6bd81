from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from ..config import ViewerConfig, load_config
from ..core.fetcher import Fetcher
from ..core.instances import RenderInstances
from ..core.spatial import CameraFraming, SpatialReference
from ..runtime.builders import build_session


@dataclass(frozen=True)
class LoadRunResult:
    """Outcome of a headless load driven by a configuration."""

    instances: RenderInstances
    spatial: SpatialReference
    framing: Optional[CameraFraming]
    num_points: int
    completed: bool
    config: ViewerConfig


def load_from_config(
    config: Union[str, Path, ViewerConfig],
    *,
    fraction: Optional[float] = None,
    radius: Optional[float] = None,
    focus: Optional[Sequence[float]] = None,
    attribute: Optional[str] = None,
    fetcher: Optional[Fetcher] = None,
    timeout_s: Optional[float] = None,
) -> LoadRunResult:
    """Fetch one dataset, run the pipeline to completion and frame it.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~cruxview.config.schema.ViewerConfig`.
    fraction:
        Sampling fraction sent as ``p``; ``None`` loads the full dataset.
    radius, focus:
        When ``radius`` is given a bounds query is issued instead, centred on
        ``focus`` (source coordinates, defaults to the origin).
    attribute:
        Optional override for the color attribute.
    fetcher:
        Replacement for the HTTP fetcher, e.g. for offline use.
    timeout_s:
        Give up waiting after this many seconds.

    Returns
    -------
    LoadRunResult
        Render instances, the spatial reference and the reset framing hint.
        ``completed`` is ``False`` when the wait timed out.
    """

    cfg = load_config(config) if not isinstance(config, ViewerConfig) else config.model_copy(deep=True)
    if attribute:
        cfg.color.attribute = attribute

    session = build_session(cfg, fetcher=fetcher)
    try:
        if radius is not None:
            if focus is not None:
                session.spatial.focus = np.asarray(focus, dtype=np.float64)
            session.request_bounds(radius)
        else:
            session.request_sample(fraction)
        completed = session.wait_idle(timeout_s=timeout_s)
        framing = session.reset_view()
        session.tick()
        batch_set = session.store.get(cfg.collection)
    finally:
        session.close()

    return LoadRunResult(
        instances=session.instances,
        spatial=session.spatial,
        framing=framing,
        num_points=batch_set.num_points if batch_set is not None else 0,
        completed=completed,
        config=cfg,
    )
