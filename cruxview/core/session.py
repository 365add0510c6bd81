from __future__ import annotations
from typing import Optional
import time

from .colors import ColorMapper
from .instances import InstanceGenerator, RenderInstances
from .loader import LoadRequest, LoadTaskManager
from .query import PointsEndpoint
from .spatial import CameraFraming, CameraState, SpatialReference
from .store import PointCloudStore
from .utils import get_logger

_log = get_logger()


class ViewerSession:
    """Cooperative tick driver owning the store, spatial reference and loads.

    All state is mutated from the thread calling :meth:`tick` and the
    command methods; background load units only hand back decoded batch
    sets through the load manager.
    """
    def __init__(
        self,
        loader: LoadTaskManager,
        endpoint: PointsEndpoint,
        collection: str = "default",
        color_attribute: str = "z",
        color_mapper: Optional[ColorMapper] = None,
        generator: Optional[InstanceGenerator] = None,
    ) -> None:
        self.loader = loader
        self.endpoint = endpoint
        self.collection = collection
        self.color_attribute = color_attribute
        self.color_mapper = color_mapper or ColorMapper()
        self.generator = generator or InstanceGenerator()
        self.store = PointCloudStore()
        self.spatial = SpatialReference()
        self.instances = RenderInstances.empty()
        self.camera = CameraState()
        self.last_framing: Optional[CameraFraming] = None
        self._seen_revision = 0
        self._dirty = False

    # -- commands --
    def request_url(self, url: str) -> LoadRequest:
        return self.loader.enqueue(url, self.collection)

    def request_full(self) -> LoadRequest:
        return self.request_url(self.endpoint.full_url())

    def request_sample(self, fraction: Optional[float]) -> LoadRequest:
        return self.request_url(self.endpoint.sample_url(fraction))

    def request_bounds(self, radius: Optional[float] = None) -> LoadRequest:
        r = radius if radius is not None else self.camera.radius
        return self.request_url(self.endpoint.bounds_url(self.spatial.focus, r))

    def reset_view(self) -> Optional[CameraFraming]:
        framing = self.spatial.reset(bs.aabb() for bs in self.store.values())
        if framing is not None:
            self.last_framing = framing
            self._dirty = True
        return framing

    def update_camera(self, camera: CameraState) -> None:
        if camera == self.camera:
            return
        self.camera = camera
        self.spatial.track_camera(camera.focus)

    def set_color_attribute(self, attribute: str) -> None:
        if attribute != self.color_attribute:
            self.color_attribute = attribute
            self._dirty = True

    # -- tick --
    def tick(self) -> bool:
        """Spawn queued loads, install finished ones, refresh instances on change."""
        self.loader.drain_and_spawn()
        self.loader.poll_completed(self.store)
        if self.store.revision != self._seen_revision:
            self._seen_revision = self.store.revision
            self._dirty = True
        if not self._dirty or self.collection not in self.store:
            return False
        self._dirty = False
        self.refresh()
        return True

    def refresh(self) -> RenderInstances:
        batch_set = self.store.get(self.collection)
        if batch_set is None:
            return self.instances
        self.spatial.ensure_origin(batch_set.aabb())
        colors = self.color_mapper.map_colors(batch_set, self.color_attribute)
        self.instances = self.generator.generate(batch_set, self.spatial, colors)
        return self.instances

    def wait_idle(self, timeout_s: Optional[float] = None, poll_interval_s: float = 0.01) -> bool:
        """Tick until nothing is queued or in flight; ``False`` on timeout."""
        deadline = None if timeout_s is None else time.monotonic() + timeout_s
        while True:
            self.tick()
            if self.loader.is_idle():
                return True
            if deadline is not None and time.monotonic() >= deadline:
                _log.warning("Timed out with %d loads in flight", len(self.loader.in_flight))
                return False
            time.sleep(poll_interval_s)

    def describe(self) -> str:
        return self.spatial.describe(self.camera)

    def close(self) -> None:
        self.loader.shutdown(wait=False)
