"""cruxview – streaming point-cloud loader for interactive viewers.

This package turns remotely served Arrow point clouds into render-ready
boxes:
- PointCloudBatchSet & AABB (core.pointcloud)
- Arrow IPC decoding and HTTP fetching (core.decoder, core.fetcher)
- Background load tasks polled once per tick (core.loader)
- Spatial reference with a sticky local-frame origin (core.spatial)
- Attribute-driven color mapping (core.colors)
- Render instance generation (core.instances)
- ViewerSession tick driver tying it together (core.session)

Rendering, windowing and camera control stay with the host application.
"""

from .core.pointcloud import AABB, PointCloudBatchSet
from .core.errors import (
    CruxError, LoadError, TransportError, DecodeError,
    ColorAttributeError, AttributeMissing, AttributeUnsupported, DegenerateRange,
)
from .core.decoder import decode_stream
from .core.fetcher import RemoteFetcher, fetch_and_decode
from .core.query import PointsEndpoint, SAMPLING_PRESETS
from .core.store import PointCloudStore
from .core.loader import LoadRequest, LoadState, LoadTask, LoadTaskManager
from .core.spatial import CameraFraming, CameraState, SpatialReference
from .core.colors import ColorMapper, ColorStrategy, pack_rgba
from .core.instances import InstanceGenerator, RenderInstance, RenderInstances
from .core.session import ViewerSession
