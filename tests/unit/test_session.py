from __future__ import annotations

from concurrent.futures import Executor, Future

import numpy as np
import pyarrow as pa

from cruxview.core.loader import LoadTaskManager
from cruxview.core.query import PointsEndpoint
from cruxview.core.session import ViewerSession
from cruxview.core.spatial import CameraState
from cruxview.examples.synthetic import StaticFetcher, encode_stream, generate_point_table

BASE = "http://h:3000/points"


class ImmediateExecutor(Executor):
    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        future.set_running_or_notify_cancel()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


def make_session(payloads: dict, attribute: str = "z") -> ViewerSession:
    loader = LoadTaskManager(StaticFetcher(payloads), executor=ImmediateExecutor())
    return ViewerSession(loader, PointsEndpoint(BASE), color_attribute=attribute)


def test_tick_without_requests_does_nothing() -> None:
    session = make_session({})
    assert session.tick() is False
    assert len(session.instances) == 0
    assert session.spatial.origin is None


def test_first_load_sets_origin_and_builds_instances() -> None:
    table = generate_point_table(300, seed=1)
    session = make_session({f"{BASE}?p=0.1": encode_stream(table, batch_size=64)})
    session.request_sample(0.1)
    assert session.tick() is True
    assert len(session.instances) == 300
    bs = session.store.get("default")
    np.testing.assert_allclose(session.spatial.origin, bs.aabb().center)
    np.testing.assert_allclose(session.spatial.focus, session.spatial.origin)
    # nothing changed since
    assert session.tick() is False


def test_origin_survives_second_load() -> None:
    first = generate_point_table(100, seed=1)
    second = generate_point_table(100, seed=2, origin=(0.0, 0.0, 0.0))
    session = make_session({
        f"{BASE}?p=0.1": encode_stream(first),
        f"{BASE}?p=0.01": encode_stream(second),
    })
    session.request_sample(0.1)
    session.tick()
    origin = session.spatial.origin.copy()

    session.request_sample(0.01)
    assert session.tick() is True
    np.testing.assert_array_equal(session.spatial.origin, origin)
    assert session.store.get("default").num_points == 100

    framing = session.reset_view()
    assert framing is not None
    assert session.last_framing == framing
    np.testing.assert_allclose(session.spatial.origin, session.store.get("default").aabb().center)
    assert session.tick() is True


def test_failed_load_keeps_previous_instances() -> None:
    session = make_session({BASE: encode_stream(generate_point_table(50))})
    session.request_full()
    session.tick()
    before = session.instances
    session.request_sample(0.5)  # not served
    assert session.tick() is False
    assert session.instances is before


def test_color_attribute_change_triggers_refresh() -> None:
    session = make_session({BASE: encode_stream(generate_point_table(20))})
    session.request_full()
    session.tick()
    z_colors = session.instances.colors.copy()
    session.set_color_attribute("classification")
    assert session.tick() is True
    assert not np.array_equal(z_colors, session.instances.colors)


def test_bounds_request_uses_tracked_focus() -> None:
    session = make_session({BASE: encode_stream(generate_point_table(20, origin=(1000.0, 2000.0, 0.0)))})
    session.request_full()
    session.tick()
    origin = session.spatial.origin.copy()
    session.update_camera(CameraState(focus=(1.0, 2.0, 3.0), radius=4.0))
    np.testing.assert_allclose(session.spatial.focus, origin + np.array([1.0, -3.0, 2.0]))

    request = session.request_bounds()
    fields = [float(v) for v in request.url.split("bounds=", 1)[1].split(",")]
    np.testing.assert_allclose(fields[:3], session.spatial.focus - 2.0)
    np.testing.assert_allclose(fields[3:6], session.spatial.focus + 2.0)
    assert fields[6] == 0.0
    assert fields[7] == 1.0 / 2.0 / 1000.0
    assert "Focus in SRS" in session.describe()


def test_null_classification_does_not_break_tick() -> None:
    table = pa.table({
        "x": pa.array([0.0, 1.0, 2.0]),
        "y": pa.array([0.0, 1.0, 2.0]),
        "z": pa.array([0.0, 1.0, 2.0]),
        "classification": pa.array([2, None, 6], type=pa.uint8()),
    })
    session = make_session({BASE: encode_stream(table)}, attribute="classification")
    session.request_full()
    assert session.tick() is True
    assert len(session.instances) == 3


def test_non_finite_coordinate_keeps_origin_finite() -> None:
    table = pa.table({
        "x": pa.array([0.0, np.nan, 2.0]),
        "y": pa.array([0.0, 1.0, 2.0]),
        "z": pa.array([0.0, 1.0, 2.0]),
    })
    session = make_session({BASE: encode_stream(table)})
    session.request_full()
    session.tick()
    np.testing.assert_array_equal(session.spatial.origin, [1.0, 1.0, 1.0])
    centers = session.instances.centers
    assert np.isfinite(centers[[0, 2]]).all()


def test_null_positions_leave_store_untouched() -> None:
    table = pa.table({
        "x": pa.array([0.0, None, 2.0], type=pa.float64()),
        "y": pa.array([0.0, 1.0, 2.0]),
        "z": pa.array([0.0, 1.0, 2.0]),
    })
    session = make_session({BASE: encode_stream(table)})
    session.request_full()
    assert session.tick() is False
    assert "default" not in session.store
    assert session.spatial.origin is None
