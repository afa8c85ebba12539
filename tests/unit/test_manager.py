"""Unit tests for the sensor Manager.

Covers:
- init idempotence
- add_sensor: None rejected, ids distinct and monotonic, never reused,
  already-registered sensors rejected
- sensor(id) lookup before and after removal
- remove: known / unknown ids, teardown
- create_sensor / create_sensor_by_kind success and failure paths
- run_once: forced stepping, rate gating, zero-rate sensors, failure
  isolation, exceptions, timedelta input, decimal tick times, snapshot of
  the registered set
- close / context manager teardown
"""
from __future__ import annotations

import logging
from datetime import timedelta

import pytest

from sim_sensors.manager import Manager, to_seconds
from sim_sensors.sensors.base import NO_SENSOR, Sensor, SensorReading
from sim_sensors.sensors.builtin import BUILTIN_SENSORS, ScalarSensor
from sim_sensors.transport import InMemoryPublisher


# ---------------------------------------------------------------------------
# Helpers / concrete subclasses
# ---------------------------------------------------------------------------


class RecordingSensor(Sensor):
    """Records every update time; returns ``succeed`` from update."""

    kind = "recording"

    def __init__(self, succeed: bool = True, raises: bool = False) -> None:
        super().__init__()
        self.succeed = succeed
        self.raises = raises
        self.update_times: list[float] = []
        self.closed = False

    def update(self, sim_time: float) -> bool:
        self.update_times.append(sim_time)
        if self.raises:
            raise RuntimeError("render backend unavailable")
        return self.succeed

    def close(self) -> None:
        self.closed = True
        super().close()


def _make_sensor(
    name: str = "rec",
    update_rate: float = 0.0,
    succeed: bool = True,
    raises: bool = False,
) -> RecordingSensor:
    sensor = RecordingSensor(succeed=succeed, raises=raises)
    assert sensor.load({"kind": "recording", "name": name, "update_rate": update_rate})
    return sensor


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------


class TestManagerInit:
    def test_init_returns_true(self) -> None:
        manager = Manager()
        assert not manager.initialized
        assert manager.init()
        assert manager.initialized

    def test_init_idempotent(self) -> None:
        manager = Manager()
        assert manager.init()
        assert manager.init()

    def test_empty(self) -> None:
        manager = Manager()
        assert len(manager) == 0
        assert manager.sensor_ids() == []
        assert manager.run_once(0.0) == 0
        assert "Manager" in repr(manager)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestAddSensor:
    def test_none_rejected(self, caplog: pytest.LogCaptureFixture) -> None:
        manager = Manager()
        with caplog.at_level(logging.ERROR):
            assert manager.add_sensor(None) == NO_SENSOR
        assert len(manager) == 0
        assert "null sensor" in caplog.text

    def test_ids_distinct_and_valid(self) -> None:
        manager = Manager()
        ids = [manager.add_sensor(_make_sensor(f"s{i}")) for i in range(20)]
        assert len(set(ids)) == len(ids)
        assert NO_SENSOR not in ids
        assert ids == sorted(ids)

    def test_id_assigned_to_sensor(self) -> None:
        manager = Manager()
        sensor = _make_sensor()
        sensor_id = manager.add_sensor(sensor)
        assert sensor.id == sensor_id
        assert sensor_id in manager

    def test_ids_never_reused_after_remove(self) -> None:
        manager = Manager()
        first = manager.add_sensor(_make_sensor("a"))
        assert manager.remove(first)
        issued = {first}
        for i in range(10):
            new_id = manager.add_sensor(_make_sensor(f"b{i}"))
            assert new_id not in issued
            issued.add(new_id)
            manager.remove(new_id)

    def test_already_registered_rejected(self) -> None:
        manager = Manager()
        sensor = _make_sensor()
        first = manager.add_sensor(sensor)
        assert manager.add_sensor(sensor) == NO_SENSOR
        assert sensor.id == first
        assert len(manager) == 1

    def test_sensor_registered_elsewhere_rejected(self) -> None:
        sensor = _make_sensor()
        Manager().add_sensor(sensor)
        assert Manager().add_sensor(sensor) == NO_SENSOR

    def test_managers_have_independent_id_spaces(self) -> None:
        assert Manager().add_sensor(_make_sensor()) == Manager().add_sensor(_make_sensor())


class TestLookupAndRemove:
    def test_lookup_returns_added_sensor(self) -> None:
        manager = Manager()
        sensor = _make_sensor()
        sensor_id = manager.add_sensor(sensor)
        assert manager.sensor(sensor_id) is sensor

    def test_lookup_unknown_is_none(self) -> None:
        assert Manager().sensor(12345) is None
        assert Manager().sensor(NO_SENSOR) is None

    def test_remove_then_lookup_is_none(self) -> None:
        manager = Manager()
        sensor_id = manager.add_sensor(_make_sensor())
        assert manager.remove(sensor_id)
        assert manager.sensor(sensor_id) is None
        assert sensor_id not in manager

    def test_remove_tears_down(self) -> None:
        manager = Manager()
        sensor = _make_sensor(name="torn", update_rate=0.0)
        sensor.load({"kind": "recording", "name": "torn", "noise": {"type": "gaussian"}})
        sensor_id = manager.add_sensor(sensor)
        manager.remove(sensor_id)
        assert sensor.closed
        assert sensor.noise is None

    def test_remove_unknown_is_noop(self) -> None:
        manager = Manager()
        manager.add_sensor(_make_sensor())
        assert not manager.remove(999)
        assert len(manager) == 1

    def test_remove_twice(self) -> None:
        manager = Manager()
        sensor_id = manager.add_sensor(_make_sensor())
        assert manager.remove(sensor_id)
        assert not manager.remove(sensor_id)

    def test_sensor_ids_sorted(self) -> None:
        manager = Manager()
        ids = [manager.add_sensor(_make_sensor(f"s{i}")) for i in range(3)]
        manager.remove(ids[1])
        assert manager.sensor_ids() == [ids[0], ids[2]]


class TestCreateSensor:
    def test_create_sensor_registers(self) -> None:
        manager = Manager()
        sensor = manager.create_sensor(
            ScalarSensor, {"kind": "scalar", "name": "s"}, source=lambda _t: 1.0
        )
        assert isinstance(sensor, ScalarSensor)
        assert sensor.id != NO_SENSOR
        assert manager.sensor(sensor.id) is sensor

    def test_create_sensor_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        manager = Manager()
        with caplog.at_level(logging.ERROR):
            assert manager.create_sensor(ScalarSensor, {"kind": "altimeter", "name": "s"}) is None
        assert "Failed to create sensor." in caplog.text
        assert len(manager) == 0

    def test_create_by_kind(self) -> None:
        manager = Manager()
        sensor_id = manager.create_sensor_by_kind(
            {"kind": "altimeter", "name": "alt"}, BUILTIN_SENSORS, source=lambda _t: 0.0
        )
        assert sensor_id != NO_SENSOR
        assert manager.sensor(sensor_id).kind == "altimeter"  # type: ignore[union-attr]

    def test_create_by_unknown_kind(self) -> None:
        manager = Manager()
        assert manager.create_sensor_by_kind({"kind": "gpu_lidar", "name": "l"}, BUILTIN_SENSORS) == NO_SENSOR
        assert len(manager) == 0

    def test_injected_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = logging.getLogger("test.manager.sink")
        manager = Manager(logger=sink)
        with caplog.at_level(logging.ERROR, logger="test.manager.sink"):
            manager.add_sensor(None)
        assert [r.name for r in caplog.records] == ["test.manager.sink"]


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


class TestRunOnce:
    def test_zero_rate_updates_every_tick(self) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=0.0)
        manager.add_sensor(sensor)
        for t in (0.0, 0.001, 0.002):
            manager.run_once(t)
        assert sensor.update_times == [0.0, 0.001, 0.002]

    def test_first_tick_always_updates(self) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=1.0)
        manager.add_sensor(sensor)
        manager.run_once(0.0)
        assert sensor.update_times == [0.0]
        assert sensor.last_update_time == 0.0

    def test_rate_gating(self) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=4.0)
        manager.add_sensor(sensor)
        for t in (0.0, 0.0625, 0.125, 0.1875, 0.25, 0.375, 0.5):
            manager.run_once(t)
        assert sensor.update_times == [0.0, 0.25, 0.5]

    def test_ticks_shorter_than_period_never_update(self) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=2.0)
        manager.add_sensor(sensor)
        manager.run_once(10.0)
        for i in range(1, 8):
            manager.run_once(10.0 + i * 0.0625)
        assert sensor.update_times == [10.0]

    def test_force_updates_everything(self) -> None:
        manager = Manager()
        slow = _make_sensor("slow", update_rate=0.001)
        fast = _make_sensor("fast", update_rate=1000.0)
        manager.add_sensor(slow)
        manager.add_sensor(fast)
        manager.run_once(0.0)
        assert manager.run_once(0.0, force=True) == 2
        assert slow.update_times == [0.0, 0.0]
        assert fast.update_times == [0.0, 0.0]

    def test_returns_success_count(self) -> None:
        manager = Manager()
        manager.add_sensor(_make_sensor("ok"))
        manager.add_sensor(_make_sensor("bad", succeed=False))
        assert manager.run_once(0.0) == 1

    def test_failure_leaves_last_update_unchanged(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=4.0, succeed=False)
        manager.add_sensor(sensor)
        with caplog.at_level(logging.ERROR):
            manager.run_once(0.0)
        assert sensor.last_update_time is None
        assert "failed to update" in caplog.text
        # Still due on the next tick because the failure did not count.
        manager.run_once(0.0625)
        assert sensor.update_times == [0.0, 0.0625]

    def test_failure_retried_after_recovery(self) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=4.0, succeed=False)
        manager.add_sensor(sensor)
        manager.run_once(0.0)
        sensor.succeed = True
        manager.run_once(0.0625)
        assert sensor.last_update_time == 0.0625
        manager.run_once(0.125)
        assert sensor.update_times == [0.0, 0.0625]

    def test_failure_isolated_from_other_sensors(self) -> None:
        manager = Manager()
        bad = _make_sensor("bad", succeed=False)
        good = _make_sensor("good")
        manager.add_sensor(bad)
        manager.add_sensor(good)
        manager.run_once(1.0)
        assert good.last_update_time == 1.0
        assert bad.last_update_time is None

    def test_exception_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        manager = Manager()
        broken = _make_sensor("broken", raises=True)
        good = _make_sensor("good")
        manager.add_sensor(broken)
        manager.add_sensor(good)
        with caplog.at_level(logging.ERROR):
            assert manager.run_once(0.5) == 1
        assert good.update_times == [0.5]
        assert broken.last_update_time is None
        assert "render backend unavailable" in caplog.text

    def test_timedelta_time(self) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=2.0)
        manager.add_sensor(sensor)
        manager.run_once(timedelta(seconds=1))
        manager.run_once(timedelta(milliseconds=1250))
        manager.run_once(timedelta(milliseconds=1500))
        assert sensor.update_times == [1.0, 1.5]

    @pytest.mark.parametrize(
        "ticks",
        [
            [k / 10 for k in range(11)],
            [timedelta(milliseconds=100 * k) for k in range(11)],
            [0.1 * k for k in range(11)],
        ],
        ids=["division", "timedelta", "multiplication"],
    )
    def test_decimal_ticks_at_exact_period(self, ticks: list[object]) -> None:
        publisher = InMemoryPublisher()
        manager = Manager()
        manager.create_sensor(
            ScalarSensor,
            {"kind": "scalar", "name": "tenth", "update_rate": 10.0},
            source=lambda t: t,
            publisher=publisher,
        )
        for tick in ticks:
            manager.run_once(tick)  # type: ignore[arg-type]
        assert publisher.count("/tenth") == 11

    def test_decimal_ticks_below_period(self) -> None:
        manager = Manager()
        sensor = _make_sensor(update_rate=10.0)
        manager.add_sensor(sensor)
        for k in range(10):
            manager.run_once(k * 0.05)
        assert sensor.update_times == pytest.approx([0.0, 0.1, 0.2, 0.3, 0.4])

    def test_removed_sensor_not_stepped(self) -> None:
        manager = Manager()
        sensor = _make_sensor()
        sensor_id = manager.add_sensor(sensor)
        manager.remove(sensor_id)
        manager.run_once(0.0)
        assert sensor.update_times == []

    def test_sensor_added_during_pass_waits_for_next_pass(self) -> None:
        manager = Manager()
        late = _make_sensor("late")

        class SpawningSensor(RecordingSensor):
            def update(self, sim_time: float) -> bool:
                if late.id == NO_SENSOR:
                    manager.add_sensor(late)
                return super().update(sim_time)

        spawner = SpawningSensor()
        spawner.load({"kind": "recording", "name": "spawner"})
        manager.add_sensor(spawner)
        manager.run_once(0.0)
        assert late.update_times == []
        manager.run_once(1.0)
        assert late.update_times == [1.0]

    def test_end_to_end_publishing(self) -> None:
        publisher = InMemoryPublisher()
        manager = Manager()
        manager.create_sensor(
            ScalarSensor,
            {"kind": "scalar", "name": "clock", "update_rate": 10.0},
            source=lambda t: t,
            publisher=publisher,
        )
        for tick in range(101):
            manager.run_once(tick / 100.0)
        # 10 Hz over one second, first tick included.
        assert publisher.count("/clock") == 11


# ---------------------------------------------------------------------------
# Teardown
# ---------------------------------------------------------------------------


class TestTeardown:
    def test_close_removes_all(self) -> None:
        manager = Manager()
        sensors = [_make_sensor(f"s{i}") for i in range(3)]
        for sensor in sensors:
            manager.add_sensor(sensor)
        manager.close()
        assert len(manager) == 0
        assert all(sensor.closed for sensor in sensors)

    def test_context_manager(self) -> None:
        sensor = _make_sensor()
        with Manager() as manager:
            assert manager.initialized
            manager.add_sensor(sensor)
            assert list(manager) == [sensor]
        assert sensor.closed
        assert len(manager) == 0

    def test_ids_not_reused_after_close(self) -> None:
        manager = Manager()
        first = manager.add_sensor(_make_sensor())
        manager.close()
        assert manager.add_sensor(_make_sensor()) != first


class TestToSeconds:
    def test_float(self) -> None:
        assert to_seconds(1.5) == 1.5

    def test_int(self) -> None:
        assert to_seconds(2) == 2.0

    def test_timedelta(self) -> None:
        assert to_seconds(timedelta(milliseconds=250)) == 0.25
