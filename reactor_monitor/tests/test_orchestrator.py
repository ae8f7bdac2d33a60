"""
Unit tests for the control loop orchestrator.
"""

from datetime import datetime

import pytest
from unittest.mock import Mock
from reactor_monitor.config import MonitorConfig
from reactor_monitor.devices import ReactorDevice, SimulatedReactor, StaticDeviceProvider
from reactor_monitor.exceptions import NoReactorsFoundError, ReactorOverheatError
from reactor_monitor.orchestrator import ControlLoop
from reactor_monitor.reporting import OVERHEAT_ALERT, OVERHEAT_LINES
from reactor_monitor.sinks import AlertBroadcaster, DisplaySink, LogSink
from reactor_monitor.types import PidState

FIXED_TIME = datetime(2024, 1, 1, 12, 30, 0)


def _reactor(name, **kwargs):
    defaults = dict(energy_stored=50.0, energy_capacity=100.0, fuel_temperature=800.0,
                    control_rod_level=50, active=True)
    defaults.update(kwargs)
    return SimulatedReactor(name, **defaults)


def _loop(devices, config=None, **kwargs):
    return ControlLoop(
        StaticDeviceProvider(devices),
        config or MonitorConfig(max_temperature=2000.0),
        display=kwargs.pop("display", Mock(spec=DisplaySink)),
        log_sink=kwargs.pop("log_sink", Mock(spec=LogSink)),
        alert_broadcaster=kwargs.pop("alert_broadcaster", Mock(spec=AlertBroadcaster)),
        sleep=kwargs.pop("sleep", Mock()),
        clock=lambda: FIXED_TIME,
        **kwargs,
    )


class TestStartup:
    """Test device discovery."""

    def test_no_reactors_is_fatal(self):
        """Test an empty provider stops the loop before any tick."""
        loop = _loop([])
        with pytest.raises(NoReactorsFoundError):
            loop.run()
        assert loop.tick_count == 0

    def test_discovery_order_kept(self):
        """Test reactors are processed in enumeration order."""
        loop = _loop([_reactor("b"), _reactor("a")])
        assert [r.identity() for r in loop.start()] == ["b", "a"]


class TestTick:
    """Test a single control cycle."""

    def test_reports_every_reactor(self):
        """Test one display frame and one log record per reactor."""
        display = Mock(spec=DisplaySink)
        log_sink = Mock(spec=LogSink)
        loop = _loop([_reactor("a"), _reactor("b", energy_stored=70.0)], display=display, log_sink=log_sink)

        outcomes = loop.tick()

        assert [o.reactor_id for o in outcomes] == ["a", "b"]
        display.render.assert_called_once()
        frame = display.render.call_args.args[0]
        assert frame.index("Reactor: a") < frame.index("Reactor: b")
        assert "Energy: 50 RF (50.0%)" in frame
        log_sink.append_record.assert_any_call(FIXED_TIME, "a", 50.0, 800.0)
        log_sink.append_record.assert_any_call(FIXED_TIME, "b", 70.0, 800.0)

    def test_frame_order_stable_across_ticks(self):
        """Test display ordering does not change between ticks."""
        display = Mock(spec=DisplaySink)
        loop = _loop([_reactor("x"), _reactor("y"), _reactor("z")], display=display)
        loop.tick()
        loop.tick()

        orders = [
            [line for line in call.args[0] if line.startswith("Reactor: ")]
            for call in display.render.call_args_list
        ]
        assert orders[0] == orders[1] == ["Reactor: x", "Reactor: y", "Reactor: z"]

    def test_pid_state_per_reactor(self):
        """Test each reactor owns its own PID memory."""
        loop = _loop([_reactor("a", energy_stored=50.0), _reactor("b", energy_stored=80.0)])
        loop.tick()

        assert set(loop.pid_states) == {"a", "b"}
        assert loop.pid_states["a"].integral == pytest.approx(0.4)
        assert loop.pid_states["b"].integral == pytest.approx(0.1)

    def test_logging_disabled_by_config(self):
        """Test log_to_file=False silences the log sink."""
        log_sink = Mock(spec=LogSink)
        loop = _loop([_reactor("a")], config=MonitorConfig(log_to_file=False), log_sink=log_sink)
        loop.tick()
        log_sink.append_record.assert_not_called()

    def test_missing_collaborators_are_silent(self):
        """Test the loop runs with no display, log, alert or relay attached."""
        loop = ControlLoop(StaticDeviceProvider([_reactor("a")]), sleep=Mock())
        assert loop.run(max_ticks=2) == 2

    def test_device_error_isolated(self):
        """Test a failing reactor does not stop the others."""
        bad = Mock(spec=ReactorDevice)
        bad.identity.return_value = "bad"
        bad.get_energy_stored.side_effect = RuntimeError("peripheral detached")
        good = _reactor("good")
        display = Mock(spec=DisplaySink)
        loop = _loop([bad, good], display=display)

        outcomes = loop.tick()

        assert [o.reactor_id for o in outcomes] == ["good"]
        assert good.control_rod_level == 51
        frame = display.render.call_args.args[0]
        assert "Reactor: bad" in frame
        assert any("peripheral detached" in line for line in frame)

    def test_data_fault_recovers_next_cycle(self):
        """Test zero capacity is skipped this cycle and retried the next."""
        reactor = _reactor("a", energy_capacity=0.0)
        other = _reactor("b")
        log_sink = Mock(spec=LogSink)
        loop = _loop([reactor, other], log_sink=log_sink)

        first = loop.tick()
        assert first[0].faults
        assert reactor.control_rod_level == 50
        assert other.control_rod_level == 51
        log_sink.append_record.assert_called_once_with(FIXED_TIME, "b", 50.0, 800.0)

        reactor.energy_capacity = 100.0
        second = loop.tick()
        assert not second[0].faults
        assert reactor.control_rod_level == 51


class TestOverheatHalt:
    """Test whole-process halt on overheat."""

    def test_two_reactor_scenario(self):
        """Test A is regulated, B is shut down and C is never touched."""
        a = _reactor("A", energy_stored=50.0, fuel_temperature=800.0)
        b = _reactor("B", fuel_temperature=2100.0)
        c = Mock(spec=ReactorDevice)
        display = Mock(spec=DisplaySink)
        log_sink = Mock(spec=LogSink)
        alert = Mock(spec=AlertBroadcaster)
        loop = _loop([a, b, c], display=display, log_sink=log_sink, alert_broadcaster=alert)

        with pytest.raises(ReactorOverheatError) as exc_info:
            loop.tick()

        assert exc_info.value.reactor_id == "B"
        assert exc_info.value.fuel_temperature == 2100.0

        assert a.active
        assert a.control_rod_level == 51
        assert not b.active
        assert b.control_rod_level == 50
        assert c.method_calls == []

        frame = display.render.call_args.args[0]
        assert frame[:2] == OVERHEAT_LINES
        alert.broadcast.assert_called_once_with(OVERHEAT_ALERT, "reactorAlert")
        log_sink.append_record.assert_any_call(FIXED_TIME, "B", 50.0, 2100.0)

    def test_run_stops_on_overheat(self):
        """Test no further ticks or sleeps happen after a halt."""
        sleep = Mock()
        reactor = _reactor("a")
        loop = _loop([reactor], sleep=sleep)
        loop.tick()

        reactor.fuel_temperature = 2001.0
        with pytest.raises(ReactorOverheatError):
            loop.run(max_ticks=5)
        sleep.assert_not_called()

    def test_pid_reset_after_shutdown(self):
        """Test the tripped reactor's PID memory is cleared."""
        reactor = _reactor("a")
        loop = _loop([reactor])
        loop.tick()
        assert loop.pid_states["a"] != PidState()

        reactor.fuel_temperature = 2500.0
        with pytest.raises(ReactorOverheatError):
            loop.tick()
        assert loop.pid_states["a"] == PidState()

    def test_failing_alert_does_not_mask_halt(self):
        """Test reporting errors during shutdown still end in a halt."""
        alert = Mock(spec=AlertBroadcaster)
        alert.broadcast.side_effect = OSError("modem offline")
        reactor = _reactor("a", fuel_temperature=3000.0)
        loop = _loop([reactor], alert_broadcaster=alert)

        with pytest.raises(ReactorOverheatError):
            loop.tick()
        assert not reactor.active


class TestRun:
    """Test loop cadence."""

    def test_sleeps_between_ticks(self):
        """Test the poll interval is slept between ticks only."""
        sleep = Mock()
        loop = _loop([_reactor("a")], config=MonitorConfig(poll_interval=2.5), sleep=sleep)

        assert loop.run(max_ticks=3) == 3
        assert loop.tick_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [2.5, 2.5]

    def test_reset_pid(self):
        """Test manual PID reset."""
        loop = _loop([_reactor("a")])
        loop.tick()
        loop.reset_pid("a")
        loop.reset_pid("a")
        assert loop.pid_states["a"] == PidState()


class TestHaltedState:
    """Test the loop stays stopped after an overheat."""

    def test_tick_after_halt_raises(self):
        """Test a tripped reactor is not restarted by a later tick."""
        reactor = _reactor("a", fuel_temperature=2500.0)
        loop = _loop([reactor])

        with pytest.raises(ReactorOverheatError) as first:
            loop.tick()
        assert loop.halted is first.value

        reactor.fuel_temperature = 800.0
        with pytest.raises(ReactorOverheatError) as second:
            loop.tick()

        assert second.value is first.value
        assert not reactor.active
        assert loop.tick_count == 0

    def test_run_after_halt_raises(self):
        """Test run refuses to start ticking a halted loop."""
        sleep = Mock()
        reactor = _reactor("a", fuel_temperature=2500.0)
        loop = _loop([reactor], sleep=sleep)
        with pytest.raises(ReactorOverheatError):
            loop.tick()

        reactor.fuel_temperature = 800.0
        with pytest.raises(ReactorOverheatError):
            loop.run(max_ticks=3)
        assert not reactor.active
        sleep.assert_not_called()


class TestSinkFailures:
    """Test display and log failures do not stop regulation."""

    def test_failing_log_sink_isolated(self):
        """Test a log write error on one reactor still regulates the next."""
        log_sink = Mock(spec=LogSink)
        log_sink.append_record.side_effect = [OSError("disk full"), None]
        a = _reactor("a")
        b = _reactor("b")
        loop = _loop([a, b], log_sink=log_sink)

        outcomes = loop.tick()

        assert [o.reactor_id for o in outcomes] == ["a", "b"]
        assert a.control_rod_level == 51
        assert b.control_rod_level == 51
        assert log_sink.append_record.call_count == 2

    def test_failing_display_does_not_end_run(self):
        """Test a broken display leaves the loop running."""
        display = Mock(spec=DisplaySink)
        display.render.side_effect = OSError("monitor detached")
        reactor = _reactor("a")
        loop = _loop([reactor], display=display)

        assert loop.run(max_ticks=2) == 2
        assert display.render.call_count == 2
        assert reactor.control_rod_level > 50
