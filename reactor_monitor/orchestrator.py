"""
Control Loop Orchestrator

Fixed-cadence loop that, every tick, walks the discovered reactors in
enumeration order, captures a telemetry snapshot, runs the interlock engine
and reports the result. Reactors are processed strictly one after another
and the end-of-tick sleep is the only suspension point.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from reactor_monitor.config import MonitorConfig
from reactor_monitor.devices import DeviceProvider, ReactorDevice
from reactor_monitor.exceptions import NoReactorsFoundError, ReactorOverheatError
from reactor_monitor.interlock import InterlockOutcome, SafetyInterlockEngine
from reactor_monitor.pid import PidRegulator, reset
from reactor_monitor.reporting import OVERHEAT_ALERT, OVERHEAT_LINES, fault_lines, status_lines
from reactor_monitor.sinks import (
    AlertBroadcaster,
    BackupRelay,
    DisplaySink,
    LogSink,
    NullAlertBroadcaster,
    NullBackupRelay,
    NullDisplay,
    NullLogSink,
)
from reactor_monitor.types import PidState, ReactorSnapshot

logger = logging.getLogger(__name__)


class ControlLoop:
    """Closed-loop safety controller for a fixed set of reactors.

    Example:
        >>> loop = ControlLoop(StaticDeviceProvider([reactor]), config)
        >>> loop.run(max_ticks=10)

    Attributes:
        reactors: Devices found at startup, in processing order
        pid_states: Regulator memory keyed by reactor identity
        tick_count: Completed ticks
        halted: The overheat that stopped the loop, None while running
    """

    def __init__(
        self,
        provider: DeviceProvider,
        config: Optional[MonitorConfig] = None,
        display: Optional[DisplaySink] = None,
        log_sink: Optional[LogSink] = None,
        alert_broadcaster: Optional[AlertBroadcaster] = None,
        backup_relay: Optional[BackupRelay] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the control loop.

        Args:
            provider: Source of reactor devices
            config: Monitor configuration (defaults to MonitorConfig())
            display: Operator display
            log_sink: Per-reactor history; ignored when config.log_to_file is off
            alert_broadcaster: Remote alert channel for overheat
            backup_relay: Relay energised on a low energy buffer
            sleep: Called with the poll interval between ticks
            clock: Timestamp source for log records
        """
        self.provider = provider
        self.config = config or MonitorConfig()
        self.display = display or NullDisplay()
        if log_sink is not None and self.config.log_to_file:
            self.log_sink = log_sink
        else:
            self.log_sink = NullLogSink()
        self.alert_broadcaster = alert_broadcaster or NullAlertBroadcaster()
        self.backup_relay = backup_relay or NullBackupRelay()
        self.sleep = sleep
        self.clock = clock

        self.engine = SafetyInterlockEngine(
            self.config,
            regulator=PidRegulator(self.config.pid),
            backup_relay=self.backup_relay,
        )

        self.reactors: List[ReactorDevice] = []
        self.pid_states: Dict[str, PidState] = {}
        self.tick_count = 0
        self.halted: Optional[ReactorOverheatError] = None
        self._started = False

    def start(self) -> List[ReactorDevice]:
        """Discover reactors.

        Returns:
            Discovered reactors

        Raises:
            NoReactorsFoundError: If the provider returns no devices
        """
        self.reactors = list(self.provider.discover())
        if not self.reactors:
            logger.critical("No reactors found, control loop cannot start")
            raise NoReactorsFoundError()

        self._started = True
        logger.info(f"Monitoring {len(self.reactors)} reactor(s)")
        return self.reactors

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Run ticks on the configured cadence.

        Args:
            max_ticks: Stop after this many ticks (None runs until halted)

        Returns:
            Number of ticks completed

        Raises:
            NoReactorsFoundError: If discovery finds nothing
            ReactorOverheatError: When any reactor overheats, or if the loop
                has already been halted
        """
        self._check_halted()
        if not self._started:
            self.start()

        completed = 0
        while max_ticks is None or completed < max_ticks:
            self.tick()
            completed += 1
            if max_ticks is None or completed < max_ticks:
                self.sleep(self.config.poll_interval)
        return completed

    def tick(self) -> List[InterlockOutcome]:
        """Process every reactor once.

        Returns:
            Outcomes of the reactors processed successfully, in order

        Raises:
            ReactorOverheatError: After the overheating reactor has been shut
                down and reported; later reactors are not processed. Raised
                again without touching any device once the loop is halted
        """
        self._check_halted()
        if not self._started:
            self.start()

        frame: List[str] = []
        outcomes: List[InterlockOutcome] = []

        for index, device in enumerate(self.reactors):
            name = f"reactor #{index}"
            try:
                name = device.identity()
                snapshot = ReactorSnapshot.capture(device)
                state = self.pid_states.setdefault(name, reset())
                outcome, new_state = self.engine.evaluate(snapshot, device, state)
                self.pid_states[name] = new_state
            except Exception as e:
                logger.exception(f"Control cycle failed for {name}")
                frame.extend(fault_lines(name, [str(e)]))
                continue

            if outcome.fatal:
                self._halt(snapshot, outcome, frame)

            outcomes.append(outcome)
            frame.extend(self._report(snapshot, outcome))

        self._best_effort(self.display.render, frame)
        self.tick_count += 1
        return outcomes

    def reset_pid(self, reactor_id: str) -> None:
        """Clear the regulator memory of one reactor."""
        self.pid_states[reactor_id] = reset()

    def _check_halted(self) -> None:
        if self.halted is not None:
            raise self.halted

    def _report(self, snapshot: ReactorSnapshot, outcome: InterlockOutcome) -> List[str]:
        """Write the log record and build display lines for one reactor."""
        if outcome.faults:
            return outcome.notices + fault_lines(snapshot.identity, outcome.faults)

        self._best_effort(
            self.log_sink.append_record,
            self.clock(), snapshot.identity, snapshot.energy_stored, snapshot.fuel_temperature,
        )
        return outcome.notices + status_lines(
            snapshot, outcome.energy_fraction, rod_level=outcome.rod_level, active=outcome.active
        )

    def _halt(self, snapshot: ReactorSnapshot, outcome: InterlockOutcome, frame: List[str]) -> None:
        """Flush reporting for an overheating reactor, then stop the loop."""
        lines = OVERHEAT_LINES + outcome.notices + status_lines(
            snapshot, outcome.energy_fraction, active=outcome.active
        )
        self._best_effort(self.display.render, lines + frame)
        self._best_effort(
            self.log_sink.append_record,
            self.clock(), snapshot.identity, snapshot.energy_stored, snapshot.fuel_temperature,
        )
        self._best_effort(self.alert_broadcaster.broadcast, OVERHEAT_ALERT, self.config.alert_channel)

        # A restarted loop must not inherit error history from before the trip
        self.reset_pid(snapshot.identity)

        self.halted = ReactorOverheatError(
            snapshot.identity, snapshot.fuel_temperature, self.config.max_temperature
        )
        raise self.halted

    @staticmethod
    def _best_effort(action: Callable, *args) -> None:
        """Run a reporting call without letting a sink failure stop the loop."""
        try:
            action(*args)
        except Exception as e:
            logger.error(f"Reporting failed: {e}")
