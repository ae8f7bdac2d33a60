"""
Safety Interlock Engine

This module implements the per-cycle decision sequence for one reactor:
energy overflow pause/resume, backup power activation, overheat emergency
shutdown and PID control rod adjustment.

The steps always run in that order. Overflow and backup are regulatory and
run every cycle; overheat short-circuits rod adjustment and marks the outcome
fatal so the control loop can report and halt.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from reactor_monitor.config import MonitorConfig
from reactor_monitor.devices import ReactorDevice
from reactor_monitor.math_utils import clamp, percent
from reactor_monitor.pid import PidRegulator
from reactor_monitor.reporting import BACKUP_NOTICE, PAUSE_NOTICE, RESUME_NOTICE
from reactor_monitor.sinks import BackupRelay, NullBackupRelay
from reactor_monitor.types import PidState, ReactorSnapshot

logger = logging.getLogger(__name__)

ROD_MIN = 0
ROD_MAX = 100


@dataclass
class InterlockOutcome:
    """What the engine did to one reactor during one cycle"""
    reactor_id: str
    active: bool                                 # Run state after the interlocks
    energy_fraction: Optional[float] = None      # None when telemetry was faulty
    faults: List[str] = field(default_factory=list)
    paused: bool = False
    resumed: bool = False
    backup_active: Optional[bool] = None         # None when the relay was not evaluated
    overheat: bool = False
    pid_output: Optional[float] = None
    rod_level: Optional[int] = None              # Rod level written this cycle
    notices: List[str] = field(default_factory=list)

    @property
    def fatal(self) -> bool:
        """True when the whole process must halt"""
        return self.overheat


class SafetyInterlockEngine:
    """
    Interlock sequence for a single reactor snapshot
    """

    def __init__(self, config: MonitorConfig, regulator: Optional[PidRegulator] = None,
                 backup_relay: Optional[BackupRelay] = None):
        """
        Initialize the interlock engine

        Args:
            config: Monitor configuration
            regulator: PID regulator (defaults to one built from config.pid)
            backup_relay: Relay driven by the backup power step
        """
        self.config = config
        self.regulator = regulator or PidRegulator(config.pid)
        self.backup_relay = backup_relay or NullBackupRelay()

    def evaluate(self, snapshot: ReactorSnapshot, device: ReactorDevice,
                 pid_state: PidState) -> Tuple[InterlockOutcome, PidState]:
        """
        Run the full interlock sequence

        Args:
            snapshot: Telemetry captured this cycle
            device: Handle used for writes
            pid_state: Regulator memory for this reactor

        Returns:
            Tuple of (outcome, successor PID state). The PID state is
            returned unchanged when rod adjustment did not run.
        """
        outcome = InterlockOutcome(reactor_id=snapshot.identity, active=snapshot.active)

        faults = snapshot.faults()
        if faults:
            # Energy math is skipped but the temperature limit still applies
            outcome.faults = faults
            logger.warning(f"Telemetry fault on {snapshot.identity}, skipping regulation: {'; '.join(faults)}")
            self.check_overheat(snapshot, device, outcome)
            return outcome, pid_state

        outcome.energy_fraction = snapshot.energy_fraction

        self.regulate_overflow(snapshot, device, outcome)
        self.regulate_backup(outcome)

        if self.check_overheat(snapshot, device, outcome):
            return outcome, pid_state

        return outcome, self.adjust_control_rods(snapshot, device, pid_state, outcome)

    def regulate_overflow(self, snapshot: ReactorSnapshot, device: ReactorDevice,
                          outcome: InterlockOutcome) -> None:
        """Pause on a full buffer, resume once it drains below the hysteresis band"""
        fraction = outcome.energy_fraction

        if fraction > self.config.overflow_threshold:
            if snapshot.active:
                device.set_active(False)
                outcome.active = False
                outcome.paused = True
                outcome.notices.append(PAUSE_NOTICE)
                logger.info(f"Reactor {snapshot.identity} paused: energy buffer is at {percent(fraction):.1f}%")
        elif not snapshot.active and fraction < self.config.overflow_resume_level:
            device.set_active(True)
            outcome.active = True
            outcome.resumed = True
            outcome.notices.append(RESUME_NOTICE)
            logger.info(f"Reactor {snapshot.identity} resumed: energy buffer below threshold")

    def regulate_backup(self, outcome: InterlockOutcome) -> None:
        """Drive the backup relay from this cycle's buffer level alone"""
        backup = outcome.energy_fraction < self.config.backup_threshold
        self.backup_relay.set_signal(backup)
        outcome.backup_active = backup
        if backup:
            outcome.notices.append(BACKUP_NOTICE)
            logger.info(f"Backup system activated: energy buffer of {outcome.reactor_id} critical")

    def check_overheat(self, snapshot: ReactorSnapshot, device: ReactorDevice,
                       outcome: InterlockOutcome) -> bool:
        """
        Emergency shutdown on fuel over-temperature

        Returns:
            True if the reactor was shut down and the outcome is fatal
        """
        if snapshot.fuel_temperature <= self.config.max_temperature:
            return False

        device.set_active(False)
        outcome.active = False
        outcome.overheat = True
        logger.critical(
            f"Reactor {snapshot.identity} overheating: fuel {snapshot.fuel_temperature:.1f}°C "
            f"> {self.config.max_temperature:.1f}°C, shutting down"
        )
        return True

    def adjust_control_rods(self, snapshot: ReactorSnapshot, device: ReactorDevice,
                            pid_state: PidState, outcome: InterlockOutcome) -> PidState:
        """Move the rods by the PID correction toward the target buffer level"""
        adjustment, new_state = self.regulator.compute(
            pid_state, self.config.target_energy_fraction, outcome.energy_fraction
        )
        new_level = int(round(clamp(snapshot.control_rod_level + adjustment, ROD_MIN, ROD_MAX)))
        device.set_all_control_rod_levels(new_level)

        outcome.pid_output = adjustment
        outcome.rod_level = new_level
        logger.info(f"Adjusted rods for {snapshot.identity}: {new_level}% (PID Adjustment: {adjustment:.2f})")
        return new_state
