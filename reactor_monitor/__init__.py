"""
Reactor Monitor

Closed-loop safety controller for power-generating reactor units.

This library provides:
- PID control rod regulation toward a target energy buffer level
- Energy overflow pause/resume with hysteresis
- Backup power relay activation on a low buffer
- Overheat emergency shutdown that halts the whole monitor
- Pluggable displays, log sinks, alert broadcasters and backup relays

Example:
    >>> from reactor_monitor import ControlLoop, SimulatedReactor, StaticDeviceProvider
    >>> loop = ControlLoop(StaticDeviceProvider([SimulatedReactor('reactor_0')]))
    >>> loop.run(max_ticks=3)
"""

__version__ = "1.0.0"
__author__ = "Nuclear Sim Team"

from reactor_monitor.config import MonitorConfig, PidGains, load_config
from reactor_monitor.devices import DeviceProvider, ReactorDevice, SimulatedReactor, StaticDeviceProvider
from reactor_monitor.exceptions import (
    ConfigurationError,
    NoReactorsFoundError,
    ReactorMonitorError,
    ReactorOverheatError,
    TelemetryFaultError,
)
from reactor_monitor.interlock import InterlockOutcome, SafetyInterlockEngine
from reactor_monitor.math_utils import clamp
from reactor_monitor.orchestrator import ControlLoop
from reactor_monitor.pid import PidRegulator
from reactor_monitor.types import PidState, ReactorSnapshot

__all__ = [
    'ControlLoop',
    'SafetyInterlockEngine',
    'InterlockOutcome',
    'PidRegulator',
    'PidState',
    'ReactorSnapshot',
    'ReactorDevice',
    'DeviceProvider',
    'StaticDeviceProvider',
    'SimulatedReactor',
    'MonitorConfig',
    'PidGains',
    'load_config',
    'clamp',
    'ReactorMonitorError',
    'ConfigurationError',
    'NoReactorsFoundError',
    'ReactorOverheatError',
    'TelemetryFaultError',
]
