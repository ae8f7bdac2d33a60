"""
Custom exceptions for the reactor monitor.
"""

from typing import List


class ReactorMonitorError(Exception):
    """Base exception for all reactor monitor errors."""
    pass


class ConfigurationError(ReactorMonitorError):
    """Invalid or unreadable monitor configuration."""
    pass


class NoReactorsFoundError(ReactorMonitorError):
    """Device discovery returned no reactors."""

    def __init__(self, message: str = "No reactors found! Connect reactors via Computer Ports."):
        super().__init__(message)


class TelemetryFaultError(ReactorMonitorError):
    """Telemetry snapshot is not usable for interlock math."""

    def __init__(self, reactor_id: str, faults: List[str]):
        super().__init__(f"Telemetry fault on {reactor_id}: {'; '.join(faults)}")
        self.reactor_id = reactor_id
        self.faults = list(faults)


class ReactorOverheatError(ReactorMonitorError):
    """Fuel temperature exceeded the shutdown limit.

    Raised after the offending reactor has been deactivated and reported.
    Terminates the control loop for every reactor.
    """

    def __init__(self, reactor_id: str, fuel_temperature: float, max_temperature: float):
        super().__init__(
            f"Reactor shutdown due to overheating: {reactor_id} at "
            f"{fuel_temperature:.1f}°C (limit {max_temperature:.1f}°C)"
        )
        self.reactor_id = reactor_id
        self.fuel_temperature = fuel_temperature
        self.max_temperature = max_temperature
