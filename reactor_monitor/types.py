"""
Data structures shared across the reactor monitor.

ReactorSnapshot is a read-only view of one reactor's telemetry for a single
control cycle. PidState is the per-reactor regulator memory.
"""

from dataclasses import dataclass
from typing import List

from reactor_monitor.exceptions import TelemetryFaultError


@dataclass(frozen=True)
class PidState:
    """Regulator memory carried between cycles for one reactor."""
    previous_error: float = 0.0
    integral: float = 0.0


@dataclass(frozen=True)
class ReactorSnapshot:
    """Telemetry captured from one reactor at the start of a cycle.

    Attributes:
        identity: Stable reactor name
        energy_stored: Buffered energy (RF)
        energy_capacity: Buffer capacity (RF)
        fuel_temperature: Fuel temperature (°C)
        casing_temperature: Casing temperature (°C)
        fuel_amount: Fuel in the core (mB)
        waste_amount: Waste in the core (mB)
        control_rod_level: Rod insertion (0-100 %)
        active: Whether the reactor is running
    """
    identity: str
    energy_stored: float
    energy_capacity: float
    fuel_temperature: float
    casing_temperature: float
    fuel_amount: float
    waste_amount: float
    control_rod_level: int
    active: bool

    @classmethod
    def capture(cls, device) -> "ReactorSnapshot":
        """Read every telemetry channel of a device once.

        Args:
            device: Object implementing the ReactorDevice contract

        Returns:
            Snapshot of the device's current telemetry
        """
        return cls(
            identity=device.identity(),
            energy_stored=device.get_energy_stored(),
            energy_capacity=device.get_energy_capacity(),
            fuel_temperature=device.get_fuel_temperature(),
            casing_temperature=device.get_casing_temperature(),
            fuel_amount=device.get_fuel_amount(),
            waste_amount=device.get_waste_amount(),
            control_rod_level=int(device.get_control_rod_level()),
            active=bool(device.get_active()),
        )

    def faults(self) -> List[str]:
        """List the reasons this snapshot cannot drive interlock math.

        Returns:
            Fault descriptions, empty when the snapshot is usable
        """
        faults = []
        if self.energy_capacity == 0:
            faults.append("energy capacity is zero")
        elif self.energy_capacity < 0:
            faults.append(f"negative energy capacity ({self.energy_capacity})")

        for name in ("energy_stored", "fuel_amount", "waste_amount", "control_rod_level"):
            value = getattr(self, name)
            if value < 0:
                faults.append(f"negative {name.replace('_', ' ')} ({value})")

        return faults

    @property
    def energy_fraction(self) -> float:
        """Fraction of the energy buffer currently filled.

        Raises:
            TelemetryFaultError: If the capacity is not positive
        """
        if self.energy_capacity <= 0:
            raise TelemetryFaultError(self.identity, ["energy capacity is not positive"])
        return self.energy_stored / self.energy_capacity
