"""
Reactor Device Interface

Abstract capability contract a reactor unit must satisfy, the provider that
enumerates reactors for the control loop, and an in-memory reactor used for
demos and tests.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import numpy as np

from reactor_monitor.math_utils import clamp

logger = logging.getLogger(__name__)


class ReactorDevice(ABC):
    """Abstract base class for a controllable reactor unit

    Reads may be issued any number of times per cycle in any order. Writes
    are idempotent and the last write wins.
    """

    @abstractmethod
    def identity(self) -> str:
        """Stable reactor name"""
        pass

    @abstractmethod
    def get_energy_stored(self) -> float:
        pass

    @abstractmethod
    def get_energy_capacity(self) -> float:
        pass

    @abstractmethod
    def get_fuel_temperature(self) -> float:
        pass

    @abstractmethod
    def get_casing_temperature(self) -> float:
        pass

    @abstractmethod
    def get_fuel_amount(self) -> float:
        pass

    @abstractmethod
    def get_waste_amount(self) -> float:
        pass

    @abstractmethod
    def get_control_rod_level(self) -> int:
        """Control rod level, 0 to 100"""
        pass

    @abstractmethod
    def set_all_control_rod_levels(self, level: int) -> None:
        pass

    @abstractmethod
    def get_active(self) -> bool:
        pass

    @abstractmethod
    def set_active(self, active: bool) -> None:
        pass


class DeviceProvider(ABC):
    """Source of reactor devices, queried once when the control loop starts"""

    @abstractmethod
    def discover(self) -> List[ReactorDevice]:
        """
        Enumerate attached reactors

        Returns:
            Reactors in a stable order
        """
        pass


class StaticDeviceProvider(DeviceProvider):
    """Provider over a fixed, pre-built list of devices"""

    def __init__(self, devices: Sequence[ReactorDevice]):
        self.devices = list(devices)

    def discover(self) -> List[ReactorDevice]:
        return list(self.devices)


class SimulatedReactor(ReactorDevice):
    """
    In-memory reactor with directly settable telemetry

    Every telemetry value is a plain attribute, so tests can script a
    sequence of readings by assigning between control cycles. advance()
    adds a crude first-order response for demos:
    - Output scales with the rod level while active
    - A constant load drains the energy buffer
    - Fuel temperature relaxes toward a rod-dependent equilibrium
    """

    def __init__(self,
                 name: str,
                 energy_stored: float = 0.0,
                 energy_capacity: float = 10_000_000.0,
                 fuel_temperature: float = 20.0,
                 casing_temperature: float = 20.0,
                 fuel_amount: float = 10_000.0,
                 waste_amount: float = 0.0,
                 control_rod_level: int = 50,
                 active: bool = True,
                 max_output_rf: float = 40_000.0,
                 load_rf: float = 15_000.0,
                 max_fuel_temperature: float = 1200.0,
                 noise_std_percent: float = 0.0,
                 noise_seed: Optional[int] = None):
        """
        Initialize simulated reactor

        Args:
            name: Reactor identity
            max_output_rf: RF/s generated at rod level 100
            load_rf: RF/s drained from the buffer by consumers
            max_fuel_temperature: Equilibrium fuel temperature at rod level 100 (°C)
            noise_std_percent: Standard deviation of load noise as percentage of load
            noise_seed: Random seed for reproducible noise
        """
        self.name = name
        self.energy_stored = energy_stored
        self.energy_capacity = energy_capacity
        self.fuel_temperature = fuel_temperature
        self.casing_temperature = casing_temperature
        self.fuel_amount = fuel_amount
        self.waste_amount = waste_amount
        self.control_rod_level = control_rod_level
        self.active = active

        self.max_output_rf = max_output_rf
        self.load_rf = load_rf
        self.max_fuel_temperature = max_fuel_temperature
        self.ambient_temperature = 20.0
        self.thermal_time_constant = 30.0  # s
        self.burn_rate = 0.05  # mB/s at rod level 100

        self.noise_std_percent = noise_std_percent
        self.rng = np.random.RandomState(noise_seed)

    def identity(self) -> str:
        return self.name

    def get_energy_stored(self) -> float:
        return self.energy_stored

    def get_energy_capacity(self) -> float:
        return self.energy_capacity

    def get_fuel_temperature(self) -> float:
        return self.fuel_temperature

    def get_casing_temperature(self) -> float:
        return self.casing_temperature

    def get_fuel_amount(self) -> float:
        return self.fuel_amount

    def get_waste_amount(self) -> float:
        return self.waste_amount

    def get_control_rod_level(self) -> int:
        return self.control_rod_level

    def set_all_control_rod_levels(self, level: int) -> None:
        self.control_rod_level = int(level)

    def get_active(self) -> bool:
        return self.active

    def set_active(self, active: bool) -> None:
        self.active = bool(active)

    def advance(self, seconds: float) -> None:
        """
        Evolve telemetry over an interval

        Args:
            seconds: Elapsed time in seconds
        """
        drive = self.control_rod_level / 100.0 if self.active else 0.0
        burn = min(self.fuel_amount, self.burn_rate * drive * seconds)
        if burn <= 0:
            drive = 0.0

        load = self.load_rf
        if self.noise_std_percent > 0:
            load += self.rng.normal(0.0, load * self.noise_std_percent / 100.0)

        generated = self.max_output_rf * drive
        self.energy_stored = clamp(
            self.energy_stored + (generated - max(load, 0.0)) * seconds, 0.0, self.energy_capacity
        )

        self.fuel_amount -= burn
        self.waste_amount += burn

        equilibrium = self.ambient_temperature + (self.max_fuel_temperature - self.ambient_temperature) * drive
        alpha = 1.0 - np.exp(-seconds / self.thermal_time_constant)
        self.fuel_temperature += (equilibrium - self.fuel_temperature) * alpha
        self.casing_temperature += (0.8 * self.fuel_temperature - self.casing_temperature) * alpha

        logger.debug(f"{self.name}: stored={self.energy_stored:.0f} RF fuel_temp={self.fuel_temperature:.1f}°C")
