"""
Operator-facing text for displays and alerts.
"""

from typing import List, Optional

from reactor_monitor.math_utils import percent
from reactor_monitor.types import ReactorSnapshot

PAUSE_NOTICE = "Reactor Paused: Energy buffer full."
RESUME_NOTICE = "Reactor Resumed: Energy buffer below threshold."
BACKUP_NOTICE = "Backup Power: Energy buffer critical."
OVERHEAT_LINES = ["WARNING: Reactor Overheating!", "Shutting down for safety!"]
OVERHEAT_ALERT = "Reactor Overheating! Shutdown initiated."


def status_lines(snapshot: ReactorSnapshot, energy_fraction: Optional[float] = None,
                 rod_level: Optional[int] = None, active: Optional[bool] = None) -> List[str]:
    """
    Format the per-reactor status block

    Args:
        snapshot: Telemetry for this cycle
        energy_fraction: Buffer fill, or None when the capacity reading is faulty
        rod_level: Rod level after adjustment; defaults to the snapshot reading
        active: Run state after interlocks; defaults to the snapshot reading

    Returns:
        Display lines in a fixed order
    """
    if active is None:
        active = snapshot.active
    if rod_level is None:
        rod_level = snapshot.control_rod_level

    if energy_fraction is None:
        energy = f"Energy: {int(snapshot.energy_stored)} RF (n/a)"
    else:
        energy = f"Energy: {int(snapshot.energy_stored)} RF ({percent(energy_fraction):.1f}%)"

    return [
        f"Reactor: {snapshot.identity}",
        energy,
        f"Fuel Temp: {snapshot.fuel_temperature:.1f}°C",
        f"Casing Temp: {snapshot.casing_temperature:.1f}°C",
        f"Fuel: {snapshot.fuel_amount:.1f} mB",
        f"Waste: {snapshot.waste_amount:.1f} mB",
        f"Rod Level: {rod_level}%",
        f"Active: {'Yes' if active else 'No'}",
    ]


def fault_lines(reactor_id: str, faults: List[str]) -> List[str]:
    """Lines reporting a reactor whose telemetry was rejected this cycle"""
    return [f"Reactor: {reactor_id}", "TELEMETRY FAULT"] + [f"  {fault}" for fault in faults]
