"""
Control Rod PID Regulator

Discrete PID with one sample per control cycle. The regulator itself is
stateless: callers pass in a PidState and receive the successor state, so
each reactor can own its own history without any shared globals.
"""

from typing import Tuple

from reactor_monitor.config import PidGains
from reactor_monitor.math_utils import clamp
from reactor_monitor.types import PidState

OUTPUT_LIMIT = 100.0


def compute(state: PidState, target: float, actual: float, gains: PidGains) -> Tuple[float, PidState]:
    """
    Compute one PID step

    Args:
        state: Regulator memory from the previous cycle
        target: Setpoint
        actual: Measured value
        gains: Proportional, integral and derivative gains

    Returns:
        Tuple of (output clamped to [-100, 100], successor state)
    """
    error = target - actual
    integral = state.integral + error
    if gains.integral_limit is not None:
        integral = clamp(integral, -gains.integral_limit, gains.integral_limit)
    derivative = error - state.previous_error

    output = (gains.kp * error) + (gains.ki * integral) + (gains.kd * derivative)
    return clamp(output, -OUTPUT_LIMIT, OUTPUT_LIMIT), PidState(previous_error=error, integral=integral)


def reset() -> PidState:
    """Fresh regulator memory, used after an emergency shutdown"""
    return PidState()


class PidRegulator:
    """PID regulator bound to a fixed set of gains"""

    def __init__(self, gains: PidGains):
        self.gains = gains

    def compute(self, state: PidState, target: float, actual: float) -> Tuple[float, PidState]:
        return compute(state, target, actual, self.gains)

    def reset(self) -> PidState:
        return reset()
