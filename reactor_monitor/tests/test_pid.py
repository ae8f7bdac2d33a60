"""
Unit tests for the clamp helper and the PID regulator.
"""

import pytest
from reactor_monitor.config import PidGains
from reactor_monitor.math_utils import clamp
from reactor_monitor.pid import PidRegulator, compute, reset
from reactor_monitor.types import PidState


class TestClamp:
    """Test clamp bounds."""

    @pytest.mark.parametrize("value", [-1e9, -100.5, -1.0, 0.0, 0.5, 42.0, 100.0, 1e12])
    def test_output_within_bounds(self, value):
        """Test clamped value always lies in [lo, hi]."""
        result = clamp(value, -100.0, 100.0)
        assert -100.0 <= result <= 100.0

    def test_inside_range_unchanged(self):
        """Test values inside the range pass through."""
        assert clamp(37.5, 0, 100) == 37.5

    def test_inverted_bounds_do_not_raise(self):
        """Test lo > hi returns a number instead of failing."""
        result = clamp(5.0, 10.0, 0.0)
        assert isinstance(result, float)

    def test_returns_builtin_float(self):
        """Test numpy scalars do not leak out."""
        assert type(clamp(3, 0, 10)) is float


class TestPidCompute:
    """Test PID step arithmetic."""

    def setup_method(self):
        self.gains = PidGains(kp=2.0, ki=0.1, kd=1.0)

    def test_zero_error_gives_zero_output(self):
        """Test target == actual with fresh state outputs 0."""
        output, state = compute(PidState(), 0.9, 0.9, self.gains)
        assert output == 0.0
        assert state == PidState(previous_error=0.0, integral=0.0)

    def test_first_step(self):
        """Test P, I and D terms on the first step."""
        output, state = compute(PidState(), 0.9, 0.5, self.gains)
        # error 0.4: 2*0.4 + 0.1*0.4 + 1*0.4
        assert output == pytest.approx(1.24)
        assert state.previous_error == pytest.approx(0.4)
        assert state.integral == pytest.approx(0.4)

    def test_second_step_accumulates_integral(self):
        """Test integral grows and derivative vanishes on a steady error."""
        _, state = compute(PidState(), 0.9, 0.5, self.gains)
        output, state = compute(state, 0.9, 0.5, self.gains)
        assert output == pytest.approx(0.88)
        assert state.integral == pytest.approx(0.8)

    def test_input_state_not_mutated(self):
        """Test the caller's state is left untouched."""
        original = PidState(previous_error=0.1, integral=2.0)
        compute(original, 0.9, 0.2, self.gains)
        assert original == PidState(previous_error=0.1, integral=2.0)

    def test_deterministic(self):
        """Test identical inputs give identical results."""
        state = PidState(previous_error=-0.3, integral=5.0)
        assert compute(state, 0.9, 0.42, self.gains) == compute(state, 0.9, 0.42, self.gains)

    @pytest.mark.parametrize("actual", [-1e6, -50.0, 0.0, 1.0, 50.0, 1e6])
    def test_output_bounded(self, actual):
        """Test output is clamped to [-100, 100]."""
        gains = PidGains(kp=1000.0, ki=1000.0, kd=1000.0)
        output, _ = compute(PidState(integral=1e6), 0.9, actual, gains)
        assert -100.0 <= output <= 100.0

    def test_unbounded_integral_by_default(self):
        """Test the integral keeps accumulating without a limit."""
        state = PidState()
        for _ in range(1000):
            _, state = compute(state, 1.0, 0.0, self.gains)
        assert state.integral == pytest.approx(1000.0)

    def test_integral_limit(self):
        """Test the optional integral clamp bounds windup."""
        gains = PidGains(kp=2.0, ki=0.1, kd=1.0, integral_limit=5.0)
        state = PidState()
        for _ in range(100):
            _, state = compute(state, 1.0, 0.0, gains)
        assert state.integral == 5.0

        for _ in range(100):
            _, state = compute(state, 0.0, 1.0, gains)
        assert state.integral == -5.0


class TestPidReset:
    """Test regulator reset."""

    def test_reset_clears_state(self):
        """Test reset returns zeroed memory."""
        assert reset() == PidState(previous_error=0.0, integral=0.0)

    def test_reset_idempotent(self):
        """Test resetting twice equals resetting once."""
        regulator = PidRegulator(PidGains())
        assert regulator.reset() == regulator.reset() == reset()

    def test_regulator_uses_bound_gains(self):
        """Test PidRegulator.compute matches the module function."""
        gains = PidGains(kp=3.0, ki=0.0, kd=0.0)
        regulator = PidRegulator(gains)
        assert regulator.compute(PidState(), 1.0, 0.5) == compute(PidState(), 1.0, 0.5, gains)
