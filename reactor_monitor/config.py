"""
Reactor Monitor Configuration

Process-wide settings for the control loop: safety limits, energy buffer
thresholds, PID gains and reporting options. Settings are plain dataclasses
serialised with dataclass-wizard, so a deployment can keep them in a YAML
file instead of editing code.

The configuration is read once at startup and never mutated by the loop.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dataclass_wizard import YAMLWizard

from reactor_monitor.exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = "reactor_monitor_config.yaml"


@dataclass
class PidGains:
    """Gains for the control rod PID regulator"""
    kp: float = 2.0                              # Proportional gain
    ki: float = 0.1                              # Integral gain
    kd: float = 1.0                              # Derivative gain
    integral_limit: Optional[float] = None       # Clamp on the integral term (None = unbounded)

    def __post_init__(self):
        if self.integral_limit is not None and self.integral_limit < 0:
            raise ConfigurationError(f"integral_limit must be non-negative, got {self.integral_limit}")


@dataclass
class MonitorConfig(YAMLWizard):
    """
    Reactor monitor configuration

    Thresholds on the energy buffer are fractions of capacity (0-1).
    """

    # === SAFETY LIMITS ===
    max_temperature: float = 2000.0              # °C fuel temperature that forces shutdown

    # === CADENCE ===
    poll_interval: float = 5.0                   # s between control cycles

    # === ENERGY BUFFER ===
    backup_threshold: float = 0.1                # Below this the backup relay is energised
    overflow_threshold: float = 0.95             # Above this an active reactor is paused
    overflow_resume_margin: float = 0.1          # Resume once below threshold minus margin
    target_energy_fraction: float = 0.9          # PID setpoint

    # === PID ===
    pid: PidGains = field(default_factory=PidGains)

    # === REPORTING ===
    log_to_file: bool = True
    log_file_name: str = "reactor_log.txt"
    alert_channel: str = "reactorAlert"
    backup_relay_line: str = "right"

    def __post_init__(self):
        """Validate limits"""
        if self.max_temperature <= 0:
            raise ConfigurationError(f"max_temperature must be positive, got {self.max_temperature}")
        if self.poll_interval <= 0:
            raise ConfigurationError(f"poll_interval must be positive, got {self.poll_interval}")
        for name in ("backup_threshold", "overflow_threshold", "target_energy_fraction"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be within [0, 1], got {value}")
        if self.overflow_resume_margin < 0:
            raise ConfigurationError(
                f"overflow_resume_margin must be non-negative, got {self.overflow_resume_margin}"
            )

    @property
    def overflow_resume_level(self) -> float:
        """Energy fraction below which a paused reactor is restarted"""
        return self.overflow_threshold - self.overflow_resume_margin


def resolve_config_path(config_file: str) -> str:
    """
    Locate a configuration file

    Relative paths are tried against the package directory first and then
    the current working directory.

    Args:
        config_file: Absolute or relative path to a YAML file

    Returns:
        Absolute path of the existing file

    Raises:
        FileNotFoundError: If the file cannot be found
    """
    if not os.path.isabs(config_file):
        package_path = os.path.join(os.path.dirname(__file__), config_file)
        if os.path.exists(package_path):
            config_file = package_path
        else:
            config_file = os.path.abspath(config_file)

    if not os.path.exists(config_file):
        raise FileNotFoundError(f"Configuration file not found: {config_file}")
    return config_file


def load_config(config_file: Optional[str] = None) -> MonitorConfig:
    """
    Load the monitor configuration

    Args:
        config_file: Path to a YAML file, or None for built-in defaults

    Returns:
        Validated MonitorConfig

    Raises:
        FileNotFoundError: If the file cannot be found
        ConfigurationError: If the file cannot be parsed or fails validation
    """
    if config_file is None:
        return MonitorConfig()

    config_file = resolve_config_path(config_file)
    try:
        config = MonitorConfig.from_yaml_file(config_file)
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration from {config_file}: {e}") from e

    # An empty file parses to None rather than a config
    if not isinstance(config, MonitorConfig):
        raise ConfigurationError(f"Configuration file {config_file} does not contain a mapping")
    return config
