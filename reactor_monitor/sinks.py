"""
Reporting sinks consumed by the control loop.

Each collaborator is optional. When one is not attached the loop holds the
matching Null* object, so the control logic never checks for presence.
"""

import logging
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

logger = logging.getLogger(__name__)


class DisplaySink(ABC):
    """Operator display"""

    @abstractmethod
    def render(self, lines: Sequence[str]) -> None:
        """
        Replace the display contents

        Args:
            lines: Ordered lines; each is truncated to the display width and
                lines beyond the display height are dropped
        """
        pass


class LogSink(ABC):
    """Append-only per-reactor history"""

    @abstractmethod
    def append_record(self, timestamp: datetime, reactor_id: str,
                      energy_stored: float, fuel_temp: float) -> None:
        pass


class AlertBroadcaster(ABC):
    """Fire-and-forget remote alerting, used only on overheat"""

    @abstractmethod
    def broadcast(self, message: str, channel: str) -> None:
        pass


class BackupRelay(ABC):
    """Binary output that starts backup generation"""

    @abstractmethod
    def set_signal(self, active: bool) -> None:
        pass


class NullDisplay(DisplaySink):
    def render(self, lines: Sequence[str]) -> None:
        pass


class NullLogSink(LogSink):
    def append_record(self, timestamp: datetime, reactor_id: str,
                      energy_stored: float, fuel_temp: float) -> None:
        pass


class NullAlertBroadcaster(AlertBroadcaster):
    def broadcast(self, message: str, channel: str) -> None:
        pass


class NullBackupRelay(BackupRelay):
    def set_signal(self, active: bool) -> None:
        pass


def fit_frame(lines: Sequence[str], width: int, height: int) -> List[str]:
    """Truncate lines to width and drop those past height"""
    return [line[:width] for line in list(lines)[:height]]


class TextDisplay(DisplaySink):
    """Fixed-size character display written to a text stream"""

    def __init__(self, width: int = 39, height: int = 13, stream: Optional[TextIO] = None):
        self.width = width
        self.height = height
        self.stream = stream if stream is not None else sys.stdout
        self.last_frame: List[str] = []

    def render(self, lines: Sequence[str]) -> None:
        self.last_frame = fit_frame(lines, self.width, self.height)
        self.stream.write("\n".join(self.last_frame) + "\n")
        self.stream.flush()


class RichDisplay(DisplaySink):
    """Terminal panel display built on rich"""

    def __init__(self, width: int = 60, height: int = 40, console: Optional[Console] = None,
                 title: str = "Reactor Monitor"):
        self.width = width
        self.height = height
        self.console = console or Console()
        self.title = title

    def render(self, lines: Sequence[str]) -> None:
        body = Text("\n".join(fit_frame(lines, self.width, self.height)))
        self.console.print(Panel(body, title=self.title, width=self.width + 4))


class DisplayGroup(DisplaySink):
    """Mirrors every frame to all attached displays"""

    def __init__(self, displays: Sequence[DisplaySink]):
        self.displays = list(displays)

    def render(self, lines: Sequence[str]) -> None:
        for display in self.displays:
            display.render(lines)


class FileLogSink(LogSink):
    """Appends one formatted line per record to a text file"""

    def __init__(self, path: str):
        self.path = Path(path)

    def append_record(self, timestamp: datetime, reactor_id: str,
                      energy_stored: float, fuel_temp: float) -> None:
        line = (
            f"[{timestamp.strftime('%H:%M:%S')}] Reactor: {reactor_id} | "
            f"Energy: {int(energy_stored)} RF | Temp: {fuel_temp:.1f}°C\n"
        )
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.warning(f"Could not append to {self.path}: {e}")


class LoggingAlertBroadcaster(AlertBroadcaster):
    """Delivers alerts as critical log records"""

    def __init__(self, alert_logger: Optional[logging.Logger] = None):
        self.alert_logger = alert_logger or logging.getLogger("reactor_monitor.alerts")

    def broadcast(self, message: str, channel: str) -> None:
        self.alert_logger.critical(f"[{channel}] {message}")


class LoggingBackupRelay(BackupRelay):
    """Relay on a named output line that logs each transition"""

    def __init__(self, line: str = "right"):
        self.line = line
        self.active = False

    def set_signal(self, active: bool) -> None:
        active = bool(active)
        if active != self.active:
            logger.info(f"Backup relay on '{self.line}' {'energised' if active else 'released'}")
        self.active = active
