#!/usr/bin/env python3
"""
Reactor Monitor - Command Line Interface

Runs the control loop with console reporting. Hardware discovery is supplied
by the host integration; from the command line the monitor drives simulated
reactors with --demo.
"""

import argparse
import logging
import sys
import time
from contextlib import ExitStack
from typing import Callable, List, Optional

from rich.console import Console
from rich.logging import RichHandler

from reactor_monitor.config import load_config
from reactor_monitor.devices import SimulatedReactor, StaticDeviceProvider
from reactor_monitor.exceptions import ConfigurationError, NoReactorsFoundError, ReactorOverheatError
from reactor_monitor.orchestrator import ControlLoop
from reactor_monitor.sinks import (
    DisplayGroup,
    FileLogSink,
    LoggingAlertBroadcaster,
    LoggingBackupRelay,
    RichDisplay,
    TextDisplay,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 1
EXIT_OVERHEAT = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reactor-monitor",
        description="Closed-loop reactor safety controller",
    )
    parser.add_argument("--config", help="YAML configuration file (defaults to built-in settings)")
    parser.add_argument("--ticks", type=int, default=None, help="Stop after this many control cycles")
    parser.add_argument("--demo", type=int, default=0, metavar="N",
                        help="Control N simulated reactors")
    parser.add_argument("--speedup", type=float, default=1.0,
                        help="Divide the real sleep between cycles by this factor (demo only)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for simulated load noise")
    parser.add_argument("--no-display", action="store_true", help="Disable the status panel")
    parser.add_argument("--mirror", metavar="PATH",
                        help="Also write every frame to a fixed-size text monitor in this file")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return parser


def configure_logging(level: str, console: Console) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def build_demo_reactors(count: int, seed: Optional[int] = None) -> List[SimulatedReactor]:
    """Simulated reactors starting at staggered buffer levels"""
    reactors = []
    for i in range(count):
        capacity = 10_000_000.0
        reactors.append(SimulatedReactor(
            name=f"reactor_{i}",
            energy_stored=capacity * (0.3 + 0.2 * (i % 4)),
            energy_capacity=capacity,
            control_rod_level=50,
            noise_std_percent=2.0,
            noise_seed=None if seed is None else seed + i,
        ))
    return reactors


def make_demo_sleep(reactors: List[SimulatedReactor], speedup: float) -> Callable[[float], None]:
    """Sleep that advances the simulated reactors by the poll interval"""
    def _sleep(seconds: float) -> None:
        for reactor in reactors:
            reactor.advance(seconds)
        time.sleep(seconds / max(speedup, 1e-6))
    return _sleep


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console()
    configure_logging(args.log_level, console)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigurationError) as e:
        logger.error(str(e))
        return EXIT_STARTUP_FAILURE

    reactors = build_demo_reactors(args.demo, args.seed)
    sleep = make_demo_sleep(reactors, args.speedup) if reactors else time.sleep

    with ExitStack() as stack:
        displays = []
        if not args.no_display:
            displays.append(RichDisplay(console=console))
        if args.mirror:
            try:
                mirror = stack.enter_context(open(args.mirror, "w", encoding="utf-8"))
            except OSError as e:
                logger.error(f"Cannot open mirror display {args.mirror}: {e}")
                return EXIT_STARTUP_FAILURE
            displays.append(TextDisplay(stream=mirror))

        loop = ControlLoop(
            StaticDeviceProvider(reactors),
            config,
            display=DisplayGroup(displays),
            log_sink=FileLogSink(config.log_file_name),
            alert_broadcaster=LoggingAlertBroadcaster(),
            backup_relay=LoggingBackupRelay(config.backup_relay_line),
            sleep=sleep,
        )

        try:
            ticks = loop.run(max_ticks=args.ticks)
        except NoReactorsFoundError as e:
            logger.critical(f"{e} (use --demo N to run simulated reactors)")
            return EXIT_STARTUP_FAILURE
        except ReactorOverheatError as e:
            console.print(f"[bold red]{e}[/bold red]")
            return EXIT_OVERHEAT
        except KeyboardInterrupt:
            logger.info(f"Stopped by operator after {loop.tick_count} cycle(s)")
            return EXIT_OK

    logger.info(f"Completed {ticks} cycle(s)")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
