"""Command-line configuration and logging setup for sysview."""

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from textual.logging import TextualHandler

from sysview.history import MAX_LEN

DEFAULT_INTERVAL = 0.5
MIN_INTERVAL = 0.1
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Runtime settings for one monitoring session."""

    interval: float = DEFAULT_INTERVAL  # Seconds between snapshots
    history_len: int = MAX_LEN
    start_paused: bool = False
    log_file: str | None = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        # Frozen dataclass, so clamp through object.__setattr__
        object.__setattr__(self, "interval", max(MIN_INTERVAL, self.interval))
        object.__setattr__(self, "history_len", max(1, self.history_len))


def parse_args(argv: Sequence[str] | None = None) -> MonitorConfig:
    ap = argparse.ArgumentParser(prog="sysview", description="sysview - live process monitor")
    ap.add_argument(
        "-i",
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL,
        help=f"seconds between snapshots (min {MIN_INTERVAL})",
    )
    ap.add_argument("--history", type=int, default=MAX_LEN, help="samples kept per metric")
    ap.add_argument("--paused", action="store_true", help="start with sampling paused")
    ap.add_argument("--log-file", default=None, help="write log records to this file")
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = ap.parse_args(argv)
    return MonitorConfig(
        interval=args.interval,
        history_len=args.history,
        start_paused=args.paused,
        log_file=args.log_file,
        log_level=args.log_level,
    )


def configure_logging(config: MonitorConfig) -> None:
    """
    Route log records to a file, or to the Textual devtools console.

    Writing to stderr would corrupt the TUI, so there is no stream handler.
    """
    handler: logging.Handler
    if config.log_file:
        handler = logging.FileHandler(config.log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = TextualHandler()

    logger = logging.getLogger("sysview")
    logger.setLevel(config.log_level)
    for old in logger.handlers[:]:
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
