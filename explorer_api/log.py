"""
Logging setup and color-coded console output for the API server.

Uses colorama for cross-platform terminal color support.
"""

import datetime
import logging
import sys

from colorama import Fore, Style, init

# Initialize colorama (auto-reset after each print)
init(autoreset=True)

LOG_FORMAT = "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class C:
    """Color shortcuts for console output."""
    HEADER = Fore.CYAN + Style.BRIGHT
    OK = Fore.GREEN + Style.BRIGHT
    DIM = Style.DIM
    RESET = Style.RESET_ALL


def _ts() -> str:
    return datetime.datetime.now().strftime("%H:%M:%S")


def header(msg: str) -> None:
    """Print a bold section header."""
    print(f"\n{C.HEADER}{'='*60}")
    print(f"  {msg}")
    print(f"{'='*60}{C.RESET}\n")


def info(msg: str) -> None:
    """Print an info message."""
    print(f"{C.DIM}[{_ts()}]{C.RESET} {msg}")


def ok(msg: str) -> None:
    """Print a success message."""
    print(f"{C.OK}[{_ts()}] OK {msg}{C.RESET}")


def setup_logging(level: str = "INFO", log_file: str = "") -> logging.Logger:
    """
    Configure the package logger: console always, plus a file when given.
    """
    logger = logging.getLogger("explorer_api")
    logger.setLevel(level.upper())

    # Prevent duplicate handlers on re-import
    if logger.handlers:
        return logger

    fmt = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger
