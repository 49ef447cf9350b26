"""A simple logger for the lfadstools package."""

import logging
import pathlib
import time
from contextlib import ContextDecorator
from typing import Optional, Self

from rich.console import Console


class Timer(ContextDecorator):
    """A simple timer class to time the execution of a block of code."""

    def __init__(self: Self, console: Console, message: str) -> None:
        """Initialize the timer."""
        self.console = console
        self.message = message

    def __enter__(self: Self) -> Self:
        """Start the timer."""
        self.start_time = time.time()
        return self

    def __exit__(
        self: Self, exc_type: None, exc_value: None, traceback: None
    ) -> None:
        """Stop the timer and log the elapsed time."""
        self.elapsed = time.time() - self.start_time
        msg = (
            f"[bold]Timing:[/bold] {self.message} - "
            f"[bold green]Execution time:[/bold green] {self.elapsed:.4f} "
            "seconds"
        )
        self.console.log(msg)

        if exc_type is not None:
            self.console.log(
                f"[bold red]Exception:[/bold red] {exc_type.__name__}: "
                f"{exc_value}"
            )


def make_logger(
    name: str, logfile: Optional[pathlib.Path] = None
) -> logging.Logger:
    """Create a logger for the lfadstools package.

    Parameters
    ----------
    - `name` : `str`
        Name of the logger, usually the `__name__` of the calling module.
    - `logfile` : `Optional[pathlib.Path]`
        If given, log records are additionally written to this file.

    Returns
    -------
    - `logging.Logger`
        The configured logger. Calling this twice with the same name does
        not add duplicate handlers.
    """
    file_formatter = logging.Formatter(
        "[ %(levelname)s ] ~ %(asctime)s ~ %(module)s.%(funcName)s: %(message)s"  # noqa
    )
    console_formatter = logging.Formatter(
        "[ %(levelname)s ] in %(module)s.%(funcName)s: %(message)s"
    )

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    if not any(
        type(h) is logging.StreamHandler for h in logger.handlers
    ):
        # create stream handler for terminal output
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(logging.INFO)
        logger.addHandler(console_handler)

    if logfile is not None:
        # create stream handler for file output
        file_handler = logging.FileHandler(logfile)
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logging.INFO)
        logger.addHandler(file_handler)

    return logger
