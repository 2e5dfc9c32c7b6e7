"""Helpers for CLI output and diagnostics on stderr."""

from __future__ import annotations

import logging
from enum import Enum

import typer
from rich.console import Console
from rich.logging import RichHandler

from .search import PreviewResult

LOGGER_NAME = "rgcache"


class OutputFormat(str, Enum):
    json = "json"
    lines = "lines"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Route rgcache logs to stderr through rich, keeping stdout for results."""

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger


def emit_result(result: PreviewResult, output_format: OutputFormat = OutputFormat.json) -> None:
    if output_format == OutputFormat.lines:
        for line in result.lines or ():
            typer.echo(line)
        return
    typer.echo(result.to_json())
