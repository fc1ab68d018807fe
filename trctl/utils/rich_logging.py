"""Rich logging integration for trctl.

Provides the Rich-based console handler and the plain file formatter.
Log output always goes to stderr: stdout carries presenter text only.
"""

from __future__ import annotations

import copy
import logging
import re
import sys
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape


class CorrelationRichHandler(RichHandler):
    """RichHandler that tags records with a correlation ID.

    The emitting function name is rendered in pink ahead of the message,
    and the RPC method name in a ``POST <method>`` line is colored cyan.
    """

    ACTION_PATTERN = re.compile(r"\b(POST|retry|flush(?:ing)?) ([\w-]+)")

    def _colorize_action_text(self, message: str) -> str:
        return self.ACTION_PATTERN.sub(
            r"\1 [bright_cyan]\2[/bright_cyan]",
            message,
        )

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a record with correlation ID and method-name coloring."""
        record = copy.copy(record)
        if not hasattr(record, "correlation_id"):
            from trctl.utils.logging_config import correlation_id

            record.correlation_id = correlation_id.get() or "no-correlation-id"

        message = self._colorize_action_text(escape(record.getMessage()))
        func_name = getattr(record, "funcName", None)
        if func_name and func_name != "<module>":
            message = f"[#ff69b4]{func_name}[/#ff69b4] {message}"
        record.msg = message
        record.args = ()
        super().emit(record)


def strip_rich_markup(text: str) -> str:
    """Strip Rich markup from text for file logging.

    Args:
        text: Text with Rich markup

    Returns:
        Text without Rich markup

    """
    return re.sub(r"\[/?[#\w ]+\]", "", text)


class FileFormatter(logging.Formatter):
    """Formatter for file output that strips Rich markup."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, stripping Rich markup for file output."""
        return strip_rich_markup(super().format(record))


def create_rich_handler(
    console: Console | None = None,
    level: int | str = logging.WARNING,
    show_path: bool = False,
    rich_tracebacks: bool = True,
    **kwargs: Any,
) -> logging.Handler:
    """Create a RichHandler writing to stderr.

    Args:
        console: Optional Rich Console instance
        level: Log level
        show_path: Whether to show file paths in log output
        rich_tracebacks: Whether to use rich tracebacks
        **kwargs: Extra RichHandler options

    Returns:
        Configured RichHandler instance

    """
    if console is None:
        console = Console(file=sys.stderr, markup=True, legacy_windows=False)

    return CorrelationRichHandler(
        console=console,
        level=level,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        markup=True,
        **kwargs,
    )
