"""Console utilities for Rich output.

Presenter text is written verbatim to stdout; warnings and errors go to a
separate stderr console with Rich markup.
"""

from __future__ import annotations

import sys
from typing import Any, TextIO

from rich.console import Console
from rich.markup import escape


def create_console(stderr: bool = False, file: TextIO | None = None) -> Console:
    """Create a Rich Console for stdout or stderr.

    The stdout console prints presenter text exactly: no markup parsing,
    no highlighting and no wrapping of long lines.
    """
    if stderr:
        return Console(
            file=file if file is not None else sys.stderr,
            legacy_windows=False,
            highlight=False,
            soft_wrap=True,
        )
    return Console(
        file=file if file is not None else sys.stdout,
        legacy_windows=False,
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def print_error(
    message: str,
    console: Console | None = None,
    **kwargs: Any,
) -> None:
    """Print an error message with Rich formatting.

    Args:
        message: Message to display (markup in it is escaped)
        console: Optional Rich Console instance, stderr by default
        **kwargs: Additional arguments for console.print()

    """
    if console is None:
        console = create_console(stderr=True)
    console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def print_warning(
    message: str,
    console: Console | None = None,
    **kwargs: Any,
) -> None:
    """Print a warning message with Rich formatting.

    Args:
        message: Message to display (markup in it is escaped)
        console: Optional Rich Console instance, stderr by default
        **kwargs: Additional arguments for console.print()

    """
    if console is None:
        console = create_console(stderr=True)
    console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def print_debug_block(
    title: str,
    body: str,
    console: Console | None = None,
) -> None:
    """Echo a raw request or response body, as the --debug flag does."""
    if console is None:
        console = create_console(stderr=True)
    console.print(
        f"{title}\n--------\n{body}\n--------",
        markup=False,
        highlight=False,
        soft_wrap=True,
    )
