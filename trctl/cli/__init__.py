"""Command-line interface for trctl.

Provides the ``trctl`` command and the directive table it understands.
"""

from __future__ import annotations

from trctl.cli.directives import OPTIONS, Directive, DirectiveRunner, tokenize
from trctl.cli.main import cli, main

__all__ = [
    "OPTIONS",
    "Directive",
    "DirectiveRunner",
    "cli",
    "main",
    "tokenize",
]
