# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

from . import run
from .typer_ext import create_typer

app = create_typer(
    name="postcompile",
    help="Run post-compile units against a project's built classpath.",
    no_args_is_help=True,
)
run.register(app)

__all__ = ["app"]
