# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI commands running post-compile units and printing their classpath."""

from __future__ import annotations

from pathlib import Path

import typer

from ._run_cli_models import (
    ARTIFACT_OPTION,
    CONFIG_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    EXECUTION_CLASS_OPTION,
    NO_COLOR_OPTION,
    OUTPUT_DIR_OPTION,
    RESOURCE_OPTION,
    ROOT_OPTION,
    RunCLIOptions,
)
from ._run_cli_services import emit_run_summary, perform_classpath, perform_run
from .shared import CLIError, build_cli_logger


def run_command(
    root: ROOT_OPTION = Path("."),
    config: CONFIG_OPTION = None,
    execution_class: EXECUTION_CLASS_OPTION = None,
    resource: RESOURCE_OPTION = None,
    output_dir: OUTPUT_DIR_OPTION = None,
    artifact: ARTIFACT_OPTION = None,
    debug: DEBUG_OPTION = False,
    emoji: EMOJI_OPTION = True,
    no_color: NO_COLOR_OPTION = False,
) -> None:
    """Load the configured execution classes and run each one in order.

    Raises:
        typer.Exit: Always raised to terminate the command with an exit status.
    """

    options = RunCLIOptions.from_cli(
        root=root,
        config=config,
        execution_class=execution_class,
        resource=resource,
        output_dir=output_dir,
        artifact=artifact,
        debug=debug,
        emoji=emoji,
        no_color=no_color,
    )
    logger = build_cli_logger(emoji=options.emoji, debug=options.debug, no_color=options.no_color)
    logger.section("Post-compile units")
    try:
        outcome = perform_run(options, logger=logger)
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=emit_run_summary(outcome, logger=logger))


def classpath_command(
    root: ROOT_OPTION = Path("."),
    config: CONFIG_OPTION = None,
    resource: RESOURCE_OPTION = None,
    output_dir: OUTPUT_DIR_OPTION = None,
    artifact: ARTIFACT_OPTION = None,
    debug: DEBUG_OPTION = False,
    emoji: EMOJI_OPTION = True,
    no_color: NO_COLOR_OPTION = False,
) -> None:
    """Print the assembled classpath, one entry per line, without running units.

    Raises:
        typer.Exit: Raised with a non-zero status when assembly fails.
    """

    options = RunCLIOptions.from_cli(
        root=root,
        config=config,
        execution_class=None,
        resource=resource,
        output_dir=output_dir,
        artifact=artifact,
        debug=debug,
        emoji=emoji,
        no_color=no_color,
    )
    logger = build_cli_logger(emoji=options.emoji, debug=options.debug, no_color=options.no_color)
    try:
        entries = perform_classpath(options, logger=logger)
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc
    for entry in entries:
        logger.echo(entry.location)


def register(app: typer.Typer) -> None:
    """Register the ``run`` and ``classpath`` commands on ``app``."""

    app.command("run")(run_command)
    app.command("classpath")(classpath_command)


__all__ = ["classpath_command", "register", "run_command"]
