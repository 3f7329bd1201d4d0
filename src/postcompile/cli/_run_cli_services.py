# SPDX-License-Identifier: MIT
"""Helper services used by the ``run`` and ``classpath`` CLI commands."""

from __future__ import annotations

from ..classpath import assemble_classpath
from ..config import ConfigError, ConfigLoadResult, load_config
from ..errors import Failed, InvocationOutcome, PostCompileFailure
from ..models import ClasspathEntries
from ..runner import run_post_compile
from ._run_cli_models import RunCLIOptions
from .shared import CLIError, CLILogger


def load_options_config(options: RunCLIOptions, *, logger: CLILogger) -> ConfigLoadResult:
    """Load configuration for ``options``, reporting errors through ``logger``.

    Raises:
        CLIError: Raised when the configuration cannot be loaded.
    """

    try:
        result = load_config(options.root, config_path=options.config_path, overrides=options.overrides())
    except ConfigError as exc:
        logger.fail(str(exc))
        raise CLIError(str(exc), exit_code=2) from exc
    for source in result.sources:
        logger.debug(f"config source={source!r}")
    return result


def perform_run(options: RunCLIOptions, *, logger: CLILogger) -> InvocationOutcome:
    """Run the configured units for ``options`` and return the outcome."""

    loaded = load_options_config(options, logger=logger)
    config = loaded.config
    return run_post_compile(config.project_context(), config, logger=logger)


def perform_classpath(options: RunCLIOptions, *, logger: CLILogger) -> ClasspathEntries:
    """Return the classpath assembled for ``options`` without running units.

    Raises:
        CLIError: Raised when the classpath cannot be assembled.
    """

    config = load_options_config(options, logger=logger).config
    entries = assemble_classpath(config.project_context(), config.additional_resources, logger=logger)
    if isinstance(entries, PostCompileFailure):
        report_failure(entries, logger=logger)
        raise CLIError(entries.message, exit_code=entries.kind.exit_code)
    return entries


def report_failure(failure: PostCompileFailure, *, logger: CLILogger) -> None:
    """Render ``failure`` with its stage, subject, and cause."""

    logger.fail(failure.describe())
    if failure.classpath:
        logger.debug(f"classpath entries={len(failure.classpath)}")
        for entry in failure.classpath:
            logger.debug(f"  {entry.location}")


def emit_run_summary(outcome: InvocationOutcome, *, logger: CLILogger) -> int:
    """Report ``outcome`` and return the process exit status."""

    if isinstance(outcome, Failed):
        if outcome.executed:
            logger.warn(f"Completed before failure: {', '.join(outcome.executed)}")
        report_failure(outcome.failure, logger=logger)
        return outcome.failure.kind.exit_code
    for class_name in outcome.executed:
        logger.info(f"Completed {class_name}")
    logger.ok(f"Ran {len(outcome.executed)} execution classes")
    return 0


__all__ = [
    "emit_run_summary",
    "load_options_config",
    "perform_classpath",
    "perform_run",
    "report_failure",
]
