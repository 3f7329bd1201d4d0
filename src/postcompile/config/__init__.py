# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and layered loading for post-compile runs."""

from __future__ import annotations

from .loading import ConfigLoadResult, FieldUpdate, load_config
from .models import DEFAULT_OUTPUT_DIRECTORY, ConfigError, PostCompileConfig

__all__ = [
    "DEFAULT_OUTPUT_DIRECTORY",
    "ConfigError",
    "ConfigLoadResult",
    "FieldUpdate",
    "PostCompileConfig",
    "load_config",
]
