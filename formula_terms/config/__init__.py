"""Configuration management for formula-terms."""

from .settings import (
    FormulaTermsConfig,
    LoggingConfig,
    ContrastsConfig,
    LogLevel,
    CodingType,
    get_default_config,
    reset_config,
)

__all__ = [
    "FormulaTermsConfig",
    "LoggingConfig",
    "ContrastsConfig",
    "LogLevel",
    "CodingType",
    "get_default_config",
    "reset_config",
]
