"""
Logging utilities for formula-terms.

Loggers are thin wrappers over the standard library that take their levels
and handlers from the package configuration and append ``key=value`` context
to every message, e.g. ``Built term set | terms=3 | intercept=True``.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union
from ..config.settings import get_default_config, LogLevel


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelname)
        if color is None:
            return super().format(record)
        # records are shared between handlers, so color a copy
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


class FormulaTermsLogger:
    """
    Logger with configuration-driven handlers and bound context.

    Use :func:`get_logger` rather than instantiating this directly.
    """

    def __init__(
        self,
        name: str,
        config=None,
        context: Optional[Dict[str, Any]] = None,
        parent: Optional["FormulaTermsLogger"] = None,
    ):
        self.name = name
        self._config = config
        self._parent = parent
        self.context = dict(context or {})
        self.logger = logging.getLogger(name)
        self._settings: Optional[Dict[str, Any]] = None

    @property
    def config(self):
        return self._config or get_default_config()

    def bind(self, **context) -> "FormulaTermsLogger":
        """A logger for the same channel that adds ``context`` to each message."""
        return FormulaTermsLogger(
            self.name, self._config, {**self.context, **context}, parent=self._parent or self
        )

    def _ensure_configured(self):
        if self._parent is not None:
            self._parent._ensure_configured()
            return
        # reconfigure whenever the logging settings changed since last time
        settings = self.config.logging
        snapshot = settings.model_dump()
        if snapshot != self._settings:
            self._configure(settings)
            self._settings = snapshot

    def _configure(self, settings):
        level = settings.level.value if isinstance(settings.level, LogLevel) else settings.level
        self.logger.setLevel(level.upper())

        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if settings.console_logging:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(ColoredFormatter(settings.format_string))
            self.logger.addHandler(console)

        if settings.file_logging and settings.log_file:
            log_file = Path(settings.log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(logging.Formatter(settings.format_string))
            self.logger.addHandler(file_handler)

        # handlers live here; the root logger would print twice
        self.logger.propagate = False

    def _log(self, level: int, message: str, context: Dict[str, Any]):
        self._ensure_configured()
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._format_message(message, **context))

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def _format_message(self, message: str, **kwargs) -> str:
        """Append bound and per-call context as ``key=value`` pairs."""
        context = {**self.context, **kwargs}
        if not context:
            return message
        pairs = " | ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} | {pairs}"


_loggers: Dict[str, FormulaTermsLogger] = {}


def get_logger(name: str = "formula_terms") -> FormulaTermsLogger:
    """
    Get the shared logger for ``name``.

    Args:
        name: Logger name, usually the calling module's ``__name__``

    Returns:
        Logger configured from the package configuration on first use
    """
    if name not in _loggers:
        _loggers[name] = FormulaTermsLogger(name)
    return _loggers[name]


def setup_logging(
    level: Optional[Union[str, LogLevel]] = None,
    console: Optional[bool] = None,
    file_path: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Change the logging settings of the default configuration.

    Every logger picks the new settings up on its next message.

    Args:
        level: Level name (case-insensitive) or LogLevel
        console: Enable console logging
        file_path: Also log to this file
        format_string: ``logging`` format string for all handlers
    """
    updates: Dict[str, Any] = {}
    if level is not None:
        updates["logging.level"] = level.upper() if isinstance(level, str) else level
    if console is not None:
        updates["logging.console_logging"] = console
    if file_path is not None:
        updates["logging.log_file"] = Path(file_path)
        updates["logging.file_logging"] = True
    if format_string is not None:
        updates["logging.format_string"] = format_string

    get_default_config().update(**updates)
