"""
Configuration management system for formula-terms.

Provides a small hierarchical configuration with support for YAML files,
environment variables, and runtime updates.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from enum import Enum

from ..core.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CodingType(str, Enum):
    """Named contrast coding schemes."""
    DUMMY = "dummy"
    EFFECTS = "effects"
    HELMERT = "helmert"
    FULL_DUMMY = "full_dummy"
    CONTRASTS = "contrasts"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(validate_assignment=True, use_enum_values=True)

    level: LogLevel = LogLevel.INFO
    file_logging: bool = False
    log_file: Optional[Path] = None
    console_logging: bool = True
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @model_validator(mode="after")
    def default_log_file(self):
        if self.file_logging and self.log_file is None:
            # object.__setattr__ avoids re-entering assignment validation
            object.__setattr__(
                self, "log_file",
                Path.home() / ".formula_terms" / "logs" / "formula_terms.log"
            )
        return self


class ContrastsConfig(BaseModel):
    """Contrast coding configuration."""
    model_config = ConfigDict(validate_assignment=True, use_enum_values=True)

    default_coding: CodingType = CodingType.DUMMY


class FormulaTermsConfig(BaseModel):
    """Main configuration class for formula-terms."""

    model_config = ConfigDict(validate_assignment=True, use_enum_values=True)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    contrasts: ContrastsConfig = Field(default_factory=ContrastsConfig)

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **kwargs):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
            **kwargs: Override specific configuration values
        """
        config_data: Dict[str, Any] = {}
        if config_file:
            config_data = _load_config_file(config_file)

        _merge(config_data, _load_environment_variables())
        _merge(config_data, kwargs)

        try:
            super().__init__(**config_data)
        except ValidationError as e:
            raise ConfigurationError(reason=str(e)) from e

    def save_config(self, config_file: Union[str, Path]) -> None:
        """Save current configuration to YAML file."""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False, indent=2)

    def update(self, **kwargs) -> None:
        """
        Update configuration values.

        Nested values are addressed with a dotted key, e.g.
        ``update(**{"logging.level": "DEBUG"})``.
        """
        for key, value in kwargs.items():
            if '.' in key:
                section, subkey = key.split('.', 1)
                section_obj = getattr(self, section, None)
                if not isinstance(section_obj, BaseModel) or subkey not in type(section_obj).model_fields:
                    raise ConfigurationError(config_key=key, reason="unknown setting")
                target, name = section_obj, subkey
            elif key in type(self).model_fields:
                target, name = self, key
            else:
                raise ConfigurationError(config_key=key, reason="unknown setting")

            try:
                setattr(target, name, value)
            except ValidationError as e:
                raise ConfigurationError(config_key=key, reason=str(e)) from e

    def get_user_config_path(self) -> Path:
        """Get the user's configuration file path."""
        return Path.home() / ".formula_terms" / "config.yaml"

    def load_user_config(self) -> None:
        """Load user's configuration file if it exists."""
        user_config = self.get_user_config_path()
        if user_config.exists():
            config_data = _load_config_file(user_config)
            for section, values in config_data.items():
                if not isinstance(values, dict):
                    raise ConfigurationError(config_key=section, reason="expected a mapping")
                self.update(**{f"{section}.{key}": value for key, value in values.items()})


def _load_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path(config_file)
    if not config_path.exists():
        raise ConfigurationError(reason=f"configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(reason=f"could not parse {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(reason=f"top level of {config_path} must be a mapping")
    return data


def _load_environment_variables() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    config: Dict[str, Any] = {}

    env_mappings = {
        'FORMULA_TERMS_LOG_LEVEL': ('logging', 'level'),
        'FORMULA_TERMS_DEFAULT_CODING': ('contrasts', 'default_coding'),
    }

    for env_var, (section, key) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            # level names are upper case, coding names lower case
            value = value.upper() if key == 'level' else value.lower()
            config.setdefault(section, {})[key] = value

    return config


def _merge(target: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``overrides`` into ``target`` one section deep."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key].update(value)
        else:
            target[key] = value
    return target


# Default configuration instance
_default_config: Optional[FormulaTermsConfig] = None

def get_default_config() -> FormulaTermsConfig:
    """Get the default configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = FormulaTermsConfig()
        _default_config.load_user_config()
    return _default_config


def reset_config() -> None:
    """Discard the default configuration so it is rebuilt on next access."""
    global _default_config
    _default_config = None
