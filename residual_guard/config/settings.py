"""Settings for guarded residual evaluation.

Settings can be built in code, from a mapping, or loaded from a YAML/JSON
file. In a file the settings may sit at the top level or under a
``residual_guard:`` section, so they can share a solver's config file::

    residual_guard:
      strict: true
      full_listing_threshold: 20
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from residual_guard.exceptions import ConfigurationError
from residual_guard.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

SECTION_NAME = "residual_guard"
STRICT_ENV_VAR = "RESIDUAL_GUARD_STRICT"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class GuardConfig:
    """Configuration for evaluation checking and reporting.

    Attributes
    ----------
    enabled : bool
        Whether evaluations are validated at all. Default: True.
    strict : bool
        Raise ``InvalidEvaluationError`` on an invalid evaluation instead of
        logging a warning and reporting failure. Default: False.
    full_listing_threshold : int
        Arrays with fewer entries than this are listed in full in error
        reports; longer arrays only list their bad entries. Default: 50.
    include_full_dump : bool
        Append the full evaluation dump to logged failures. Default: True.
    log_level : str
        Level applied to the package logger by :meth:`apply_logging`.
        Default: "INFO".
    """

    enabled: bool = True
    strict: bool = False
    full_listing_threshold: int = 50
    include_full_dump: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check types and ranges; raise ConfigurationError on bad values."""
        for name in ("enabled", "strict", "include_full_dump"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(
                    f"{name} must be a boolean, got {getattr(self, name)!r}",
                    error_context={"field": name},
                )
        threshold = self.full_listing_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
            raise ConfigurationError(
                f"full_listing_threshold must be a non-negative integer, got {threshold!r}",
                error_context={"field": "full_listing_threshold"},
            )
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {_LOG_LEVELS}, got {self.log_level!r}",
                error_context={"field": "log_level"},
            )
        self.log_level = str(self.log_level).upper()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> GuardConfig:
        """Create a config from a mapping, ignoring unknown keys with a warning."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        if SECTION_NAME in data and isinstance(data[SECTION_NAME], dict):
            data = data[SECTION_NAME]

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown residual_guard settings: {unknown}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def apply_env_overrides(self) -> GuardConfig:
        """Apply ``RESIDUAL_GUARD_STRICT`` when set; returns self."""
        value = os.environ.get(STRICT_ENV_VAR)
        if value is None:
            return self
        normalized = value.strip().lower()
        if normalized in ("1", "true", "yes", "on"):
            self.strict = True
        elif normalized in ("0", "false", "no", "off"):
            self.strict = False
        else:
            raise ConfigurationError(
                f"{STRICT_ENV_VAR} must be true or false, got {value!r}"
            )
        logger.debug(f"strict mode set to {self.strict} from {STRICT_ENV_VAR}")
        return self

    def apply_logging(self) -> None:
        """Set the package logger level to ``log_level``."""
        configure_logging(self.log_level)


def load_config(config_file: str | Path) -> GuardConfig:
    """Load settings from a YAML or JSON file.

    Parameters
    ----------
    config_file : str or Path
        Path to the configuration file. ``.json`` files are parsed as JSON,
        everything else as YAML.

    Returns
    -------
    GuardConfig
        Parsed settings with environment overrides applied

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ConfigurationError
        If the file cannot be parsed or holds invalid values
    """
    config_path = Path(config_file)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    try:
        with open(config_path, encoding="utf-8") as f:
            if config_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Could not parse configuration file {config_file}: {e}",
            error_context={"file": str(config_path)},
        ) from e

    config = GuardConfig.from_dict(data)
    logger.info(f"Configuration loaded from: {config_file}")
    return config.apply_env_overrides()
