"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. Explicit path passed to load_config()
2. ./uspscore.yaml or ./uspscore.yml (working directory)
3. ~/.uspscore/config.yaml (user home)

Environment variables override YAML: USPSCORE_<SECTION>_<KEY>.
${VAR} references in YAML values resolve from environment at load time.

Credentials are deliberately absent: the transport collaborator owns them.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from dateutil import tz
from pydantic import BaseModel, Field, field_validator

from src.services.usps_constants import (
    DEFAULT_ACCOUNT_TYPE,
    MAXIMUM_WEIGHT_LBS,
    AccountType,
)

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")
_ENV_PREFIX = "USPSCORE_"


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Args:
        value: String potentially containing ${VAR} references.

    Returns:
        String with all ${VAR} references replaced by their env values.
        Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class RatingConfig(BaseModel):
    """Rate extraction settings."""

    account_type: AccountType = DEFAULT_ACCOUNT_TYPE
    unrecognized_dimensions: Literal["unconstrained", "reject"] = "unconstrained"
    maximum_weight_lbs: float = Field(default=MAXIMUM_WEIGHT_LBS, gt=0)


class TrackingConfig(BaseModel):
    """Tracking parse settings."""

    default_timezone: str = "UTC"

    @field_validator("default_timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        """Reject zone names dateutil cannot resolve."""
        if tz.gettz(v) is None:
            raise ValueError(f"Unknown timezone: '{v}'")
        return v


class USPSCoreConfig(BaseModel):
    """Top-level configuration for the USPS response core."""

    rating: RatingConfig = RatingConfig()
    tracking: TrackingConfig = TrackingConfig()


def _find_config_file() -> Path | None:
    """Search for config file in standard locations."""
    candidates = [
        Path.cwd() / "uspscore.yaml",
        Path.cwd() / "uspscore.yml",
        Path.home() / ".uspscore" / "config.yaml",
        Path.home() / ".uspscore" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply USPSCORE_<SECTION>_<KEY> env var overrides to config data.

    For example, ``USPSCORE_RATING_ACCOUNT_TYPE`` maps to section
    ``rating``, field ``account_type``.

    Args:
        data: Parsed YAML config dict.

    Returns:
        Config dict with env var overrides applied.
    """
    known_sections = sorted(
        USPSCoreConfig.model_fields.keys(), key=len, reverse=True
    )
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        suffix = key[len(_ENV_PREFIX):].lower()
        matched_section = None
        matched_field = None
        for section in known_sections:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix):
                matched_section = section
                matched_field = suffix[len(section_prefix):]
                break
        if matched_section is None or not matched_field:
            continue
        section_data = data.setdefault(matched_section, {})
        if isinstance(section_data, dict):
            # Pydantic coerces numeric strings; only booleans need help
            if value.lower() in ("true", "false"):
                section_data[matched_field] = value.lower() == "true"
            else:
                section_data[matched_field] = value
    return data


def load_config(config_path: str | None = None) -> USPSCoreConfig | None:
    """Load configuration from YAML file with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, searches
            standard locations (cwd, then ~/.uspscore/).

    Returns:
        Parsed and validated USPSCoreConfig, or None if no config found.

    Raises:
        FileNotFoundError: If config_path is given and does not exist.
    """
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = _find_config_file()
        if path is None:
            return None

    logger.info("Loading config from %s", path)

    with open(path) as f:
        raw_data = yaml.safe_load(f) or {}

    data = _resolve_env_vars_recursive(raw_data)
    data = _apply_env_overrides(data)
    return USPSCoreConfig(**data)
