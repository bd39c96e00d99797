"""
Settings loading for the run rate report.

Values come from an optional YAML file; SLACK_WEBHOOK_URL from the
environment always wins over the file.
"""

from __future__ import annotations

import math
import os
import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml
import logging

from ..errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/settings.yml"

REPORT_MODES = ("run-rate", "daily", "monthly")


@dataclass(frozen=True)
class Settings:
    webhook_url: str = ""
    title: str = "AWS Run Rate"
    timeout_seconds: Optional[float] = None
    max_chars: int = 2900
    profile: Optional[str] = None
    region: str = "us-east-1"
    page_size: int = 20
    metric: str = "AmortizedCost"
    mode: str = "run-rate"


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")
    return value


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{name} must be > 0, got {number}")
    return number


def _timeout(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"slack.timeout_seconds must be a number, got {value!r}") from exc
    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigError(f"slack.timeout_seconds must be a positive number, got {value!r}")
    return seconds


def read_config_file(path: str, required: bool = False) -> Dict[str, Any]:
    """Load a YAML configuration file into a dict."""
    config_path = pathlib.Path(path)
    if not config_path.exists():
        if required:
            raise ConfigError(f"Configuration file not found: {path}")
        logger.debug(f"No configuration file at {path}, using defaults")
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    return data


def settings_from_dict(data: Dict[str, Any], env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from parsed YAML, applying environment overrides."""
    env = os.environ if env is None else env
    defaults = Settings()

    slack = _section(data, "slack")
    aws = _section(data, "aws")
    report = _section(data, "report")

    webhook_url = env.get("SLACK_WEBHOOK_URL")
    if webhook_url is None:
        webhook_url = str(slack.get("webhook_url") or "")

    mode = str(report.get("mode") or defaults.mode).strip().lower()
    if mode not in REPORT_MODES:
        raise ConfigError(f"report.mode must be one of {', '.join(REPORT_MODES)}, got {mode!r}")

    profile = aws.get("profile")

    return Settings(
        webhook_url=webhook_url,
        title=str(slack.get("title") or defaults.title),
        timeout_seconds=_timeout(slack.get("timeout_seconds")),
        max_chars=_positive_int(slack.get("max_chars", defaults.max_chars), "slack.max_chars"),
        profile=str(profile) if profile else None,
        region=str(aws.get("region") or defaults.region),
        page_size=_positive_int(aws.get("page_size", defaults.page_size), "aws.page_size"),
        metric=str(aws.get("metric") or defaults.metric),
        mode=mode,
    )


def load_settings(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    """Resolve settings once at process start.

    The default path is optional; a path given explicitly must exist.
    """
    required = path is not None
    data = read_config_file(path or DEFAULT_CONFIG_PATH, required=required)
    return settings_from_dict(data, env)
