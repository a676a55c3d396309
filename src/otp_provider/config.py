"""Settings for the otp-provider command, read from disk and the environment."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir


APP_NAME = "otp-provider"
APP_AUTHOR = "otp-provider"
CONFIG_FILE = "config.json"

ENV_TIME_CORRECTION = "OTP_PROVIDER_TIME_CORRECTION"
ENV_LOG_LEVEL = "OTP_PROVIDER_LOG_LEVEL"


@dataclass
class Settings:
    time_correction_minutes: int = 0
    log_level: str = "WARNING"


def get_config_dir() -> Path:
    """
    Get the cross-platform directory holding the settings file.

    Returns:
        Path to the configuration directory.
    """
    return Path(user_config_dir(APP_NAME, APP_AUTHOR))


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILE


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config file format: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file format: expected an object in {path}")
    return data


def _parse_int(value: Any, source: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid integer for {source}: {value!r}") from e


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from the config file, then apply environment overrides.

    Args:
        path: Settings file (default: config.json in the user config dir).

    Returns:
        The resolved Settings.

    Raises:
        ValueError: If the file or an override holds an invalid value.
    """
    data = _read_config_file(path or get_config_path())
    settings = Settings()

    if "time_correction_minutes" in data:
        settings.time_correction_minutes = _parse_int(
            data["time_correction_minutes"], "time_correction_minutes"
        )
    if "log_level" in data:
        settings.log_level = str(data["log_level"]).upper()

    env_correction = os.environ.get(ENV_TIME_CORRECTION)
    if env_correction:
        settings.time_correction_minutes = _parse_int(env_correction, ENV_TIME_CORRECTION)
    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        settings.log_level = env_level.upper()

    return settings
