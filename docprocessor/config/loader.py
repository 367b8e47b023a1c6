"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml : static tuning defaults checked into the repo
  2. .env file          : local developer overrides (not committed)
  3. Environment vars   : set at deploy time

``load_config()`` reads the YAML file first, then deep-merges the
environment-derived values on top.
"""

from pathlib import Path

import yaml

from docprocessor.config.settings import Settings
from docprocessor.utils.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "config/config.yaml"


def load_config(path: str = DEFAULT_CONFIG_PATH, settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; a fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: The file is not valid YAML or is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                f"{config_path} must contain a mapping, not {type(yaml_config).__name__}"
            )
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "ai": {
            "provider": settings.ai_provider,
            "available_providers": settings.get_available_ai_providers(),
        },
        "pdf": {
            "ocr_enabled": settings.pdf_ocr_enabled,
        },
        "storage": {
            "database_path": settings.database_path,
            "upload_dir": settings.upload_dir,
            "max_upload_bytes": settings.max_upload_bytes,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
