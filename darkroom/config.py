"""
Configuration management for Darkroom
"""

import yaml
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

from .processing.local_adjustments.models import EditSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def _expand_env_vars(obj: Union[Dict, Any]) -> Union[Dict, Any]:
    """
    Recursively expand environment variables in config values.
    Supports ${VAR_NAME} syntax.
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        pattern = r'\$\{([^}]+)\}'
        def replace_var(match):
            var_name = match.group(1)
            return os.getenv(var_name, match.group(0))  # Return original if not found
        return re.sub(pattern, replace_var, obj)
    else:
        return obj


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file. If None, uses default config.yaml

    Returns:
        Configuration dictionary, missing keys filled from the defaults
    """
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        config = _expand_env_vars(config)
        return _merge(get_default_config(), config)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return get_default_config()


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration values

    Returns:
        Default configuration dictionary
    """
    return {
        'pipeline': {
            'workers': 1,
            'band_height': None,
        },
        'preview': {
            'max_dimension': 1600,
            'overlay_color': [255, 0, 0],
            'overlay_alpha': 130,
        },
        'history': {
            'max_entries': 100,
        },
        'output': {
            'format': 'png',
            'quality': 95,
        },
        'logging': {
            'level': 'INFO',
            'color': True,
        },
    }


def load_edit_settings(settings_path: Union[str, Path]) -> EditSettings:
    """
    Read an edit settings file (YAML or JSON) into ``EditSettings``.

    Raises:
        ValueError: If the file does not hold a mapping
    """
    settings_path = Path(settings_path)
    with open(settings_path, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {settings_path} must contain a mapping")
    logger.debug(f"Loaded edit settings from {settings_path}")
    return EditSettings.from_dict(data)
