"""
Configuration management for EditSight
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

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
            return os.getenv(var_name, match.group(0))  # Keep original if not set
        return re.sub(pattern, replace_var, obj)
    else:
        return obj


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file. If None, uses the packaged config.yaml

    Returns:
        Configuration dictionary, layered over the defaults
    """
    config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return get_default_config()

    if not isinstance(config, dict):
        logger.error(f"Config file {config_path} does not contain a mapping. Using defaults.")
        return get_default_config()

    logger.info(f"Loaded configuration from {config_path}")
    return _deep_merge(get_default_config(), _expand_env_vars(config))


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration values

    Returns:
        Default configuration dictionary
    """
    return {
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'color': True,
        },
        'engine': {
            'clarity_min_factor': 0.01,
        },
        'scheduler': {
            'debounce_seconds': 0.3,
            'max_workers': 1,
        },
        'history': {
            'max_snapshots': None,  # Unlimited
        },
        'export': {
            'width': 1350,
            'height': 1080,
            'format': 'PNG',
            'filename_prefix': 'editsight-edit',
        },
        'upload': {
            'max_file_size_mb': 20,
            'supported_formats': ['JPEG', 'PNG', 'WEBP', 'HEIF'],
        },
    }


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> bool:
    """
    Save configuration to YAML file

    Args:
        config: Configuration dictionary to save
        config_path: Path where to save the config

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False, indent=2)
        logger.info(f"Saved configuration to {config_path}")
        return True
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save config to {config_path}: {e}")
        return False


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation

    Args:
        config: Configuration dictionary
        key_path: Dot-separated key path (e.g., 'export.width')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    value = config
    for key in key_path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
