from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

from dynaconf import Dynaconf
import yaml

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    'solver': {
        'method': 'auto',            # auto | lu | triangular
        'initial_capacity': 8,       # routers reserved before the first growth
        'growth': 'doubling',        # doubling | exact
        'zero_flow': 1.0e-12,        # m³/d, total flow below which a mix point is empty
        'residual_tolerance': 1.0e-6,
    },
    'balance': {
        'tolerance_percent': 1.0,
    },
}


def default_config(**overrides: Any) -> Dynaconf:
    """
    Build a configuration from the built-in defaults.

    Args:
        overrides: Sections to merge over the defaults, e.g.
            default_config(solver={'method': 'lu'})

    Returns:
        Dynaconf: Configuration object
    """
    settings = deepcopy(DEFAULT_SETTINGS)
    _deep_merge(settings, overrides)
    return Dynaconf(settings_files=False, **settings)


def load_config(config_path: str | Path, env: str = "default", base_config: str = "config.yaml") -> Dynaconf:
    """
    Load configuration from YAML file with optional environment selection.

    Args:
        config_path: Path to configuration directory
        env: Environment name in the YAML file
        base_config: Name of base config file

    Returns:
        Dynaconf: Configuration object with loaded settings, missing keys
        filled from the built-in defaults
    """
    base_dir = Path(config_path)

    with open(base_dir / base_config, 'r', encoding='utf-8') as f:
        yaml_config = yaml.safe_load(f) or {}

    # If the env exists in the base config, use it
    if env in yaml_config:
        base_settings = yaml_config.get("default", {})
        env_settings = yaml_config.get(env, {})
        _deep_merge(base_settings, env_settings)
        yaml_config = base_settings

    settings = deepcopy(DEFAULT_SETTINGS)
    _deep_merge(settings, yaml_config)
    return Dynaconf(settings_files=False, env=env, **settings)


def _deep_merge(base: dict, update: dict) -> None:
    """
    Recursively merge two dictionaries, modifying the base dictionary.

    Args:
        base: Base dictionary to update
        update: Dictionary with values to merge
    """
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
