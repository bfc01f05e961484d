"""Configuration loading and validation."""

import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from k8sdb.config.schema import K8sdbConfig


DEFAULT_CONFIG_PATH = Path.home() / ".k8sdb" / "k8sdb.yaml"

# Overrides DEFAULT_CONFIG_PATH when no explicit path is given
CONFIG_PATH_ENV = "K8SDB_CONFIG"


class ConfigError(Exception):
    """Configuration loading or validation error."""


def resolve_config_path(path: Optional[Union[str, Path]] = None) -> Path:
    """Pick the config file to use.

    Explicit path first, then the K8SDB_CONFIG environment variable,
    then ~/.k8sdb/k8sdb.yaml.
    """
    if path is not None:
        return Path(path).expanduser()

    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()

    return DEFAULT_CONFIG_PATH


def load_config(path: Optional[Union[str, Path]] = None) -> K8sdbConfig:
    """Load and validate k8sdb configuration from YAML file.

    Args:
        path: Path to config file. If None, uses K8SDB_CONFIG or the default
              location. If the file doesn't exist, returns default config.

    Returns:
        Validated configuration object

    Raises:
        ConfigError: If config file exists but is invalid
    """
    path = resolve_config_path(path)

    # Zero-config mode: every cluster setting has a default
    if not path.exists():
        return K8sdbConfig()

    try:
        with open(path, "r") as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            return K8sdbConfig()

        if not isinstance(config_data, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")

        return K8sdbConfig(**config_data)

    except ConfigError:
        raise
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def save_config(config: K8sdbConfig, path: Optional[Union[str, Path]] = None) -> Path:
    """Save configuration to YAML file.

    Args:
        config: Configuration object to save
        path: Destination path. If None, uses K8SDB_CONFIG or the default location.

    Returns:
        The path written to
    """
    path = resolve_config_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)

    return path
