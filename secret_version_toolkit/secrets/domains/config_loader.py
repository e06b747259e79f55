"""Configuration loader for secret-version-toolkit."""
import os
import logging
from pathlib import Path
from typing import Dict, Any
import yaml

from .preferences import get_preference

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("aws", "gcp")


class ConfigError(Exception):
    """Configuration error exception."""
    pass


class ConfigNotFoundError(ConfigError):
    """No config file exists at the preferred or default location."""
    pass


def default_config_path() -> Path:
    """Default config location, resolved against the current home directory."""
    return Path.home() / ".config" / "secret-version-toolkit" / "config.yml"


def _get_config_path() -> str:
    """
    Locate the config file.

    Priority order:
    1. ``config_path`` preference (set with ``secretver config set-path``)
    2. ~/.config/secret-version-toolkit/config.yml

    Returns:
        Absolute path to config file

    Raises:
        ConfigNotFoundError: If no config file exists in either location
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise ConfigNotFoundError(
        "Configuration file not found. Either create one:\n\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "or point to an existing file:\n"
        "   secretver config set-path /path/to/your/config.yml\n\n"
        "Environment variables (SECRET_STORE_BACKEND, AWS_REGION, GCP_PROJECT) "
        "can be used instead of a config file."
    )


def _validate_authentication(auth: Any, config_path: str) -> None:
    if not isinstance(auth, dict):
        raise ConfigError(f"'authentication' in {config_path} must be a mapping")

    if auth.get('type') != 'service_account':
        raise ConfigError(
            f"Unsupported authentication type: {auth.get('type')}\n"
            f"Only 'service_account' is supported."
        )

    service_account_path = auth.get('service_account_path')
    if not service_account_path:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )

    if not os.path.isfile(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML file.

    Returns:
        Dict containing configuration with keys:
        - backend: "aws" or "gcp" (defaults to "aws")
        - aws: optional dict with region and profile
        - gcp: optional dict with project_id
        - authentication: optional dict with type and service_account_path

    Backend settings (aws.region, gcp.project_id) are only type-checked here.
    Whether they are required depends on the environment overrides, so the
    store clients check them when they are built.

    Raises:
        ConfigNotFoundError: If no config file exists
        ConfigError: If the config file is unreadable or invalid
    """
    # Resolved on every call so preference changes apply immediately
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    backend = config.setdefault('backend', 'aws')
    if backend not in SUPPORTED_BACKENDS:
        raise ConfigError(
            f"Unsupported backend: {backend}\n"
            f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
        )

    for section, required_key in (('aws', 'region'), ('gcp', 'project_id')):
        if section in config and not isinstance(config[section], dict):
            raise ConfigError(
                f"'{section}' in config at {config_path} must be a mapping\n"
                f"Required format:\n"
                f"{section}:\n"
                f"  {required_key}: ..."
            )

    if 'authentication' in config:
        _validate_authentication(config['authentication'], config_path)

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using backend: {backend}")

    return config
