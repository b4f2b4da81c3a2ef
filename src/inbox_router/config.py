"""Configuration loader with environment overrides.

Configuration comes from an optional YAML file validated against the Pydantic
schema, with routing settings overridable through environment variables. The
routing snapshot is rebuilt on every call so a changed environment takes
effect without a restart.

Environment variables:
    INBOX_ROUTER_CONFIG_PATH: Path to config.yaml (default config/config.yaml)
    AI_ROUTING_ENABLED: "false" disables routing (frontier model for everything)
    AI_MODEL_LIGHT: Light-tier model ID
    AI_MODEL_FRONTIER: Frontier-tier model ID
    AI_MODEL_CLASSIFIER: Classifier model ID (defaults to the light model)
    AI_MODEL: Model for non-routed operations

Usage:
    from inbox_router.config import get_config, get_routing_config

    config = get_config()
    routing = get_routing_config()
"""

import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from inbox_router.config_schema import CURRENT_SCHEMA_VERSION, AppConfig, RoutingConfig
from inbox_router.core.errors import ConfigLoadError, ConfigValidationError
from inbox_router.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")
CONFIG_PATH_ENV = "INBOX_ROUTER_CONFIG_PATH"

# Environment variable -> RoutingConfig field
_MODEL_ENV_VARS: dict[str, str] = {
    "AI_MODEL_LIGHT": "light_model",
    "AI_MODEL_FRONTIER": "frontier_model",
    "AI_MODEL_CLASSIFIER": "classifier_model",
    "AI_MODEL": "default_model",
}
_ENABLED_ENV_VAR = "AI_ROUTING_ENABLED"

_config_lock = threading.Lock()
_current_config: AppConfig | None = None


def _get_config_path() -> tuple[Path, bool]:
    """Get the config file path and whether it was explicitly requested."""
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path), True
    return DEFAULT_CONFIG_PATH, False


def _format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors into actionable messages.

    Args:
        error: Pydantic ValidationError

    Returns:
        Formatted error message with specific field errors
    """
    messages = []
    for err in error.errors():
        field_path = ".".join(str(loc) for loc in err["loc"])
        msg = err["msg"]
        err_type = err["type"]

        if err_type == "missing":
            messages.append(f"  - Missing required field '{field_path}'")
        elif err_type == "string_type":
            messages.append(f"  - Field '{field_path}' must be a string")
        elif err_type in ("bool_type", "bool_parsing"):
            messages.append(f"  - Field '{field_path}' must be true or false")
        elif err_type in ("int_type", "int_parsing"):
            messages.append(f"  - Field '{field_path}' must be an integer")
        elif err_type == "extra_forbidden":
            messages.append(f"  - Unknown field '{field_path}'")
        else:
            messages.append(f"  - Field '{field_path}': {msg}")

    return "\n".join(messages)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Parsed YAML as dictionary

    Raises:
        ConfigLoadError: If file not found or YAML parse error
    """
    if not path.exists():
        raise ConfigLoadError(
            f"Configuration file not found: {path}\n"
            f"Create it or unset {CONFIG_PATH_ENV} to run with defaults."
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse YAML in {path}:\n{e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Configuration file must be a YAML mapping, got {type(data).__name__}"
        )
    return data


def _validate_config(data: dict[str, Any], source: str) -> AppConfig:
    """Validate config data against the Pydantic schema.

    Args:
        data: Parsed YAML data
        source: Where the data came from (for error messages)

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        config = AppConfig(**data)
    except ValidationError as e:
        error_details = _format_validation_errors(e)
        raise ConfigValidationError(
            f"Configuration validation failed for {source}:\n{error_details}"
        ) from e

    if config.schema_version > CURRENT_SCHEMA_VERSION:
        raise ConfigValidationError(
            f"Config schema version {config.schema_version} is newer than "
            f"supported version {CURRENT_SCHEMA_VERSION}. "
            "Please upgrade inbox-router or downgrade the config."
        )

    return config


def load_config(path: Path | None = None) -> AppConfig:
    """Load and validate configuration.

    An explicitly requested file (argument or INBOX_ROUTER_CONFIG_PATH) must
    exist. The default path is optional: when it is missing, defaults are used.

    Args:
        path: Optional path to config file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigLoadError: If file cannot be loaded
        ConfigValidationError: If validation fails
    """
    if path is not None:
        config_path, explicit = path, True
    else:
        config_path, explicit = _get_config_path()

    if not explicit and not config_path.exists():
        logger.debug("config_file_absent_using_defaults", path=str(config_path))
        return AppConfig()

    logger.debug("config_loading", path=str(config_path))
    data = _load_yaml(config_path)
    config = _validate_config(data, str(config_path))

    logger.info(
        "config_loaded",
        path=str(config_path),
        schema_version=config.schema_version,
        routing_enabled=config.routing.enabled,
    )
    return config


def get_config() -> AppConfig:
    """Get the configuration singleton, loading it on first use.

    Returns:
        Current AppConfig instance

    Raises:
        ConfigLoadError: If file cannot be loaded
        ConfigValidationError: If validation fails
    """
    global _current_config

    with _config_lock:
        if _current_config is None:
            _current_config = load_config()
        return _current_config


def apply_env_overrides(
    base: RoutingConfig,
    environ: Mapping[str, str] | None = None,
) -> RoutingConfig:
    """Layer AI_ROUTING_ENABLED / AI_MODEL_* environment values onto a RoutingConfig.

    Unset or empty variables leave the base value in place. Any value of
    AI_ROUTING_ENABLED other than "false" (case-insensitive) enables routing.

    Args:
        base: RoutingConfig from YAML (or defaults)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        A new, validated RoutingConfig

    Raises:
        ConfigValidationError: If the combined values fail validation
    """
    env = os.environ if environ is None else environ
    values = base.model_dump()

    enabled_raw = env.get(_ENABLED_ENV_VAR)
    if enabled_raw is not None and enabled_raw.strip():
        values["enabled"] = enabled_raw.strip().lower() != "false"

    for env_var, field_name in _MODEL_ENV_VARS.items():
        raw = env.get(env_var)
        if raw and raw.strip():
            values[field_name] = raw.strip()

    try:
        return RoutingConfig(**values)
    except ValidationError as e:
        raise ConfigValidationError(
            f"Routing environment overrides are invalid:\n{_format_validation_errors(e)}"
        ) from e


def get_routing_config() -> RoutingConfig:
    """Return a fresh routing snapshot: YAML routing section plus environment overrides."""
    return apply_env_overrides(get_config().routing)


def validate_config_file(path: Path | None = None) -> tuple[bool, str]:
    """Validate a config file without loading it into the singleton.

    Args:
        path: Path to config file. If not provided, uses default.

    Returns:
        Tuple of (is_valid, message)
    """
    try:
        config = load_config(path)
        routing = apply_env_overrides(config.routing)
    except ConfigLoadError as e:
        return (False, f"Load error: {e}")
    except ConfigValidationError as e:
        return (False, f"Validation error: {e}")

    return (
        True,
        f"Configuration valid (schema version {config.schema_version})\n"
        f"  - routing enabled: {routing.enabled}\n"
        f"  - light model: {routing.light_model}\n"
        f"  - frontier model: {routing.frontier_model}\n"
        f"  - classifier model: {routing.classifier_model_id}\n"
        f"  - default model: {routing.default_model}",
    )


def reset_config() -> None:
    """Reset the config singleton. Primarily for testing."""
    global _current_config
    with _config_lock:
        _current_config = None
