from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List

import yaml

from jsonsync.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path("jsonsync.config.yaml")

DEFAULT_SERVER_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_USER_AGENT = "jsonsync/0.1"

BASE_RESOURCE_DEFAULTS: Dict[str, Any] = {
    "page_size": 10,
}

# Keys of a resource entry that describe the endpoint, not the synchronizer
ENDPOINT_KEYS = ("path",)


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load and validate the jsonsync YAML config.

    Args:
        path: Optional path to the config file. Defaults to jsonsync.config.yaml

    Returns:
        Dictionary with the parsed config

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ConfigurationError: If the file doesn't have the expected structure
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    validate_config(config)
    return config


def validate_config(config: Any) -> None:
    if not isinstance(config, dict):
        raise ConfigurationError("Config must be a dictionary")
    if "version" not in config:
        raise ConfigurationError("Config must have 'version' field")

    server = config.get("server") or {}
    if not isinstance(server, dict):
        raise ConfigurationError("'server' must be a dictionary")

    defaults = config.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigurationError("'defaults' must be a dictionary")

    resources = config.get("resources") or {}
    if not isinstance(resources, dict):
        raise ConfigurationError("'resources' must be a mapping of name to options")
    for name, options in resources.items():
        if options is None:
            continue
        if not isinstance(options, dict):
            raise ConfigurationError(f"Resource '{name}' must be a dictionary")
        page_size = options.get("page_size")
        if page_size is not None and (not isinstance(page_size, int) or page_size <= 0):
            raise ConfigurationError(f"Resource '{name}' has invalid page_size: {page_size}")


def get_server_settings(config: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Return the server block with built-in fallbacks applied."""
    server = (config or {}).get("server") or {}
    return {
        "url": server.get("url") or DEFAULT_SERVER_URL,
        "timeout_seconds": server.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
        "user_agent": server.get("user_agent") or DEFAULT_USER_AGENT,
    }


def list_resources(config: Dict[str, Any] | None = None) -> List[str]:
    return sorted(((config or {}).get("resources") or {}).keys())


def get_resource_path(config: Dict[str, Any] | None, name: str) -> str:
    """Resolve the URL path of a named resource; the name doubles as the path."""
    options = ((config or {}).get("resources") or {}).get(name) or {}
    return options.get("path") or name


def get_resource_options(config: Dict[str, Any] | None, name: str) -> Dict[str, Any]:
    """
    Get synchronizer options for a resource, merged over ``defaults``.

    Args:
        config: Parsed config dict (may be None)
        name: Resource name as listed under ``resources``

    Returns:
        Options dict suitable for ``ResourceSynchronizer``
    """
    config = config or {}
    merged: Dict[str, Any] = {
        **BASE_RESOURCE_DEFAULTS,
        **deepcopy(config.get("defaults") or {}),
    }
    resource = deepcopy((config.get("resources") or {}).get(name) or {})
    for key in ENDPOINT_KEYS:
        resource.pop(key, None)
    merged.update(resource)
    return merged
