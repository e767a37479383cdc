"""TOML loader for provider configuration.

Reads ``strapi.toml`` into a ``ProviderConfig``.  Expected layout:

    [defaults]
    profile = "local"

    [headers]
    X-Tenant = "acme"

    [profiles.local]
    url = "http://localhost:1337/api"
    dialect = "modern"
    token = "[YOUR-TOKEN]"

    [profiles.legacy]
    url = "http://legacy.internal:1337"
    dialect = "legacy"
    count_endpoint = true
    native_get_many = true
"""

import tomllib
from pathlib import Path

from strapi_adapter.config.models import ProviderConfig, ProviderProfile

DEFAULT_CONFIG_FILE = "strapi.toml"


def load_provider_config(config_path: Path | str | None = None) -> ProviderConfig:
    """Load provider configuration from a TOML file.

    Args:
        config_path: Path to strapi.toml (default: ``./strapi.toml``).

    Returns:
        ProviderConfig with all profiles.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        pydantic.ValidationError: If a profile is malformed.
    """
    path = Path(config_path) if config_path is not None else Path.cwd() / DEFAULT_CONFIG_FILE

    if not path.exists():
        raise FileNotFoundError(
            f"Provider config not found: {path}\n"
            f"Create {DEFAULT_CONFIG_FILE} with at least one [profiles.<name>] table."
        )

    with open(path, "rb") as f:
        data = tomllib.load(f)

    profiles = {
        name: ProviderProfile(**profile_data)
        for name, profile_data in data.get("profiles", {}).items()
    }

    return ProviderConfig(
        profiles=profiles,
        default_profile=data.get("defaults", {}).get("profile"),
        headers=data.get("headers", {}),
    )
