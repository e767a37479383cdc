"""Data provider factory.

Supports two configuration modes:
1. Profile mode (strapi.toml): named backend profiles selected by argument,
   ``<PREFIX>STRAPI_PROFILE`` env var, or ``[defaults] profile``.
2. Direct mode (``api_url=``): a single backend URL, no config file.
"""

import os
from pathlib import Path

from strapi_adapter.adapters.httpx_transport import CredentialProvider, HttpxTransport
from strapi_adapter.config.loader import load_provider_config
from strapi_adapter.config.models import ProviderConfig, ProviderProfile
from strapi_adapter.provider import StrapiDataProvider
from strapi_adapter.translation.dialects import Dialect, dialect_for

TOKEN_PLACEHOLDER = "[YOUR-TOKEN]"


class ProfileNotFoundError(Exception):
    """Raised when no provider profile is configured."""

    pass


# ============================================================================
# Profile Resolution
# ============================================================================


def get_active_profile_name(
    config: ProviderConfig,
    profile_name: str | None = None,
    env_prefix: str = "",
) -> str:
    """Get the active profile name.

    Priority:
    1. Explicit *profile_name*
    2. ``{env_prefix}STRAPI_PROFILE`` env var
    3. ``[defaults] profile`` in strapi.toml
    4. Raise ProfileNotFoundError

    Raises:
        ProfileNotFoundError: If no profile is configured or the name is
            not defined in the config.
    """
    name = (
        profile_name
        or os.environ.get(f"{env_prefix}STRAPI_PROFILE")
        or config.default_profile
    )
    if not name:
        raise ProfileNotFoundError(
            "No provider profile configured.\n"
            f"Set {env_prefix}STRAPI_PROFILE=<name> or [defaults] profile in strapi.toml.\n"
            f"Available profiles: {', '.join(config.profiles) or '(none)'}"
        )
    if name not in config.profiles:
        raise ProfileNotFoundError(
            f"Profile '{name}' not found in strapi.toml.\n"
            f"Available profiles: {', '.join(config.profiles)}"
        )
    return name


def resolve_token(profile: ProviderProfile) -> str | None:
    """Resolve the profile token with ``[YOUR-TOKEN]`` substitution."""
    token = profile.token
    if token and TOKEN_PLACEHOLDER in token:
        if not profile.api_token:
            return None
        token = token.replace(TOKEN_PLACEHOLDER, profile.api_token)
    return token


def resolve_dialect(profile: ProviderProfile) -> Dialect:
    """Pick the dialect preset for *profile* and apply its per-profile switches.

    ``count_endpoint`` adds the companion count request as a total source;
    ``native_get_many`` fetches get_many ids in one filtered list request.
    """
    dialect = dialect_for(profile.dialect)
    update: dict[str, object] = {}
    if profile.count_endpoint and "count" not in dialect.total_sources:
        update["total_sources"] = (*dialect.total_sources, "count")
    if profile.native_get_many:
        update["native_get_many"] = True
    return dialect.model_copy(update=update) if update else dialect


# ============================================================================
# Provider Factory
# ============================================================================


def get_provider(
    profile_name: str | None = None,
    *,
    config_path: Path | str | None = None,
    env_prefix: str = "",
    api_url: str | None = None,
    dialect: str | Dialect = "modern",
    token: str | None = None,
    credentials: CredentialProvider | None = None,
) -> StrapiDataProvider:
    """Build a ``StrapiDataProvider`` over an ``HttpxTransport``.

    When *api_url* is given, the config file is not read and *dialect* /
    *token* are used as-is.  Otherwise the active profile supplies them.

    Args:
        profile_name: Profile to use (profile mode).
        config_path: Path to strapi.toml (default: ``./strapi.toml``).
        env_prefix: Prefix for the ``STRAPI_PROFILE`` env var lookup.
        api_url: Backend URL (direct mode).
        dialect: Dialect name or instance (direct mode).
        token: API token; overrides the profile token when given.
        credentials: Credential provider; overrides any token.

    Returns:
        Configured ``StrapiDataProvider``.  Close its transport with
        ``await provider.transport.close()`` when done.

    Raises:
        ProfileNotFoundError: If no profile can be resolved.
        FileNotFoundError: If strapi.toml is missing in profile mode.

    Example:
        >>> provider = get_provider("local")
        >>> page = await provider.get_list("posts", {"pagination": {"page": 1, "perPage": 10}})
    """
    if api_url is not None:
        resolved = dialect if isinstance(dialect, Dialect) else dialect_for(dialect)
        transport = HttpxTransport(token=token, credentials=credentials)
        return StrapiDataProvider(api_url, transport, resolved)

    config = load_provider_config(config_path)
    name = get_active_profile_name(config, profile_name, env_prefix)
    profile = config.profiles[name]

    transport = HttpxTransport(
        token=token or resolve_token(profile),
        credentials=credentials,
        headers=config.headers,
        timeout=profile.timeout,
    )
    return StrapiDataProvider(profile.url, transport, resolve_dialect(profile))
