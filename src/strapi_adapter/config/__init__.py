"""Configuration management: profiles, TOML loading, and config models.

Usage:
    >>> from strapi_adapter.config import load_provider_config, ProviderProfile, ProviderConfig
"""

from strapi_adapter.config.loader import load_provider_config
from strapi_adapter.config.models import ProviderConfig, ProviderProfile

__all__ = ["load_provider_config", "ProviderConfig", "ProviderProfile"]
