"""Pydantic models for provider configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class ProviderProfile(BaseModel):
    """Backend connection profile from strapi.toml."""

    url: str                                # API base URL, e.g. http://localhost:1337/api
    dialect: str = "modern"                 # "legacy" or "modern"
    description: str = ""
    token: str | None = None
    api_token: str | None = None            # For [YOUR-TOKEN] placeholder substitution
    count_endpoint: bool = False            # Legacy only: total from /<resource>/count
    native_get_many: bool = False           # get_many as one id_in / filters[id][$in] request
    timeout: float = 30.0


class ProviderConfig(BaseModel):
    """Complete provider configuration from strapi.toml."""

    profiles: dict[str, ProviderProfile]
    default_profile: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
