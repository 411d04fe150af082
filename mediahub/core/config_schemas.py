"""
Configuration Schemas - Pydantic models for configuration validation.

This module defines the data structures and validation rules for
MediaHub settings: HTTP behaviour, the scraping API endpoint, custom
extractor endpoints and priorities, and logging.
"""

from typing import Dict, List, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from mediahub.core.http import DEFAULT_USER_AGENT


class HttpSettings(BaseModel):
    """Settings shared by every outbound HTTP request."""

    timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Per-request timeout in seconds"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header for outbound requests"
    )
    max_retries: int = Field(
        default=0,
        ge=0,
        le=5,
        description="Extra attempts on transport failures, scraping API only"
    )

    @field_validator('user_agent')
    @classmethod
    def validate_user_agent(cls, v: str) -> str:
        """Validate user agent string."""
        if not v or len(v.strip()) < 10:
            raise ValueError("User agent must be a valid browser string")
        return v.strip()


class ConsumetSettings(BaseModel):
    """Location of the Consumet scraping API."""

    base_url: str = Field(
        default="http://consumet:3000",
        description="Base URL of the Consumet API"
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for scraping API calls in seconds"
    )

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


class HiAnimeSettings(BaseModel):
    """Endpoints used by the MegaCloud extractor."""

    base_url: str = Field(
        default="https://hianime.to",
        description="HiAnime site root"
    )
    keys_url: str = Field(
        default="https://raw.githubusercontent.com/yogesh-hacker/MegacloudKeys/refs/heads/main/keys.json",
        description="Key distribution document for encrypted sources"
    )
    fallback_referer: str = Field(
        default="https://megacloud.blog/",
        description="Referer used when the embed origin is unknown"
    )
    hd_server_names: List[str] = Field(
        default_factory=lambda: ["HD-1", "HD-2"],
        description="Preferred high-definition server aliases"
    )

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class MangaPlusSettings(BaseModel):
    """Endpoints used by the MangaPlus chapter-image pipeline."""

    api_url: str = Field(
        default="https://jumpg-webapi.tokyo-cdn.com/api/manga_viewer",
        description="Viewer API endpoint"
    )
    cdn_base: str = Field(
        default="https://jumpg-assets.tokyo-cdn.com/",
        description="Only page images under this prefix are fetched"
    )


class ExtractorConfig(BaseModel):
    """Per-extractor toggle and priority override."""

    enabled: bool = Field(default=True, description="Whether the extractor is registered")
    priority: int = Field(
        default=100,
        ge=0,
        le=1000,
        description="Extractor priority (higher numbers are tried first)"
    )


class MappingSettings(BaseModel):
    """Provider id mapping sink settings."""

    min_confidence: float = Field(
        default=0.9,
        ge=0.0,
        le=1.0,
        description="Only resolutions at or above this confidence are recorded"
    )


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class AppSettings(BaseModel):
    """Main application settings container."""

    http: HttpSettings = Field(default_factory=HttpSettings)
    consumet: ConsumetSettings = Field(default_factory=ConsumetSettings)
    hianime: HiAnimeSettings = Field(default_factory=HiAnimeSettings)
    mangaplus: MangaPlusSettings = Field(default_factory=MangaPlusSettings)
    extractors: Dict[str, ExtractorConfig] = Field(
        default_factory=lambda: {"megacloud": ExtractorConfig()},
        description="Custom extractor configuration keyed by extractor name"
    )
    mappings: MappingSettings = Field(default_factory=MappingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode='after')
    def validate_settings_consistency(self) -> 'AppSettings':
        """The HTTP timeout is never shorter than the scraping API timeout."""
        if self.consumet.timeout > self.http.timeout:
            self.http.timeout = self.consumet.timeout
        return self

    def get_enabled_extractors(self) -> Dict[str, ExtractorConfig]:
        """Get enabled extractors sorted by priority (highest first)."""
        enabled = {
            name: config for name, config in self.extractors.items()
            if config.enabled
        }
        return dict(sorted(
            enabled.items(),
            key=lambda item: -item[1].priority
        ))


# Export all configuration models
__all__ = [
    "HttpSettings",
    "ConsumetSettings",
    "HiAnimeSettings",
    "MangaPlusSettings",
    "ExtractorConfig",
    "MappingSettings",
    "LoggingSettings",
    "AppSettings",
]
