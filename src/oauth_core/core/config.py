# OAuthCore - OAuth2 Grant Processing Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from datetime import timedelta

from beartype import beartype
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        env_prefix="OAUTH_CORE_",
        frozen=True,  # Immutable settings
        validate_default=True,
        extra="forbid",
    )

    # Database
    database_url: str = Field(
        default="postgresql://localhost:5432/oauth",
        description="PostgreSQL connection URL",
        min_length=1,
    )
    database_pool_min: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Minimum database pool size",
    )
    database_pool_max: int = Field(
        default=20,
        ge=5,
        le=100,
        description="Maximum database pool size",
    )
    database_pool_timeout: float = Field(
        default=10.0,
        ge=1.0,
        le=60.0,
        description="Connection acquisition timeout in seconds",
    )
    database_command_timeout: float = Field(
        default=30.0,
        ge=5.0,
        le=300.0,
        description="Query execution timeout in seconds",
    )
    database_max_inactive_connection_lifetime: float = Field(
        default=600.0,
        ge=60.0,
        le=3600.0,
        description="Maximum connection lifetime in seconds",
    )

    # Token lifetimes
    access_token_ttl_seconds: int = Field(
        default=3600,
        ge=60,
        le=86400,
        description="Access token lifetime in seconds",
    )
    refresh_token_ttl_seconds: int = Field(
        default=30 * 24 * 3600,
        ge=60,
        le=365 * 24 * 3600,
        description="Refresh token lifetime in seconds",
    )
    authorization_code_ttl_seconds: int = Field(
        default=600,
        ge=30,
        le=3600,
        description="Authorization code lifetime in seconds",
    )
    token_generation_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts at generating a unique token pair before giving up",
    )

    # Feature Flags
    enable_implicit_grant: bool = Field(
        default=True,
        description="Allow the implicit (token) grant",
    )
    enable_password_grant: bool = Field(
        default=True,
        description="Allow the resource owner password credentials grant",
    )

    oauth_known_scopes: list[str] | None = Field(
        default=None,
        description="Scopes the server recognises; None accepts any scope",
    )

    @field_validator("database_pool_max")
    @classmethod
    def validate_pool_sizes(cls: type["Settings"], v: int, info: ValidationInfo) -> int:
        """Ensure pool max is greater than pool min."""
        if "database_pool_min" in info.data:
            min_size = info.data["database_pool_min"]
            if v < min_size:
                raise ValueError(
                    f"database_pool_max ({v}) must be >= database_pool_min ({min_size})"
                )
        return v

    @field_validator("refresh_token_ttl_seconds")
    @classmethod
    def validate_refresh_ttl(
        cls: type["Settings"], v: int, info: ValidationInfo
    ) -> int:
        """Refresh tokens must not expire before the access token they accompany."""
        access_ttl = info.data.get("access_token_ttl_seconds")
        if access_ttl is not None and v < access_ttl:
            raise ValueError(
                f"refresh_token_ttl_seconds ({v}) must be >= "
                f"access_token_ttl_seconds ({access_ttl})"
            )
        return v

    @field_validator("oauth_known_scopes")
    @classmethod
    def validate_known_scopes(
        cls: type["Settings"], v: list[str] | None
    ) -> list[str] | None:
        """Scope tokens may not contain whitespace."""
        if v is None:
            return v
        for scope in v:
            if not scope or any(ch.isspace() for ch in scope):
                raise ValueError(f"Invalid scope token: {scope!r}")
        return v

    @property
    @beartype
    def access_token_ttl(self) -> timedelta:
        return timedelta(seconds=self.access_token_ttl_seconds)

    @property
    @beartype
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(seconds=self.refresh_token_ttl_seconds)

    @property
    @beartype
    def authorization_code_ttl(self) -> timedelta:
        return timedelta(seconds=self.authorization_code_ttl_seconds)


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
