"""
Configuration module for relayfetch.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DirectConfig(BaseSettings):
    """Direct (unauthenticated) upstream request configuration."""

    model_config = SettingsConfigDict(env_prefix="RELAYFETCH_DIRECT_")

    timeout: float = Field(default=10.0, description="Request timeout in seconds")


class RelayConfig(BaseSettings):
    """Scraping relay configuration."""

    model_config = SettingsConfigDict(env_prefix="RELAYFETCH_RELAY_")

    keys: str = Field(default="", description="Semicolon-delimited relay access keys")
    base_url: str = Field(
        default="https://api.scrapingant.com/v1/general",
        description="Relay endpoint the target URL is embedded into",
    )
    url_param: str = Field(default="url", description="Query parameter carrying the target URL")
    extra_params: dict[str, str] = Field(
        default={"browser": "false"},
        description="Fixed query parameters sent with every relay request",
    )
    key_header: str = Field(default="x-api-key", description="Header carrying the access key")
    timeout: float = Field(default=60.0, description="Request timeout in seconds")

    # Soft retries (decode failures, upstream challenges)
    max_soft_retries: int = Field(default=8, ge=1, description="Maximum soft retries per fetch")
    backoff_base: float = Field(default=0.5, ge=0, description="First backoff delay in seconds")
    backoff_max: float = Field(default=8.0, ge=0, description="Backoff delay cap in seconds")

    @property
    def key_list(self) -> list[str]:
        """Access keys in configured order, empty entries dropped."""
        return [key.strip() for key in self.keys.split(";") if key.strip()]


class CaptchaConfig(BaseSettings):
    """Captcha validation service configuration."""

    model_config = SettingsConfigDict(env_prefix="RELAYFETCH_CAPTCHA_")

    verify_url: str = Field(
        default="https://hcaptcha.com/siteverify",
        description="Token validation endpoint",
    )
    secret: str = Field(default="", description="Default site secret")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")


class RedirectConfig(BaseSettings):
    """Short-link redirect resolution configuration."""

    model_config = SettingsConfigDict(env_prefix="RELAYFETCH_REDIRECT_")

    timeout: float = Field(default=5.0, description="Request timeout in seconds")


class FetcherConfig(BaseSettings):
    """Main configuration aggregating all sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="RELAYFETCH_",
        env_nested_delimiter="__",
    )

    # Sub-configurations
    direct: DirectConfig = Field(default_factory=DirectConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    captcha: CaptchaConfig = Field(default_factory=CaptchaConfig)
    redirect: RedirectConfig = Field(default_factory=RedirectConfig)

    # General settings
    concurrency: int = Field(default=5, ge=1, description="Concurrent fetches for batch runs")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User-Agent sent on direct and redirect requests",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )


# Global config instance (can be overridden)
config = FetcherConfig()
