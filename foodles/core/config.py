"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports two modes:
    - DEVELOPMENT: Uses mock providers (no API keys needed)
    - PRODUCTION/STAGING: Uses real providers (Razorpay, SendGrid, Twilio)

The ENV_MODE variable controls which services are instantiated throughout
the application.

Usage:
    from foodles.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use mock services
    else:
        # Use real APIs

Restaurant open/closed flags (RESTAURANT_<ID>_OPEN) are deliberately NOT
part of Settings: they are re-read from the process environment on every
sample, see foodles.services.restaurants.flags.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with mock services
        PRODUCTION: Live environment with real API integrations
        STAGING: Pre-production testing with real APIs but test keys
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


@dataclass(frozen=True)
class TwilioCredentials:
    """Telephony credentials for one restaurant."""
    account_sid: str
    auth_token: str
    phone_number: Optional[str] = None


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Sensitive values (API keys) should NEVER be committed to version control.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Foodles Ordering Backend",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=5000,
        description="API server port"
    )
    cors_origins: str = Field(
        default=(
            "https://foodles.shop,"
            "https://www.foodles.shop,"
            "https://precious-cobbler-d60f77.netlify.app,"
            "http://localhost:3000"
        ),
        description="Comma-separated list of allowed CORS origins"
    )

    # ==========================================================================
    # RAZORPAY PAYMENT GATEWAY
    # ==========================================================================

    razorpay_key_id: Optional[str] = Field(
        default=None,
        description="Razorpay key id (rzp_live_... or rzp_test_...)"
    )
    razorpay_key_secret: Optional[str] = Field(
        default=None,
        description="Razorpay key secret, also the signature HMAC key"
    )

    # ==========================================================================
    # SENDGRID (EMAIL)
    # ==========================================================================

    sendgrid_api_key: Optional[str] = Field(
        default=None,
        description="SendGrid API Key"
    )
    sendgrid_from_email: str = Field(
        default="orders@foodles.shop",
        description="From email address for SendGrid"
    )
    email_brand_name: str = Field(
        default="Foodles",
        description="Brand name used in email subjects and footers"
    )

    # ==========================================================================
    # TWILIO (MISSED CALL / SMS), ONE ACCOUNT PER RESTAURANT
    # ==========================================================================

    twilio_account_sid_1: Optional[str] = Field(default=None)
    twilio_auth_token_1: Optional[str] = Field(default=None)
    twilio_phone_number_1: Optional[str] = Field(default=None)

    twilio_account_sid_2: Optional[str] = Field(default=None)
    twilio_auth_token_2: Optional[str] = Field(default=None)
    twilio_phone_number_2: Optional[str] = Field(default=None)

    twilio_account_sid_3: Optional[str] = Field(default=None)
    twilio_auth_token_3: Optional[str] = Field(default=None)
    twilio_phone_number_3: Optional[str] = Field(default=None)

    missed_call_twiml_url: str = Field(
        default="http://twimlets.com/reject",
        description="TwiML that rejects the call so the vendor only sees a missed call"
    )
    missed_call_timeout_seconds: int = Field(
        default=15,
        description="How long the vendor phone rings before the call is dropped"
    )
    phone_country_code: str = Field(
        default="91",
        description="Canonical country code for vendor phone numbers"
    )

    # ==========================================================================
    # NOTIFICATION STATUS / RESTAURANT STATUS
    # ==========================================================================

    notification_retention_seconds: float = Field(
        default=60.0,
        description="How long a notification outcome stays pollable"
    )
    status_cache_ttl_seconds: float = Field(
        default=10.0,
        description="Freshness window of the restaurant status cache"
    )
    status_monitor_interval_seconds: float = Field(
        default=1.0,
        description="Tick period of the restaurant status change monitor"
    )
    tracked_restaurant_ids: str = Field(
        default="1,2,3",
        description="Comma-separated restaurant ids watched by the change monitor"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def tracked_restaurant_ids_list(self) -> list[str]:
        return [r.strip() for r in self.tracked_restaurant_ids.split(",") if r.strip()]

    @property
    def twilio_credentials(self) -> dict[str, TwilioCredentials]:
        """
        Telephony credentials keyed by restaurant id.

        Restaurants missing either the SID or the auth token are left out,
        which the call channel reports as "not configured".
        """
        credentials = {}
        for restaurant_id in ("1", "2", "3"):
            sid = getattr(self, f"twilio_account_sid_{restaurant_id}")
            token = getattr(self, f"twilio_auth_token_{restaurant_id}")
            if sid and token:
                credentials[restaurant_id] = TwilioCredentials(
                    account_sid=sid,
                    auth_token=token,
                    phone_number=getattr(self, f"twilio_phone_number_{restaurant_id}"),
                )
        return credentials

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if not self.razorpay_key_id:
                missing.append("RAZORPAY_KEY_ID")
            if not self.razorpay_key_secret:
                missing.append("RAZORPAY_KEY_SECRET")
            if not self.sendgrid_api_key:
                missing.append("SENDGRID_API_KEY")
            if not self.twilio_credentials:
                missing.append("TWILIO_ACCOUNT_SID_<N>/TWILIO_AUTH_TOKEN_<N>")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded only once per process; call
    ``get_settings.cache_clear()`` after changing the environment in tests.
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-40s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("twilio.http_client").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logging.getLogger("foodles")
