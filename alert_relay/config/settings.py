"""
PURPOSE: Configuration settings for the alert relay service.

This module uses Pydantic Settings to manage configuration from environment
variables and .env files. All settings are validated and typed.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    PURPOSE: Central configuration class for the alert relay.

    Manages all environment-based settings including the database connection,
    optional Redis fan-out, webhook rate limiting and notification transports.
    Settings are loaded from environment variables and .env file.
    """

    # Database & Cache Configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./alerts.db"
    # Empty disables cross-process Redis fan-out; local handlers still run
    REDIS_URL: str = ""

    # System Settings
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    # Webhook Ingestion
    WEBHOOK_RATE_LIMIT: str = "60/minute"

    # Notification Delivery
    # Transports are tried in the listed order until one accepts the alert.
    NOTIFICATIONS_ENABLED: bool = False
    NOTIFY_EMAIL: str = ""
    NOTIFICATION_TRANSPORTS: str = "emailjs,formspree,web3forms"
    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0

    # EmailJS (https://www.emailjs.com)
    EMAILJS_SERVICE_ID: str = ""
    EMAILJS_TEMPLATE_ID: str = ""
    EMAILJS_USER_ID: str = ""

    # Formspree (https://formspree.io)
    FORMSPREE_FORM_ID: str = ""

    # Web3Forms (https://web3forms.com)
    WEB3FORMS_ACCESS_KEY: str = ""

    def is_production(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in production mode.

        Returns:
            bool: True when APP_ENV indicates production.
        """
        return self.APP_ENV.strip().lower() in {"prod", "production"}

    def is_development(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in development mode.

        Returns:
            bool: True when APP_ENV indicates development or debug is on.
        """
        return self.APP_ENV.strip().lower() in {"dev", "development"} or self.DEBUG

    def get_cors_origins(self) -> list[str]:
        """Split CORS_ORIGINS into a list, dropping blanks."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def get_notification_transports(self) -> list[str]:
        """Ordered, lower-cased transport names from NOTIFICATION_TRANSPORTS."""
        return [
            name.strip().lower()
            for name in self.NOTIFICATION_TRANSPORTS.split(",")
            if name.strip()
        ]

    class Config:
        """Pydantic model configuration."""

        env_file: str = ".env"
        env_file_encoding: str = "utf-8"
        case_sensitive: bool = True
        extra: str = "ignore"


settings: Settings = Settings()
