"""
Configuration settings for the resilience layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from resilience_layer.models.policy_models import (
    CircuitBreakerConfig,
    RateLimiterConfig,
    RetryPolicy,
)


class Settings(BaseSettings):
    """Resilience settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Resilience Layer"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry ===
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY: float = 1.0  # seconds
    RETRY_MAX_DELAY: float = 30.0  # seconds
    RETRY_BACKOFF_MULTIPLIER: float = 2.0
    RETRY_JITTER_ENABLED: bool = True

    # === Circuit Breaker ===
    CIRCUIT_FAILURE_THRESHOLD: int = 5
    CIRCUIT_RECOVERY_TIMEOUT: float = 60.0  # seconds

    # === Rate Limiter ===
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW: float = 60.0  # seconds

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True
    METRICS_ADDR: str = "0.0.0.0"
    METRICS_PORT: int = 9464

    def retry_policy(self) -> RetryPolicy:
        """Build the default RetryPolicy from these settings."""
        return RetryPolicy(
            max_attempts=self.RETRY_MAX_ATTEMPTS,
            base_delay=self.RETRY_BASE_DELAY,
            max_delay=self.RETRY_MAX_DELAY,
            backoff_multiplier=self.RETRY_BACKOFF_MULTIPLIER,
            jitter_enabled=self.RETRY_JITTER_ENABLED,
        )

    def circuit_breaker_config(self) -> CircuitBreakerConfig:
        return CircuitBreakerConfig(
            failure_threshold=self.CIRCUIT_FAILURE_THRESHOLD,
            recovery_timeout=self.CIRCUIT_RECOVERY_TIMEOUT,
        )

    def rate_limiter_config(self) -> RateLimiterConfig:
        return RateLimiterConfig(
            max_requests=self.RATE_LIMIT_MAX_REQUESTS,
            window_duration=self.RATE_LIMIT_WINDOW,
        )


# Global settings instance
settings = Settings()
