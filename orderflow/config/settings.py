from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and `.env`).
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Orderflow API"
    PROJECT_DESCRIPTION: str = "Order lifecycle and payment settlement for a multi-vendor storefront"
    VERSION: str = "0.1.0"

    # PostgreSQL Database Settings
    DATABASE_URL: str | None = Field(None, description="Full async SQLAlchemy URL, overrides the DB_* parts")
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("orderflow", description="Database name")
    DB_USER: str = Field("postgres", description="Database user")
    DB_PASSWORD: str | None = Field(None, description="Database password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(30, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Seconds to wait for a pooled connection")

    # Redis Settings
    REDIS_HOST: str = Field("localhost", description="Redis host")
    REDIS_PORT: int = Field(6379, description="Redis port")
    REDIS_DB: int = Field(0, description="Redis database")
    REDIS_PASSWORD: str | None = Field(None, description="Redis password")

    # JWT Settings
    JWT_SECRET_KEY: str = Field(..., description="Secret used to verify bearer tokens")
    JWT_ALGORITHM: str = Field("HS256", description="Bearer token signing algorithm")

    # Razorpay
    RAZORPAY_API_BASE: str = Field("https://api.razorpay.com/v1", description="Razorpay REST base URL")
    RAZORPAY_KEY_ID: str = Field(..., description="Razorpay key id (public)")
    RAZORPAY_KEY_SECRET: str = Field(..., description="Razorpay key secret, also the checkout signature key")
    RAZORPAY_WEBHOOK_SECRET: str = Field(..., description="Secret configured for the Razorpay webhook")
    PAYMENT_GATEWAY_TIMEOUT: float = Field(10.0, description="Timeout for gateway calls in seconds")
    WEBHOOK_DEDUP_TTL_SECONDS: int = Field(24 * 60 * 60, description="How long processed webhook events are remembered")

    # Orders
    CURRENCY: str = Field("INR", description="Single store currency (ISO 4217)")
    ORDER_NUMBER_PREFIX: str = Field("ORD", description="Prefix for human-readable order numbers")
    ORDER_NUMBER_MAX_ATTEMPTS: int = Field(5, description="Retries when a generated order number collides")
    ORDERS_PAGE_MAX_LIMIT: int = Field(100, description="Largest page size accepted by order listings")

    # Default shipping configuration (minor units) used until an admin saves one
    SHIPPING_ENABLED: bool = Field(True, description="Charge shipping at all")
    SHIPPING_FLAT_RATE: int = Field(10000, description="Flat shipping rate in paise")
    SHIPPING_FREE_THRESHOLD: int = Field(500000, description="Subtotal (paise) from which shipping is free")

    # Application Settings
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("text", description="'text' or 'json'")
    CORS_ORIGINS: list[str] = Field(default=[], description="Allowed CORS origins outside debug mode")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(default=None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value):
        if isinstance(value, str) and not value.strip().startswith("["):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("CURRENCY")
    @classmethod
    def validate_currency(cls, v):
        if len(v) != 3 or not v.isalpha():
            raise ValueError("CURRENCY must be a 3-letter ISO code")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("text", "json"):
            raise ValueError("LOG_FORMAT must be 'text' or 'json'")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("SHIPPING_FLAT_RATE", "SHIPPING_FREE_THRESHOLD")
    @classmethod
    def validate_non_negative_amount(cls, v):
        if v < 0:
            raise ValueError("Shipping amounts must be 0 or greater")
        return v

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @computed_field
    @property
    def is_development(self) -> bool:
        """True for debug or local environments."""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


# Singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return the cached settings instance.
    Avoids re-reading the environment on every call.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
