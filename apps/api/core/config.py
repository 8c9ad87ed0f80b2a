"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Database Configuration
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_DB: str = Field(default="carbonprint")
    POSTGRES_HOST: str = Field(default="postgres")
    POSTGRES_PORT: int = Field(default=5432)
    # Full URL override (e.g. "sqlite://" for tests). Takes precedence over POSTGRES_*.
    DATABASE_URL: Optional[str] = Field(default=None)

    # Database Pool Configuration
    DB_POOL_SIZE: int = Field(default=20)
    DB_MAX_OVERFLOW: int = Field(default=10)
    DB_POOL_TIMEOUT: int = Field(default=30)
    DB_POOL_RECYCLE: int = Field(default=3600)  # 1 hour

    # Redis Configuration (empty string disables Redis)
    REDIS_URL: str = Field(default="redis://redis:6379/0")

    # JWT Authentication - REQUIRED for token verification
    # Tokens are issued by the identity provider and signed with this key.
    SECRET_KEY: str = Field(
        default=...,  # Required - no default
        description="JWT signing key. Must be cryptographically secure (32+ chars). "
                    "Generate with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
    # Expected "aud" claim; None skips the audience check
    JWT_AUDIENCE: Optional[str] = Field(default=None)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_RELOAD: bool = Field(default=False)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_PER_MINUTE: int = Field(default=60)
    RATE_LIMIT_CHAT_PER_MINUTE: int = Field(default=20)
    RATE_LIMIT_GRID_PER_MINUTE: int = Field(default=30)

    # External API Configuration
    EXTERNAL_API_TIMEOUT: int = Field(default=30)

    # AI gateway (OpenAI-compatible chat completions endpoint)
    AI_GATEWAY_URL: str = Field(default="https://ai.gateway.lovable.dev/v1")
    AI_GATEWAY_API_KEY: Optional[str] = Field(default=None)
    AI_MODEL: str = Field(default="google/gemini-2.5-flash")
    AI_TEMPERATURE: float = Field(default=0.7)
    AI_MAX_TOKENS: int = Field(default=300)

    # Grid carbon intensity (Electricity Maps). Without a key, synthetic data is served.
    ELECTRICITY_MAP_API_KEY: Optional[str] = Field(default=None)
    ELECTRICITY_MAP_URL: str = Field(default="https://api.electricitymap.org/v3/carbon-intensity/latest")

    # Cache Configuration
    CACHE_TTL_DEFAULT: int = Field(default=300)  # 5 minutes
    CACHE_TTL_GRID_INTENSITY: int = Field(default=900)  # 15 minutes

    # Footprint model (policy values, not measured constants)
    CO2_GRAMS_PER_MB: float = Field(default=0.02, gt=0)
    GREEN_POINTS_PER_MB_SAVED: float = Field(default=10.0, ge=0)

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    EXPOSE_API_DOCS: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins for production
    CORS_ORIGINS: Optional[str] = Field(default=None)

    # Sentry Error Tracking
    SENTRY_DSN: Optional[str] = Field(default=None)
    SENTRY_TRACES_SAMPLE_RATE: float = Field(default=0.1)  # 10% of transactions

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:"
            f"{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:"
            f"{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )


# Global settings instance
settings = Settings()
