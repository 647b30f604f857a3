"""
Environment-aware configuration settings for the workflow engine.

Supports dev, test, and prod environments with appropriate defaults.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""
    
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """Main application settings."""
    
    model_config = SettingsConfigDict(
        case_sensitive=False,  # LOG_LEVEL and log_level both work
        extra="ignore",        # Ignore unknown environment variables
    )
    
    # Application
    app_name: str = Field(default="Workflow State Engine")
    environment: Environment = Field(default=Environment.DEV)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    
    # HTTP layer
    api_prefix: str = Field(default="/v1", description="Prefix for all workflow routes")
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins (dev always allows all)",
    )
    
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str | Environment) -> Environment:
        """Validate and convert environment string to enum."""
        if isinstance(v, Environment):
            return v
        return Environment(v.lower())
    
    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Normalize prefix to '' or '/segment' without trailing slash."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v
    
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEV
    
    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TEST
    
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PROD
    
    @property
    def allowed_origins(self) -> list[str]:
        """CORS origins to configure on the app."""
        return ["*"] if self.is_development else self.cors_origins


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
