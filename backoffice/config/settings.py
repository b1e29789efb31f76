"""
Back-Office Configuration Management

Pydantic settings with environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecuritySettings(BaseSettings):
    """CORS Configuration"""
    
    model_config = SettingsConfigDict(env_prefix="")
    
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS",
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""
    
    model_config = SettingsConfigDict(env_prefix="")
    
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or console")
    
    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format value"""
        allowed = ["json", "console"]
        if v.lower() not in allowed:
            raise ValueError(f"Log format must be one of: {allowed}")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings
    
    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
    
    # Application
    app_name: str = Field(default="Shop Back-Office API", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")
    
    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    
    # Version
    version: str = Field(default="1.0.0", description="Application version")
    
    # Back-office behaviour
    default_owner_id: int = Field(
        default=1,
        ge=1,
        alias="DEFAULT_OWNER_ID",
        description="Owner the HTTP layer acts as"
    )
    seed_sample_data: bool = Field(
        default=True,
        alias="SEED_SAMPLE_DATA",
        description="Load the demo data set on startup"
    )
    recent_orders_limit: int = Field(
        default=5,
        ge=1,
        alias="RECENT_ORDERS_LIMIT",
        description="Orders shown on the dashboard"
    )
    
    # Subsystem configurations
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    
    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()
    
    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.
    
    Returns:
        Settings: Application settings instance
    """
    return Settings()
