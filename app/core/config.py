"""
Core configuration classes using Pydantic Settings.
"""
from typing import List

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    APP_NAME: str = "Persona Mock Verification Engine"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development", description="Environment: development, staging, production, test")
    DEBUG: bool = Field(default=True, description="Enable debug mode")

    # Server
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, description="Server port")
    ALLOWED_HOSTS: List[str] = Field(default=["*"], description="Allowed CORS origins")

    # Persona mock behaviour
    PERSONA_ENVIRONMENT: str = Field(default="sandbox", description="Environment recorded on new inquiries")
    PERSONA_PROCESSING_DELAY_SECONDS: float = Field(
        default=2.0,
        ge=0.0,
        description="Simulated processing latency for auto-approve/auto-decline"
    )
    PERSONA_DEFAULT_PAGE_SIZE: int = Field(default=10, ge=1, description="Default inquiry list page size")

    # Consumer adapter
    KYC_WEBHOOK_CALLBACK_NAME: str = Field(
        default="kyc-service",
        description="Name the KYC service registers its webhook callback under"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log format: json or text")

    @validator("ENVIRONMENT")
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed = ["development", "staging", "production", "test"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @validator("PERSONA_ENVIRONMENT")
    def validate_persona_environment(cls, v):
        """Validate persona environment setting."""
        allowed = ["sandbox", "production"]
        if v not in allowed:
            raise ValueError(f"Persona environment must be one of: {allowed}")
        return v

    @validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        """Validate log level setting."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @validator("LOG_FORMAT")
    def validate_log_format(cls, v):
        """Validate log format setting."""
        allowed = ["json", "text"]
        if v not in allowed:
            raise ValueError(f"Log format must be one of: {allowed}")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
