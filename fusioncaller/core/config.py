"""Configuration management for FusionCaller lead intake."""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ===========================================
    # Supabase Configuration
    # ===========================================
    SUPABASE_URL: str = Field(default="", description="Supabase project URL")
    SUPABASE_KEY: str = Field(default="", description="Supabase service-role key")

    # ===========================================
    # OpenAI Configuration (service classification)
    # ===========================================
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API key")
    OPENAI_MODEL: str = Field(default="gpt-3.5-turbo", description="Model for the service classifier")
    CLASSIFIER_TEMPERATURE: float = Field(default=0.3, description="Classifier sampling temperature")
    CLASSIFIER_MAX_TOKENS: int = Field(default=300, description="Classifier reply token cap")

    # ===========================================
    # Vapi Configuration
    # ===========================================
    VAPI_API_KEY: str = Field(default="", description="Vapi API key")
    VAPI_API_URL: str = Field(default="https://api.vapi.ai", description="Vapi API base URL")
    VAPI_TIMEOUT_SECONDS: float = Field(default=30.0, description="Timeout for Vapi requests")

    # ===========================================
    # Form Webhook
    # ===========================================
    FORM_WEBHOOK_SECRET: Optional[str] = Field(
        default=None,
        description="Shared secret expected in X-Webhook-Secret; unset disables the check"
    )

    # ===========================================
    # Dialing & Workflows
    # ===========================================
    MAX_CALLS_PER_LEAD_PER_DAY: int = Field(default=2, description="Outbound calls allowed per lead per day")
    WORKFLOW_WEBHOOK_TIMEOUT_SECONDS: float = Field(default=10.0, description="Timeout for workflow webhook actions")

    # ===========================================
    # Server Configuration
    # ===========================================
    DEBUG: bool = Field(default=False, description="Debug mode")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
