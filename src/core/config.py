"""
Core configuration for the Substance Access API.
Manages environment variables, external service settings and secrets.
"""
import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    access_table_name: str = os.getenv("ACCESS_TABLE_NAME", "SubstanceAccess")
    use_parameter_store: bool = os.getenv("USE_PARAMETER_STORE", "true").lower() == "true"

    # Cache store: "dynamodb" or "supabase"
    cache_backend: str = os.getenv("CACHE_BACKEND", "dynamodb")
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_table_name: str = os.getenv("SUPABASE_TABLE_NAME", "psychedelic_access")
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

    # Generator
    generator_model: str = os.getenv("GENERATOR_MODEL", "gpt-4o-mini")
    generator_timeout_seconds: float = float(os.getenv("GENERATOR_TIMEOUT_SECONDS", "60"))

    # Retry hardening (1 attempt = no retries)
    retry_max_attempts: int = int(os.getenv("RETRY_MAX_ATTEMPTS", "1"))
    retry_base_delay_seconds: float = float(os.getenv("RETRY_BASE_DELAY_SECONDS", "0.5"))
    retry_max_delay_seconds: float = float(os.getenv("RETRY_MAX_DELAY_SECONDS", "8"))

    # Store unrecognised generator labels as "Unknown" instead of verbatim
    clamp_unknown_status: bool = os.getenv("CLAMP_UNKNOWN_STATUS", "false").lower() == "true"

    # API Configuration
    api_title: str = os.getenv("API_TITLE", "Substance Access API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "dev")

    @property
    def openai_api_key(self) -> str:
        """Get OpenAI API key from Parameter Store."""
        from src.core.parameter_store import get_secret
        return get_secret(
            f"/substance-access-api/{self.environment}/openai-api-key",
            "OPENAI_API_KEY",
            self
        )

    @property
    def supabase_service_role_key(self) -> str:
        """Get Supabase service-role key from Parameter Store."""
        from src.core.parameter_store import get_secret
        return get_secret(
            f"/substance-access-api/{self.environment}/supabase-service-role-key",
            "SUPABASE_SERVICE_ROLE_KEY",
            self
        )

    class Config:
        env_file = ".env"
        case_sensitive = False
        # Secrets in .env are read through os.getenv, not as fields
        extra = "ignore"


# Global settings instance
settings = Settings()
