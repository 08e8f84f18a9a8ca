from pydantic_settings import BaseSettings

DEVELOPMENT = "development"
TEST = "test"


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    environment: str = DEVELOPMENT  # development, test, anything else is treated as production
    frontend_url: str = "http://localhost:8080"  # URL of the frontend application, always an allowed CORS origin
    cors_origins: list[str] = []  # Extra CORS origins on top of the built-in ones
    max_body_size: int = 50 * 1024 * 1024  # Ceiling for JSON/form bodies, large enough for embedded images
    webhook_max_body_size: int = 100 * 1024  # Ceiling for the raw Stripe webhook body
    shutdown_timeout: int = 10  # Seconds to wait for in-flight requests on shutdown
    daily_reset_cron: str = "0 0 * * *"
    daily_reset_timezone: str = "UTC"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "MESSAGEMIND_",
        "extra": "ignore",
    }

    @property
    def debug(self) -> bool:
        """Verbose logs and error details are enabled in development only."""
        return self.environment == DEVELOPMENT

    @property
    def is_test(self) -> bool:
        return self.environment == TEST
