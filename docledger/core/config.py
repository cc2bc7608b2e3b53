from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("docledger", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Gemini (required - the service refuses to start without a key)
    gemini_api_key: str = Field(..., alias="GEMINI_API_KEY")
    gemini_base_url: str = Field("https://generativelanguage.googleapis.com", alias="GEMINI_BASE_URL")
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")
    gemini_timeout_seconds: float = Field(120.0, alias="GEMINI_TIMEOUT_SECONDS")

    # Remote asset readiness polling
    poll_interval_seconds: float = Field(1.0, alias="POLL_INTERVAL_SECONDS")
    poll_max_attempts: int = Field(120, alias="POLL_MAX_ATTEMPTS")

    # Uploads
    max_upload_size_mb: int = Field(10, alias="MAX_UPLOAD_SIZE_MB")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Observability
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

settings = Settings()
