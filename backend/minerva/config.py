from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    app_name: str = "Minerva"
    debug: bool = False
    log_level: str = "INFO"

    # CORS: comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000"

    # Provider HTTP timeouts (seconds)
    request_timeout: float = 120.0
    health_check_timeout: float = 15.0

    # Gemini uses a fixed endpoint and model
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model_id: str = "gemini-2.5-pro"


settings = Settings()
