from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application
    app_env: str = "dev"

    # Database
    database_url: str = "sqlite:///./linkhub.db"

    # Redis (only used when rate_limit_backend == "redis")
    redis_url: str = "redis://localhost:6379/0"

    # Rate limiting
    rate_limit_backend: str = "memory"
    rate_limit_sweep_seconds: int = 60
    links_read_limit: int = 100
    links_write_limit: int = 50
    links_window_seconds: int = 60
    track_limit: int = 60
    track_window_seconds: int = 60

    # Sessions
    session_cookie_name: str = "session"
    session_ttl_days: int = 7

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


settings = Settings()
