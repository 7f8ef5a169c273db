from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GHSTARS_",
        case_sensitive=False,
    )

    # Persisted state blob (user settings + star cache)
    data_file: str = "data/ghstars.json"

    # GitHub REST API
    github_api_url: str = "https://api.github.com"
    user_agent: str = "GitHub-Stars-Service"
    request_timeout: float = 30.0
    connect_timeout: float = 5.0
    max_connections: int = 20
    max_keepalive_connections: int = 10

    # Application
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]


settings = Settings()
