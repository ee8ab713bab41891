"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "ClubReserva"
    debug: bool = True
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://clubreserva:clubreserva@db:5432/clubreserva"
    database_echo: bool = False

    # Auth - tokens are issued by the identity provider, we only verify them
    secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    model_config = {"env_prefix": "CR_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
