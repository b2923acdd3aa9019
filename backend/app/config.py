from pydantic_settings import BaseSettings

DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    database_url: str = "sqlite:///movies.db"
    secret_key: str = DEFAULT_SECRET_KEY
    bcrypt_rounds: int = 8
    token_expire_hours: int = 2
    admin_username: str = "admin"
    admin_password: str = "admin123"  # empty disables the seeded admin
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    class Config:
        env_prefix = "MOVIES_"


settings = Settings()
