from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_TITLE: str = "Brokerage Back Office"
    DB_PATH: str = "data/backoffice.db"
    API_BASE: str = "http://127.0.0.1:8000"
    PERMISSION_CACHE_SECONDS: int = 300
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
