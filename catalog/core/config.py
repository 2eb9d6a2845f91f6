from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "course-catalog"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8081"

    DATABASE_URL: str = "sqlite+pysqlite:///./catalog.db"

    LISTING_DEFAULT_PAGE_SIZE: int = 10
    LISTING_MAX_PAGE_SIZE: int = 100
    LISTING_PAGE_SIZE_PARAM: str = "perpage"
    LISTING_STRICT: bool = False  # true: unknown filter/order fields answer 400 instead of being ignored

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

settings = Settings()
