# app/config.py
from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import Field

class Settings(BaseSettings):
    DATABASE_URL: str = Field("sqlite+aiosqlite:///./ranking.db")
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Ranking results for a concrete month are memoized for a few minutes.
    RANKING_CACHE_TTL_SECONDS: float = Field(300.0, ge=0)
    RANKING_CACHE_MAXSIZE: int = Field(128, ge=1)

    # Hosted databases reject oversized batches; writes are chunked to this size.
    RANKING_BATCH_SIZE: int = Field(400, ge=1)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL
        # Ensure asyncpg is used
        if url.startswith("postgresql://") and "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

settings = Settings()
