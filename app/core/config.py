from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./app.db"
    PROJECT_NAME: str = "Trivia Tournament Backend"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Open Trivia DB
    OPENTDB_BASE_URL: str = "https://opentdb.com/api.php"
    OPENTDB_TIMEOUT_SECONDS: float = 10.0
    OPENTDB_MAX_RETRIES: int = 3
    OPENTDB_BACKOFF_SECONDS: float = 1.0

    # Quiz engine
    QUESTIONS_PER_TOURNAMENT: int = 10
    QUIZ_SESSION_TTL_MINUTES: int = 120
    SESSION_PURGE_INTERVAL_MINUTES: int = 15
    STORE_SHARD_COUNT: int = 16

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
