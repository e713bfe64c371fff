import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env.dev manually (local dev, optional), then a plain .env
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env.dev"))
load_dotenv()


class Settings(BaseModel):
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "perftrack"

    database_url: str = "sqlite:///./perftrack.db"
    sql_pool_size: int = 5

    secret_key: str = "dev-secret-change-me"
    jwt_alg: str = "HS256"
    access_token_expire_min: int = 60

    log_level: str = "INFO"
    cors_origins: List[str] = []


def _split(raw: str) -> List[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


def load_settings() -> Settings:
    # Fetch from OS env (Docker runtime injects this way)
    return Settings(
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
        mongo_db=os.getenv("MONGO_DB", "perftrack"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./perftrack.db"),
        sql_pool_size=int(os.getenv("SQL_POOL_SIZE", "5")),
        secret_key=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        jwt_alg=os.getenv("JWT_ALG", "HS256"),
        access_token_expire_min=int(os.getenv("ACCESS_TOKEN_EXPIRE_MIN", "60")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        cors_origins=_split(os.getenv("CORS_ORIGINS", "")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
