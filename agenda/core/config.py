import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


class Settings:
    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent.parent.parent
        self.APP_NAME: str = os.getenv("APP_NAME", "Agenda Medicao API")
        self.ENV: str = os.getenv("ENV", "development")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        self.API_PREFIX: str = os.getenv("API_PREFIX", "/api").rstrip("/")

        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
        self.ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_HOURS: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))
        self.BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

        self.DATABASE_BACKEND: str = os.getenv("DATABASE_BACKEND", "sql").strip().lower()
        self.SQLALCHEMY_DATABASE_URI: str = os.getenv(
            "SQLALCHEMY_DATABASE_URI",
            f"sqlite:///{(base_dir / 'agenda.db').as_posix()}",
        )
        self.FIRESTORE_COLLECTION_PREFIX: str = os.getenv("FIRESTORE_COLLECTION_PREFIX", "")

        self.SEED_ADMIN_ENABLED: bool = _flag("SEED_ADMIN_ENABLED", "1")
        self.SEED_ADMIN_NAME: str = os.getenv("SEED_ADMIN_NAME", "Administrador")
        self.SEED_ADMIN_EMAIL: str = os.getenv("SEED_ADMIN_EMAIL", "admin@agenda.com")
        self.SEED_ADMIN_PASSWORD: str = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

        cors_origins = os.getenv("BACKEND_CORS_ORIGINS")
        self.BACKEND_CORS_ORIGINS: List[str] = (
            [origin.strip() for origin in cors_origins.split(",") if origin.strip()]
            if cors_origins
            else ["*"]
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
