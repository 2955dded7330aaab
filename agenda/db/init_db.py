import logging

from agenda.core.config import Settings
from agenda.core.errors import StorageError
from agenda.core.security import ROLE_ADMIN
from agenda.db.firestore import FirestoreRepository, create_firestore_client
from agenda.db.repository import USERS, Repository
from agenda.db.sql import SqlRepository
from agenda.users import service as users_service
from agenda.users.schemas import UserCreate

logger = logging.getLogger("agenda.db")

DEFAULT_ADMIN_PASSWORD = "admin123"


def build_repository(settings: Settings) -> Repository:
    if settings.DATABASE_BACKEND == "sql":
        return SqlRepository.from_uri(settings.SQLALCHEMY_DATABASE_URI)
    if settings.DATABASE_BACKEND == "firestore":
        return FirestoreRepository(create_firestore_client(), settings.FIRESTORE_COLLECTION_PREFIX)
    raise StorageError(f"DATABASE_BACKEND desconhecido: {settings.DATABASE_BACKEND}")


def seed_admin_user(repo: Repository, settings: Settings) -> None:
    if not settings.SEED_ADMIN_ENABLED:
        return
    email = users_service.normalize_email(settings.SEED_ADMIN_EMAIL)
    if repo.find_one(USERS, {"email": email}):
        return
    users_service.create_user(
        repo,
        UserCreate(
            nome=settings.SEED_ADMIN_NAME,
            email=email,
            senha=settings.SEED_ADMIN_PASSWORD,
            role=ROLE_ADMIN,
        ),
    )
    logger.info("admin padrao criado: %s", email)
    if settings.ENV.lower() == "production" and settings.SEED_ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
        logger.warning("Admin padrao criado com a senha padrao em producao. Troque a senha.")


def init_storage(repo: Repository, settings: Settings) -> None:
    repo.prepare()
    seed_admin_user(repo, settings)
