from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from agenda.core.errors import StorageError
from agenda.db.repository import Repository


def create_db_engine(database_uri: str, **kwargs) -> Engine:
    if database_uri.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return create_engine(database_uri, connect_args=connect_args, **kwargs)
    return create_engine(database_uri, pool_pre_ping=True, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_repository(request: Request) -> Repository:
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise StorageError("Armazenamento nao inicializado")
    return repository
