import logging
from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from agenda.core.errors import StorageError
from agenda.db import models
from agenda.db.repository import Record, Repository
from agenda.db.session import create_db_engine, make_session_factory

logger = logging.getLogger("agenda.db")


def _to_record(obj: models.Base) -> Record:
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


class SqlRepository(Repository):
    backend_name = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = make_session_factory(engine)

    @classmethod
    def from_uri(cls, database_uri: str) -> "SqlRepository":
        return cls(create_db_engine(database_uri))

    def _model(self, collection: str):
        try:
            return models.MODELS[collection]
        except KeyError:
            raise StorageError(f"Colecao desconhecida: {collection}")

    def prepare(self) -> None:
        try:
            models.Base.metadata.create_all(bind=self.engine)
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("sql storage unavailable: %s", exc)
            raise StorageError("Banco de dados indisponivel") from exc
        logger.info("sql storage ready dialect=%s", self.engine.dialect.name)

    def find(self, collection: str, record_id: str) -> Optional[Record]:
        model = self._model(collection)
        try:
            with self._session_factory() as db:
                obj = db.get(model, record_id)
                return _to_record(obj) if obj is not None else None
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def find_all(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        model = self._model(collection)
        try:
            with self._session_factory() as db:
                query = db.query(model)
                for field, value in (filters or {}).items():
                    query = query.filter(getattr(model, field) == value)
                if order_by:
                    columns = [getattr(model, order_by), model.id]
                    query = query.order_by(
                        *(column.desc() if descending else column.asc() for column in columns)
                    )
                return [_to_record(obj) for obj in query.all()]
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def insert(self, collection: str, record: Record) -> Record:
        model = self._model(collection)
        try:
            with self._session_factory() as db:
                obj = model(**record)
                db.add(obj)
                db.commit()
                return _to_record(obj)
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def update(self, collection: str, record_id: str, fields: Record) -> Optional[Record]:
        model = self._model(collection)
        try:
            with self._session_factory() as db:
                obj = db.get(model, record_id)
                if obj is None:
                    return None
                for field, value in fields.items():
                    setattr(obj, field, value)
                db.commit()
                return _to_record(obj)
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    def delete(self, collection: str, record_id: str) -> bool:
        model = self._model(collection)
        try:
            with self._session_factory() as db:
                obj = db.get(model, record_id)
                if obj is None:
                    return False
                db.delete(obj)
                db.commit()
                return True
        except SQLAlchemyError as exc:
            raise StorageError() from exc
