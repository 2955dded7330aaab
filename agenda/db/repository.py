"""Storage interface shared by the relational and document backends.

Records travel as plain dicts keyed by the Python field names of the
domain models (``nome_cliente``, ``created_at`` ...). Every record carries a
string ``id``; backends never generate ids themselves.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

USERS = "users"
AGENDAMENTOS = "agendamentos"
COLLECTIONS = (USERS, AGENDAMENTOS)

Record = dict[str, Any]


class Repository(ABC):
    backend_name = "unknown"

    @abstractmethod
    def prepare(self) -> None:
        """Check connectivity and create whatever schema the backend needs.

        Raises ``StorageError`` when the store is unreachable.
        """

    @abstractmethod
    def find(self, collection: str, record_id: str) -> Optional[Record]:
        ...

    @abstractmethod
    def find_all(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        ...

    @abstractmethod
    def insert(self, collection: str, record: Record) -> Record:
        ...

    @abstractmethod
    def update(self, collection: str, record_id: str, fields: Record) -> Optional[Record]:
        """Apply ``fields`` to an existing record; ``None`` when the id is unknown."""

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> bool:
        ...

    def find_one(self, collection: str, filters: dict[str, Any]) -> Optional[Record]:
        records = self.find_all(collection, filters)
        return records[0] if records else None
