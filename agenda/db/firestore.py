import json
import logging
import os
from datetime import date, datetime, time
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import GoogleAPICallError
from google.auth.exceptions import GoogleAuthError
from google.cloud.firestore import FieldFilter

from agenda.core.errors import StorageError
from agenda.db.repository import COLLECTIONS, Record, Repository

logger = logging.getLogger("agenda.db")

# Firestore only stores datetimes; plain dates and times go in as ISO strings
# and the pydantic models parse them back on read.


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def _to_document(record: Record) -> Record:
    return {key: _encode(value) for key, value in record.items()}


def _sort_key(field: str):
    def _key(record: Record):
        value = record.get(field)
        return (value is not None, value if value is not None else 0, record.get("id") or "")

    return _key


def _firebase_credentials():
    credentials_json = os.getenv("FIREBASE_CREDENTIALS_JSON")
    credentials_path = os.getenv("FIREBASE_CREDENTIALS_PATH")
    if credentials_json:
        return credentials.Certificate(json.loads(credentials_json))
    if credentials_path:
        return credentials.Certificate(credentials_path)
    return credentials.ApplicationDefault()


def create_firestore_client():
    if firebase_admin._apps:
        app = firebase_admin.get_app()
    else:
        project_id = os.getenv("FIREBASE_PROJECT_ID")
        app_options = {"projectId": project_id} if project_id else None
        app = firebase_admin.initialize_app(_firebase_credentials(), app_options)
    return firestore.client(app)


class FirestoreRepository(Repository):
    backend_name = "firestore"

    def __init__(self, client, collection_prefix: str = "") -> None:
        self.client = client
        self.collection_prefix = collection_prefix

    def _collection(self, collection: str):
        if collection not in COLLECTIONS:
            raise StorageError(f"Colecao desconhecida: {collection}")
        return self.client.collection(f"{self.collection_prefix}{collection}")

    def prepare(self) -> None:
        try:
            for collection in COLLECTIONS:
                list(self._collection(collection).limit(1).stream())
        except (GoogleAPICallError, GoogleAuthError) as exc:
            logger.error("firestore unavailable: %s", exc)
            raise StorageError("Firestore indisponivel") from exc
        logger.info("firestore storage ready prefix=%r", self.collection_prefix)

    def find(self, collection: str, record_id: str) -> Optional[Record]:
        try:
            snapshot = self._collection(collection).document(record_id).get()
        except GoogleAPICallError as exc:
            raise StorageError() from exc
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def find_all(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        query = self._collection(collection)
        for field, value in (filters or {}).items():
            query = query.where(filter=FieldFilter(field, "==", _encode(value)))
        try:
            records = [snapshot.to_dict() for snapshot in query.stream()]
        except GoogleAPICallError as exc:
            raise StorageError() from exc
        # ordering in memory keeps equality queries free of composite indexes
        if order_by:
            records.sort(key=_sort_key(order_by), reverse=descending)
        return records

    def insert(self, collection: str, record: Record) -> Record:
        try:
            self._collection(collection).document(record["id"]).set(_to_document(record))
        except GoogleAPICallError as exc:
            raise StorageError() from exc
        return dict(record)

    def update(self, collection: str, record_id: str, fields: Record) -> Optional[Record]:
        ref = self._collection(collection).document(record_id)
        try:
            if not ref.get().exists:
                return None
            ref.update(_to_document(fields))
            return ref.get().to_dict()
        except GoogleAPICallError as exc:
            raise StorageError() from exc

    def delete(self, collection: str, record_id: str) -> bool:
        ref = self._collection(collection).document(record_id)
        try:
            if not ref.get().exists:
                return False
            ref.delete()
        except GoogleAPICallError as exc:
            raise StorageError() from exc
        return True
