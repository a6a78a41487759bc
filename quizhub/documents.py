"""
A small key/value document table on top of SQLModel.

Each collection keeps JSON objects addressed by a partition key and an
optional sort key, with the five operations the handlers rely on:
get, put (overwrite), delete, scan with an equality filter, and query by
partition key.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import select

from quizhub.db import get_session
from quizhub.models import DocumentRecord, now_utc

logger = logging.getLogger(__name__)


def _encode(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class DocumentTable:
    def __init__(self, engine, name: str, partition_key: str, sort_key: Optional[str] = None):
        self.engine = engine
        self.name = name
        self.partition_key = partition_key
        self.sort_key = sort_key

    def _keys(self, item: Dict[str, Any]):
        try:
            pk = item[self.partition_key]
        except KeyError:
            raise ValueError(f"{self.name}: item is missing key '{self.partition_key}'")
        sk = ""
        if self.sort_key:
            try:
                sk = item[self.sort_key]
            except KeyError:
                raise ValueError(f"{self.name}: item is missing key '{self.sort_key}'")
        return str(pk), str(sk)

    def get_item(self, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        pk, sk = self._keys(key)
        with get_session(self.engine) as session:
            record = session.get(DocumentRecord, (self.name, pk, sk))
            return json.loads(record.body) if record else None

    def put_item(self, item: Dict[str, Any]):
        pk, sk = self._keys(item)
        body = json.dumps(item, default=_encode)
        with get_session(self.engine) as session:
            record = session.get(DocumentRecord, (self.name, pk, sk))
            if record is None:
                record = DocumentRecord(collection=self.name, partition_key=pk, sort_key=sk, body=body)
            else:
                record.body = body
                record.updated_at = now_utc()
            session.add(record)
            session.commit()

    def delete_item(self, key: Dict[str, Any]) -> bool:
        pk, sk = self._keys(key)
        with get_session(self.engine) as session:
            record = session.get(DocumentRecord, (self.name, pk, sk))
            if not record:
                return False
            session.delete(record)
            session.commit()
            return True

    def scan(self, **equals) -> List[Dict[str, Any]]:
        """Every item of the collection whose fields equal the given values."""
        with get_session(self.engine) as session:
            q = select(DocumentRecord).where(DocumentRecord.collection == self.name)
            records = list(session.exec(q))
        items = []
        for record in records:
            try:
                item = json.loads(record.body)
            except ValueError:
                logger.warning("Skipping unreadable document %s/%s", self.name, record.partition_key)
                continue
            if all(item.get(field) == value for field, value in equals.items()):
                items.append(item)
        return items

    def query(self, partition_value: str) -> List[Dict[str, Any]]:
        """Items sharing a partition key, ordered by sort key."""
        with get_session(self.engine) as session:
            q = (
                select(DocumentRecord)
                .where(DocumentRecord.collection == self.name)
                .where(DocumentRecord.partition_key == str(partition_value))
                .order_by(DocumentRecord.sort_key)
            )
            return [json.loads(r.body) for r in session.exec(q)]


class DocumentClient:
    """Hands out tables that share one engine."""

    def __init__(self, engine):
        self.engine = engine

    def table(self, name: str, partition_key: str, sort_key: Optional[str] = None) -> DocumentTable:
        return DocumentTable(self.engine, name, partition_key, sort_key)
