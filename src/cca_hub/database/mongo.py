from __future__ import annotations

from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database


class MongoConnection:
    """Lazily created, process-wide Mongo client (pymongo pools internally)."""

    _instance: Optional["MongoConnection"] = None

    def __init__(self, uri: str, db_name: str):
        self._uri = uri
        self._db_name = db_name
        self._client: Optional[MongoClient] = None

    @classmethod
    def get_instance(cls, uri: str, db_name: str) -> "MongoConnection":
        if cls._instance is None:
            cls._instance = MongoConnection(uri, db_name)
        return cls._instance

    def database(self) -> Database:
        if self._client is None:
            self._client = MongoClient(self._uri, tz_aware=True)
        return self._client[self._db_name]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
