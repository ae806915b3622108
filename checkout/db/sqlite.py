from __future__ import annotations

import os
import sqlite3
from datetime import datetime
from typing import Dict, Optional, Protocol

from checkout.config import settings


class Storage(Protocol):
    """Durable key-value slot store (browser localStorage equivalent)."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


def _connect(db_path: Optional[str] = None) -> sqlite3.Connection:
    path = db_path or settings.db_path
    dirname = os.path.dirname(path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Optional[str] = None) -> None:
    conn = _connect(db_path)
    try:
        with open(os.path.join(os.path.dirname(__file__), "schema.sql"), "r", encoding="utf-8") as f:
            conn.executescript(f.read())
        conn.commit()
    finally:
        conn.close()


class SqliteStorage:
    """One row per (namespace, key); every call opens its own connection.

    Errors are raised as sqlite3.Error; callers decide whether they matter.
    """

    def __init__(self, namespace: str, db_path: Optional[str] = None) -> None:
        self.namespace = namespace
        self.db_path = db_path or settings.db_path

    def get(self, key: str) -> Optional[str]:
        conn = _connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT value FROM kv WHERE namespace=? AND key=?",
                (self.namespace, key),
            ).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        updated_at = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        conn = _connect(self.db_path)
        try:
            conn.execute(
                "INSERT INTO kv(namespace, key, value, updated_at) VALUES(?,?,?,?) "
                "ON CONFLICT(namespace, key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (self.namespace, key, value, updated_at),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = _connect(self.db_path)
        try:
            conn.execute("DELETE FROM kv WHERE namespace=? AND key=?", (self.namespace, key))
            conn.commit()
        finally:
            conn.close()


class MemoryStorage:
    def __init__(self, data: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
