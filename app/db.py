"""
Document persistence for users and posts.

Two interchangeable backends with the same semantics:

  • ``SqliteStore`` – durable, one JSON document per row (aiosqlite)
  • ``MemoryStore`` – process-local lists, used when no DB_PATH is set

The backend is picked once by ``create_store()``; nothing else in the
application knows which one is active.
"""

from __future__ import annotations

import copy
import json
import logging
import re
import time
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from app.config import DB_PATH

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "posts")

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

Document = dict[str, Any]


class Store(Protocol):
    name: str

    async def open(self) -> None: ...

    async def close(self) -> None: ...

    async def insert(self, collection: str, document: Document) -> str: ...

    async def find(self, collection: str, filter: Document | None = None) -> list[Document]: ...

    async def update(
        self,
        collection: str,
        filter: Document,
        values: Document,
        *,
        upsert: bool = False,
    ) -> tuple[int, str | None]: ...


# ── Helpers ───────────────────────────────────────────────────────────────


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")


def _check_fields(filter: Document) -> None:
    for field in filter:
        if not _FIELD_RE.match(field):
            raise ValueError(f"Invalid filter field: {field!r}")


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Cannot serialise {type(value).__name__}")


def _normalise(document: Document) -> Document:
    """Round-trip through JSON so both backends return identical shapes."""
    return json.loads(json.dumps(document, default=_json_default))


class _IdFactory:
    """Millisecond ids, bumped on collision so two inserts never share one."""

    def __init__(self) -> None:
        self._last = 0

    def __call__(self) -> str:
        candidate = int(time.time() * 1000)
        self._last = max(candidate, self._last + 1)
        return str(self._last)


def _matches(document: Document, filter: Document) -> bool:
    return all(document.get(key) == value for key, value in filter.items())


# ══════════════════════════════════════════════════════════════════════════
#                           MEMORY STORE
# ══════════════════════════════════════════════════════════════════════════


class MemoryStore:
    name = "memory"

    def __init__(self) -> None:
        self._data: dict[str, list[Document]] = {c: [] for c in COLLECTIONS}
        self._next_id = _IdFactory()

    async def open(self) -> None:
        logger.warning("No DB_PATH provided. Using in-memory storage for users and posts.")

    async def close(self) -> None:
        pass

    async def insert(self, collection: str, document: Document) -> str:
        _check_collection(collection)
        stored = _normalise(document)
        stored["_id"] = self._next_id()
        self._data[collection].append(stored)
        return stored["_id"]

    async def find(self, collection: str, filter: Document | None = None) -> list[Document]:
        _check_collection(collection)
        filter = filter or {}
        _check_fields(filter)
        return [copy.deepcopy(d) for d in self._data[collection] if _matches(d, filter)]

    async def update(
        self,
        collection: str,
        filter: Document,
        values: Document,
        *,
        upsert: bool = False,
    ) -> tuple[int, str | None]:
        _check_collection(collection)
        _check_fields(filter)
        changes = _normalise(values)
        changes.pop("_id", None)
        modified = 0
        for document in self._data[collection]:
            if _matches(document, filter):
                document.update(changes)
                modified += 1
        if modified or not upsert:
            return modified, None
        upserted_id = await self.insert(collection, {**filter, **changes})
        return 0, upserted_id


# ══════════════════════════════════════════════════════════════════════════
#                           SQLITE STORE
# ══════════════════════════════════════════════════════════════════════════

_SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    id          TEXT NOT NULL,
    collection  TEXT NOT NULL,
    body        TEXT NOT NULL,      -- JSON object, includes _id
    seq         INTEGER PRIMARY KEY AUTOINCREMENT
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_docs_id ON documents(collection, id);
"""


class SqliteStore:
    name = "sqlite"

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        self._next_id = _IdFactory()

    async def open(self) -> None:
        """Open the database and create tables if they don't exist."""
        path = Path(self._db_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        self._db = await aiosqlite.connect(str(path))
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.executescript(_SCHEMA)
        await self._db.commit()
        logger.info("Database initialized at %s", path)

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    def _conn(self) -> aiosqlite.Connection:
        assert self._db is not None, "Database not initialized, call open() first"
        return self._db

    async def insert(self, collection: str, document: Document) -> str:
        _check_collection(collection)
        db = self._conn()
        stored = _normalise(document)
        stored["_id"] = self._next_id()
        await db.execute(
            "INSERT INTO documents (id, collection, body) VALUES (?, ?, ?)",
            (stored["_id"], collection, json.dumps(stored)),
        )
        await db.commit()
        return stored["_id"]

    async def find(self, collection: str, filter: Document | None = None) -> list[Document]:
        _check_collection(collection)
        filter = filter or {}
        _check_fields(filter)
        sql = "SELECT body FROM documents WHERE collection = ?"
        params: list[Any] = [collection]
        for field, value in filter.items():
            # json_extract cannot express equality with objects; match those in Python
            if isinstance(value, (dict, list)):
                continue
            sql += f" AND json_extract(body, '$.{field}') IS ?"
            params.append(int(value) if isinstance(value, bool) else value)
        sql += " ORDER BY seq"

        async with self._conn().execute(sql, params) as cur:
            rows = await cur.fetchall()
        documents = [json.loads(row["body"]) for row in rows]
        return [d for d in documents if _matches(d, filter)]

    async def update(
        self,
        collection: str,
        filter: Document,
        values: Document,
        *,
        upsert: bool = False,
    ) -> tuple[int, str | None]:
        db = self._conn()
        changes = _normalise(values)
        changes.pop("_id", None)
        matched = await self.find(collection, filter)
        for document in matched:
            document.update(changes)
            await db.execute(
                "UPDATE documents SET body = ? WHERE collection = ? AND id = ?",
                (json.dumps(document), collection, document["_id"]),
            )
        await db.commit()
        if matched or not upsert:
            return len(matched), None
        upserted_id = await self.insert(collection, {**filter, **changes})
        return 0, upserted_id


def create_store(db_path: str | None = None) -> Store:
    """Pick the backend once at startup."""
    path = DB_PATH if db_path is None else db_path
    if path:
        return SqliteStore(path)
    return MemoryStore()
