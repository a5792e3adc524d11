from __future__ import annotations

import asyncio
import logging
import os
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Protocol

import psycopg2
from psycopg2 import sql

from ..config.loader import ImportConfig
from ..models.contact import DEFAULT_ROLE, StoredContact

"""Storage backends used by the commit engine.

The commit engine only needs `await store.create(fields)` returning the stored
contact, or None when the backend rejects the row. Two implementations:

- InMemoryContactStore: mock mode (dry runs, tests, DB unavailable)
- PostgresContactStore: live mode, one INSERT ... RETURNING per contact,
  committed individually so one bad row never rolls back earlier ones

Connection parameters are resolved in this order:
    1. DATABASE_URL / PGDSN (a `.env` file is loaded with override by the CLI)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the `database` section of config/import.yml
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ContactStore",
    "ContactStoreError",
    "InMemoryContactStore",
    "PostgresContactStore",
    "resolve_dsn",
    "connect",
]


class ContactStoreError(Exception):
    """Backend failure while creating a contact (connection, SQL error)."""


class ContactStore(Protocol):
    async def create(self, fields: Mapping[str, str]) -> StoredContact | None: ...

    def contacts(self) -> list[StoredContact]: ...


def _violates_table_checks(fields: Mapping[str, str]) -> bool:
    # contacts_name_check / contacts_contact_check 相当
    if not (fields.get("name") or "").strip():
        return True
    return not (fields.get("phone") or fields.get("email"))


class InMemoryContactStore:
    """Process-local store mirroring the destination table's CHECK constraints."""

    def __init__(self) -> None:
        self._contacts: list[StoredContact] = []

    async def create(self, fields: Mapping[str, str]) -> StoredContact | None:
        if _violates_table_checks(fields):
            logger.debug("in-memory store rejected row name=%r", fields.get("name"))
            return None
        contact = StoredContact(
            id=str(uuid.uuid4()),
            name=fields["name"],
            phone=fields.get("phone") or "",
            email=fields.get("email") or "",
            role=fields.get("role") or DEFAULT_ROLE,
            organization=fields.get("organization") or "",
            notes=fields.get("notes") or "",
            created_at=datetime.now(UTC),
        )
        self._contacts.append(contact)
        return contact

    def contacts(self) -> list[StoredContact]:
        return list(self._contacts)

    def __len__(self) -> int:
        return len(self._contacts)


class PostgresContactStore:
    """psycopg2 backed store (one transaction per contact)."""

    COLUMNS = ("name", "phone", "email", "role", "organization", "notes")

    def __init__(self, conn: Any, table: str = "zero_contacts") -> None:
        self._conn = conn
        self._table = table
        self._created: list[StoredContact] = []  # この接続で作成した分のみ

    def _insert_sql(self) -> sql.Composed:
        table = sql.Identifier(*self._table.split("."))
        cols = sql.SQL(",").join(sql.Identifier(c) for c in self.COLUMNS)
        placeholders = sql.SQL(",").join(sql.Placeholder() for _ in self.COLUMNS)
        return sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING id, created_at").format(
            table, cols, placeholders
        )

    def create_sync(self, fields: Mapping[str, str]) -> StoredContact | None:
        """Insert one contact; None when the row violates a table constraint.

        Raises:
            ContactStoreError: any other database error
        """
        values = (
            fields.get("name") or "",
            fields.get("phone") or "",
            fields.get("email") or "",
            fields.get("role") or DEFAULT_ROLE,
            fields.get("organization") or None,  # 空文字は NULL で保存
            fields.get("notes") or None,
        )
        try:
            with self._conn.cursor() as cur:
                cur.execute(self._insert_sql(), values)
                row = cur.fetchone()
            self._conn.commit()
        except psycopg2.IntegrityError as e:
            self._rollback()
            logger.debug("insert rejected by constraint name=%r: %s", values[0], e)
            return None
        except psycopg2.Error as e:
            self._rollback()
            raise ContactStoreError(str(e).strip() or type(e).__name__) from e

        if row is None:
            return None
        contact_id, created_at = row[0], row[1]
        contact = StoredContact(
            id=str(contact_id),
            name=values[0],
            phone=values[1],
            email=values[2],
            role=values[3],
            organization=values[4] or "",
            notes=values[5] or "",
            created_at=created_at if isinstance(created_at, datetime) else datetime.now(UTC),
        )
        self._created.append(contact)
        return contact

    def contacts(self) -> list[StoredContact]:
        return list(self._created)

    async def create(self, fields: Mapping[str, str]) -> StoredContact | None:
        # ブロッキング I/O はワーカースレッドで実行 (呼び出しは常に 1 件ずつ)
        return await asyncio.to_thread(self.create_sync, fields)

    def _rollback(self) -> None:
        try:
            self._conn.rollback()
        except psycopg2.Error:  # pragma: no cover
            logger.debug("rollback failed", exc_info=True)


def resolve_dsn(cfg: ImportConfig) -> str:
    """Build the libpq DSN from the environment, falling back to config."""
    db_cfg = cfg.database
    dsn_env = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn_env:
        return dsn_env
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def connect(cfg: ImportConfig) -> Iterator[PostgresContactStore]:  # pragma: no cover (needs a live DB)
    """Open a psycopg2 connection and yield a PostgresContactStore bound to it."""
    conn = psycopg2.connect(resolve_dsn(cfg))
    conn.autocommit = False
    try:
        yield PostgresContactStore(conn, table=cfg.contacts_table)
    finally:
        conn.close()
