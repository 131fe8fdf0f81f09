# src/tiercascade/tiers/sqlite.py
"""
SQLite Store Tier - durable key/value storage, normally the last tier.

Items are JSON payloads in a single table shared by all entities; rows are
keyed by ``(entity, key)`` so two entities may use the same logical keys.
Get-all and list collections are stored as JSON arrays under their
collection keys.

Expiry is stored with each row and checked on read: an expired row is
deleted and reported as a miss. In sliding mode a successful read pushes
the row's expiry out by the tier's TTL, never past the tier's absolute
expiration instant (kept per row as ``hard_expires_at``).

The connection is opened lazily on first use, once even when several calls
arrive together; call :meth:`close` (or use the tier as an async context
manager) to release it.

Example::

    async with SQLiteStoreTier("Order", db_path="/tmp/orders.db", item_type=Order) as store:
        await store.set("42", order)
        order = await store.get("42")
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ..cascade.expiration import to_timestamp
from ..cascade.options import Capability
from ..cascade.tier import CascadeTier, K, T
from ..config.models import ExpirationMode
from ..exceptions import CascadeConfigError
from .codec import ItemCodec

logger = logging.getLogger(__name__)


class SQLiteStoreTier(CascadeTier[T, K]):
    """Durable store tier using aiosqlite.

    Args:
        entity: Item schema name.
        db_path: SQLite database file (``":memory:"`` for a private database).
        table_name: Table holding the rows.
        item_type: Type used to decode payloads (default: plain JSON values).
        **kwargs: Passed to :class:`CascadeTier`.
    """

    kind_capabilities = frozenset({Capability.DURABLE_STORE})

    def __init__(
        self,
        entity: str,
        *,
        db_path: str = "~/.local/share/tiercascade/store.db",
        table_name: str = "cascade_store",
        item_type: Any = Any,
        **kwargs: Any,
    ) -> None:
        super().__init__(entity, **kwargs)
        if not table_name.replace("_", "").isalnum() or table_name[0].isdigit():
            raise CascadeConfigError(f"Invalid table name: {table_name!r}")
        self.db_path = db_path
        self.table_name = table_name
        self._codec: ItemCodec[T] = ItemCodec(item_type, entity)
        self._db: aiosqlite.Connection | None = None
        self._open_lock = asyncio.Lock()

    async def __aenter__(self) -> SQLiteStoreTier[T, K]:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def initialize(self) -> aiosqlite.Connection:
        """Open the database and create the table if needed.

        Returns:
            The open connection; repeated and concurrent calls share it.
        """
        async with self._open_lock:
            if self._db is not None:
                return self._db

            db_path = self.db_path
            if db_path != ":memory:":
                db_path = os.path.expanduser(db_path)
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)

            db = await aiosqlite.connect(db_path)
            await db.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table_name} (
                    entity TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    expires_at REAL,
                    sliding_seconds REAL,
                    hard_expires_at REAL,
                    updated_at REAL NOT NULL,
                    PRIMARY KEY (entity, key)
                )
            """)
            await db.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{self.table_name}_expiry "
                f"ON {self.table_name}(expires_at)"
            )
            await db.commit()
            self._db = db
            logger.info("%s initialized at %s.", self.name, db_path)
            return db

    async def close(self) -> None:
        """Close the database connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
            logger.info("%s closed.", self.name)

    async def cleanup_expired(self) -> int:
        """Remove this entity's expired rows. Returns the number removed."""
        db = await self._connection()
        cursor = await db.execute(
            f"DELETE FROM {self.table_name} "
            "WHERE entity = ? AND expires_at IS NOT NULL AND expires_at <= ?",
            (self.entity, self._now()),
        )
        await db.commit()
        return cursor.rowcount

    # -- Internal helpers ----------------------------------------------------

    async def _connection(self) -> aiosqlite.Connection:
        if self._db is not None:
            return self._db
        return await self.initialize()

    def _now(self) -> float:
        return self._clock.now().timestamp()

    async def _read(self, key: str) -> str | None:
        db = await self._connection()
        now = self._now()
        async with db.execute(
            f"SELECT value, expires_at, sliding_seconds, hard_expires_at "
            f"FROM {self.table_name} WHERE entity = ? AND key = ?",
            (self.entity, key),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        value, expires_at, sliding_seconds, hard_expires_at = row
        if expires_at is not None and expires_at <= now:
            await db.execute(
                f"DELETE FROM {self.table_name} WHERE entity = ? AND key = ?",
                (self.entity, key),
            )
            await db.commit()
            return None

        if sliding_seconds is not None:
            renewed = now + sliding_seconds
            if hard_expires_at is not None:
                renewed = min(renewed, hard_expires_at)
            await db.execute(
                f"UPDATE {self.table_name} SET expires_at = ? WHERE entity = ? AND key = ?",
                (renewed, self.entity, key),
            )
            await db.commit()

        return value

    async def _write(self, key: str, payload: bytes, expires_at: datetime | None, sliding: bool) -> None:
        db = await self._connection()
        now = self._now()
        expiry = to_timestamp(expires_at)
        sliding_seconds = None
        hard_expiry = None
        if sliding and self.time_to_live is not None:
            sliding_seconds = self.time_to_live.total_seconds()
            hard_expiry = to_timestamp(self.absolute_expiration)

        await db.execute(
            f"""INSERT OR REPLACE INTO {self.table_name}
               (entity, key, value, expires_at, sliding_seconds, hard_expires_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (self.entity, key, payload.decode("utf-8"), expiry, sliding_seconds, hard_expiry, now),
        )
        await db.commit()

    # -- Backend primitives --------------------------------------------------

    async def _core_get(self, key: Any) -> T | None:
        payload = await self._read(str(key))
        return None if payload is None else self._codec.loads(payload)

    async def _core_get_all(self, all_key: str) -> list[T]:
        payload = await self._read(all_key)
        return [] if payload is None else self._codec.loads_many(payload)

    async def _core_get_list(self, list_key: str) -> list[T]:
        payload = await self._read(list_key)
        return [] if payload is None else self._codec.loads_many(payload)

    async def _core_set(self, key: Any, item: T, expires_at: datetime | None) -> None:
        sliding = self.expiration_mode == ExpirationMode.SLIDING
        await self._write(str(key), self._codec.dumps(item), expires_at, sliding)

    async def _core_set_all(self, all_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._write(all_key, self._codec.dumps_many(items), expires_at, sliding=False)

    async def _core_set_list(self, list_key: str, items: list[T], expires_at: datetime | None) -> None:
        await self._write(list_key, self._codec.dumps_many(items), expires_at, sliding=False)

    async def _core_delete(self, key: Any) -> None:
        db = await self._connection()
        await db.execute(
            f"DELETE FROM {self.table_name} WHERE entity = ? AND key = ?",
            (self.entity, str(key)),
        )
        await db.commit()
