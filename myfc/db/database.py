from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import peewee

from myfc.db.models import ALL_MODELS, Bookmark, bookmark_to_dict, database_proxy

T = TypeVar("T")

# Prevents indefinite hangs on lock acquisition or slow operations
DB_OPERATION_TIMEOUT = 30.0

# Maximum retries for transient database errors
DB_MAX_RETRIES = 3


@dataclass
class Database:
    """Peewee-backed bookmark storage with async entry points.

    Blocking peewee calls run in a worker thread; an ``asyncio.Lock`` serializes
    them so a toggle's read-then-write cannot interleave with another request.
    """

    path: str
    operation_timeout: float = DB_OPERATION_TIMEOUT
    max_retries: int = DB_MAX_RETRIES
    _logger: logging.Logger = logging.getLogger(__name__)
    _database: peewee.SqliteDatabase = field(init=False)
    _db_lock: asyncio.Lock = field(init=False)

    def __post_init__(self) -> None:
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._database = peewee.SqliteDatabase(
            self.path,
            pragmas={
                "journal_mode": "wal",
                "synchronous": "normal",
                "busy_timeout": 5000,
            },
            check_same_thread=False,
        )
        database_proxy.initialize(self._database)
        self._db_lock = asyncio.Lock()

    def migrate(self) -> None:
        with self._database.connection_context():
            self._database.create_tables(ALL_MODELS, safe=True)
        self._logger.info("db_migrated", extra={"db_path": self.path})

    def close(self) -> None:
        if not self._database.is_closed():
            self._database.close()
            self._logger.info("database_closed")

    async def _safe_db_operation(
        self,
        operation: Callable[..., T],
        *args: Any,
        operation_name: str = "database_operation",
    ) -> T:
        """Execute a blocking operation with timeout and retry on a locked database.

        Raises:
            TimeoutError: If the operation times out
            peewee.OperationalError: If the database stays locked after retries
        """
        retries = 0
        while True:
            try:
                async with asyncio.timeout(self.operation_timeout):
                    async with self._db_lock:
                        return await asyncio.to_thread(self._run_in_connection, operation, *args)
            except TimeoutError:
                self._logger.error(
                    "db_operation_timeout",
                    extra={"operation": operation_name, "timeout": self.operation_timeout},
                )
                raise
            except peewee.OperationalError as e:
                if "locked" not in str(e).lower() or retries >= self.max_retries:
                    self._logger.error(
                        "db_operation_failed",
                        extra={"operation": operation_name, "error": str(e), "retries": retries},
                    )
                    raise
                retries += 1
                self._logger.warning(
                    "db_locked_retrying",
                    extra={"operation": operation_name, "retry": retries},
                )
                await asyncio.sleep(0.1 * (2**retries))

    def _run_in_connection(self, operation: Callable[..., T], *args: Any) -> T:
        with self._database.connection_context():
            return operation(*args)

    async def toggle_bookmark(self, user_id: str, workout_id: str) -> bool:
        """Add the bookmark if absent, remove it if present.

        Returns:
            Membership after the toggle
        """
        return await self._safe_db_operation(
            self._toggle_bookmark_sync, user_id, workout_id, operation_name="toggle_bookmark"
        )

    def _toggle_bookmark_sync(self, user_id: str, workout_id: str) -> bool:
        with self._database.atomic():
            deleted = (
                Bookmark.delete()
                .where((Bookmark.user_id == user_id) & (Bookmark.workout_id == workout_id))
                .execute()
            )
            if deleted:
                self._logger.info(
                    "bookmark_removed", extra={"user_id": user_id, "workout_id": workout_id}
                )
                return False
            try:
                Bookmark.create(user_id=user_id, workout_id=workout_id)
            except peewee.IntegrityError:
                # Lost a race with a concurrent insert from another process
                self._logger.warning(
                    "bookmark_insert_conflict",
                    extra={"user_id": user_id, "workout_id": workout_id},
                )
            self._logger.info(
                "bookmark_added", extra={"user_id": user_id, "workout_id": workout_id}
            )
            return True

    async def is_bookmarked(self, user_id: str, workout_id: str) -> bool:
        return await self._safe_db_operation(
            self._is_bookmarked_sync, user_id, workout_id, operation_name="is_bookmarked"
        )

    @staticmethod
    def _is_bookmarked_sync(user_id: str, workout_id: str) -> bool:
        return (
            Bookmark.select()
            .where((Bookmark.user_id == user_id) & (Bookmark.workout_id == workout_id))
            .exists()
        )

    async def list_bookmarks(self, user_id: str) -> list[dict[str, Any]]:
        """All of a user's bookmarks, newest first."""
        return await self._safe_db_operation(
            self._list_bookmarks_sync, user_id, operation_name="list_bookmarks"
        )

    @staticmethod
    def _list_bookmarks_sync(user_id: str) -> list[dict[str, Any]]:
        query = (
            Bookmark.select()
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        )
        return [bookmark_to_dict(bookmark) for bookmark in query]

