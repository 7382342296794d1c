"""Peewee ORM models for the bookmark database."""

from __future__ import annotations

import datetime as _dt
from typing import Any

import peewee

from myfc.core.time_utils import utc_now

# A proxy that will be initialised with the concrete database instance at runtime.
database_proxy: peewee.Database = peewee.DatabaseProxy()


class BaseModel(peewee.Model):
    """Base Peewee model bound to the lazily initialised database proxy."""

    class Meta:
        database = database_proxy
        legacy_table_names = False


def _utcnow_naive() -> _dt.datetime:
    # SQLite stores naive timestamps; every value written here is UTC
    return utc_now().replace(tzinfo=None)


class Bookmark(BaseModel):
    """A user's bookmark of one workout."""

    id = peewee.AutoField()
    user_id = peewee.TextField()
    workout_id = peewee.TextField()
    created_at = peewee.DateTimeField(default=_utcnow_naive)

    class Meta:
        table_name = "bookmarks"
        indexes = (
            (("user_id", "workout_id"), True),
            (("user_id", "created_at"), False),
        )


ALL_MODELS = (Bookmark,)


def bookmark_to_dict(bookmark: Bookmark) -> dict[str, Any]:
    created_at = bookmark.created_at
    if isinstance(created_at, _dt.datetime) and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=_dt.UTC)
    return {
        "id": bookmark.id,
        "workoutId": bookmark.workout_id,
        "createdAt": created_at.isoformat().replace("+00:00", "Z")
        if isinstance(created_at, _dt.datetime)
        else created_at,
    }
