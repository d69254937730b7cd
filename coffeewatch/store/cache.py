"""Persisted snapshot identity.

A single row in a key-value table holds the handles of the last notified
snapshot, encoded either as a comma-joined string or as a JSON array.
"""

from __future__ import annotations

import json
import logging
from typing import Sequence

from sqlalchemy import Column, MetaData, Table, Text, select
from sqlalchemy.engine import Engine

from coffeewatch.logic.policies import JOIN_SEPARATOR

logger = logging.getLogger(__name__)

metadata = MetaData()

kv = Table(
    "kv",
    metadata,
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),
)


class KeyValueStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(engine)

    def get(self, key: str) -> str | None:
        with self.engine.connect() as conn:
            return conn.execute(select(kv.c.value).where(kv.c.key == key)).scalar_one_or_none()

    def put(self, key: str, value: str) -> None:
        with self.engine.begin() as conn:
            updated = conn.execute(kv.update().where(kv.c.key == key).values(value=value))
            if updated.rowcount == 0:
                conn.execute(kv.insert().values(key=key, value=value))


def encode_handles(handles: Sequence[str], codec: str) -> str:
    if codec == "joined":
        return JOIN_SEPARATOR.join(handles)
    if codec == "json":
        return json.dumps(list(handles))
    raise ValueError(f"Unknown cache codec {codec!r}")


def decode_handles(value: str | None, codec: str) -> tuple[str, ...] | None:
    """Decode a stored value; anything unreadable counts as no prior state."""
    if value is None:
        return None
    if codec == "joined":
        return tuple(value.split(JOIN_SEPARATOR)) if value else ()
    if codec != "json":
        raise ValueError(f"Unknown cache codec {codec!r}")
    try:
        data = json.loads(value)
    except json.JSONDecodeError:
        logger.warning("Stored snapshot is not valid JSON; ignoring it")
        return None
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        logger.warning("Stored snapshot is not a list of handles; ignoring it")
        return None
    return tuple(data)


def load_handles(store: KeyValueStore, key: str, codec: str) -> tuple[str, ...] | None:
    return decode_handles(store.get(key), codec)


def save_handles(store: KeyValueStore, key: str, handles: Sequence[str], codec: str) -> None:
    store.put(key, encode_handles(handles, codec))
