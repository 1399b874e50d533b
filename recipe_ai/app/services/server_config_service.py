"""Server configuration store.

Admin-editable settings live in the ``server_config`` table as one JSON row
per ``ServerConfigKey``. Every read is validated against the record type
registered for its key, so callers get a typed model or ``None``.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from recipe_ai.app.db import models
from recipe_ai.app.schemas.server_config import CONFIG_RECORD_TYPES, ServerConfigKey

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class ConfigStore(Protocol):
    async def get(self, key: ServerConfigKey) -> Optional[BaseModel]:
        ...

    async def set(
        self, key: ServerConfigKey, value: BaseModel, actor_id: Optional[str], sensitive: bool
    ) -> None:
        ...

    async def delete(self, key: ServerConfigKey) -> None:
        ...


def parse_record(key: ServerConfigKey, raw: Any) -> Optional[BaseModel]:
    """Validate a raw stored value against the record type for ``key``."""
    if raw is None:
        return None
    record_type = CONFIG_RECORD_TYPES[key]
    try:
        return record_type.model_validate(raw)
    except ValidationError as exc:
        logger.warning(
            "Stored config for key=%s does not match %s; ignoring (%d errors)",
            key.value,
            record_type.__name__,
            exc.error_count(),
        )
        return None


class DatabaseConfigStore:
    """ConfigStore backed by the ``server_config`` table.

    Session work runs in the threadpool so awaiting callers do not block the
    event loop. A ``Session`` is not thread-safe, so calls on one store are
    serialized by a lock.
    """

    def __init__(self, db: Session):
        self.db = db
        self._lock = asyncio.Lock()

    async def _run(self, fn, *args):
        async with self._lock:
            return await run_in_threadpool(fn, *args)

    def _get_sync(self, key: ServerConfigKey) -> Optional[BaseModel]:
        row = self.db.get(models.ServerConfig, key.value)
        if row is None:
            return None
        return parse_record(key, row.value)

    def _set_sync(self, key: ServerConfigKey, payload: Any, actor_id: Optional[str], sensitive: bool) -> None:
        row = self.db.get(models.ServerConfig, key.value)
        if row is None:
            row = models.ServerConfig(key=key.value)
            self.db.add(row)
        row.value = payload
        row.is_sensitive = sensitive
        row.updated_by = actor_id
        self.db.commit()

    def _delete_sync(self, key: ServerConfigKey) -> bool:
        row = self.db.get(models.ServerConfig, key.value)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    async def get(self, key: ServerConfigKey) -> Optional[BaseModel]:
        return await self._run(self._get_sync, key)

    async def set(
        self, key: ServerConfigKey, value: BaseModel, actor_id: Optional[str], sensitive: bool
    ) -> None:
        record_type = CONFIG_RECORD_TYPES[key]
        if not isinstance(value, record_type):
            raise TypeError(f"Config key {key.value} expects {record_type.__name__}, got {type(value).__name__}")
        await self._run(self._set_sync, key, value.model_dump(mode="json"), actor_id, sensitive)
        logger.debug("Stored config key=%s sensitive=%s actor=%s", key.value, sensitive, actor_id)

    async def delete(self, key: ServerConfigKey) -> None:
        if await self._run(self._delete_sync, key):
            logger.debug("Deleted config key=%s", key.value)


async def get_typed(store: ConfigStore, key: ServerConfigKey, record_type: type[RecordT]) -> Optional[RecordT]:
    value = await store.get(key)
    if value is None:
        return None
    if not isinstance(value, record_type):
        raise TypeError(f"Config key {key.value} resolved to {type(value).__name__}, expected {record_type.__name__}")
    return value
