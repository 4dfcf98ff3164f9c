"""
Per-user key-value state store.

Contract shared by every implementation:

- get() returns None when the slot has never been written (absent), which
  is different from a stored empty list.
- update() applies the caller's function to a consistent snapshot and
  writes the result in one transaction. Returning None deletes the slot.
- watch() yields the current value, then every value written through the
  same store instance.
"""

import asyncio
import uuid
import weakref
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Callable, Dict, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.kernel.models.user_state import UserStateRecord
from src.kernel.state.channel import StateChannel
from src.kernel.state.key_definition import (
    ClearEvent,
    UserKeyDefinition,
    definitions_cleared_on,
)
from src.logging_config import get_logger

logger = get_logger(__name__)

UpdateFn = Callable[[Optional[Any]], Optional[Any]]


class UserStateStore(ABC):
    """Base class for per-user state stores."""

    def __init__(self) -> None:
        self._channels: Dict[Tuple[uuid.UUID, str], StateChannel] = {}

    def _channel(self, user_id: uuid.UUID, key: UserKeyDefinition) -> StateChannel:
        """Channel for a slot; it is dropped again when its last watcher leaves."""
        slot = (user_id, key.storage_key)
        channel = self._channels.get(slot)
        if channel is None:
            channel = StateChannel()
            self._channels[slot] = channel
        return channel

    def _publish(self, user_id: uuid.UUID, key: UserKeyDefinition, value: Any) -> None:
        channel = self._channels.get((user_id, key.storage_key))
        if channel is not None:
            channel.publish(value)

    @abstractmethod
    async def get(self, user_id: uuid.UUID, key: UserKeyDefinition) -> Optional[Any]:
        """Read the current value, or None if the slot is absent."""

    @abstractmethod
    async def update(
        self,
        user_id: uuid.UUID,
        key: UserKeyDefinition,
        update_fn: UpdateFn,
    ) -> Optional[Any]:
        """Atomically replace the value with update_fn(current) and return it."""

    @abstractmethod
    async def _delete(self, user_id: uuid.UUID, key: UserKeyDefinition) -> None:
        """Remove a slot without notifying watchers."""

    async def watch(
        self,
        user_id: uuid.UUID,
        key: UserKeyDefinition,
    ) -> AsyncIterator[Optional[Any]]:
        """Yield the current value, then each subsequent write."""
        channel = self._channel(user_id, key)
        # Subscribe before reading so no write between the two is missed
        queue = channel.subscribe()
        try:
            yield await self.get(user_id, key)
            while True:
                yield await queue.get()
        finally:
            channel.unsubscribe(queue)
            slot = (user_id, key.storage_key)
            if channel.subscriber_count == 0 and self._channels.get(slot) is channel:
                del self._channels[slot]

    async def clear_on(self, user_id: uuid.UUID, event: ClearEvent) -> int:
        """
        Remove every slot whose definition is cleared on the given event.

        Returns:
            Number of definitions cleared
        """
        definitions = definitions_cleared_on(event)
        for key in definitions:
            await self._delete(user_id, key)
            self._publish(user_id, key, None)
        logger.info(
            "Cleared user state on %s",
            event.value,
            extra={"user_id": str(user_id), "keys": [d.storage_key for d in definitions]},
        )
        return len(definitions)


class InMemoryUserStateStore(UserStateStore):
    """
    Process-local store.

    Updates run without awaiting between read and write, so they are atomic
    with respect to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        super().__init__()
        self._values: Dict[Tuple[uuid.UUID, str], Any] = {}

    async def get(self, user_id: uuid.UUID, key: UserKeyDefinition) -> Optional[Any]:
        raw = self._values.get((user_id, key.storage_key))
        return key.deserialize(raw)

    async def update(
        self,
        user_id: uuid.UUID,
        key: UserKeyDefinition,
        update_fn: UpdateFn,
    ) -> Optional[Any]:
        slot = (user_id, key.storage_key)
        current = key.deserialize(self._values.get(slot))
        new_value = update_fn(current)
        if new_value is None:
            self._values.pop(slot, None)
        else:
            self._values[slot] = list(new_value) if isinstance(new_value, list) else new_value
        self._publish(user_id, key, new_value)
        return new_value

    async def _delete(self, user_id: uuid.UUID, key: UserKeyDefinition) -> None:
        self._values.pop((user_id, key.storage_key), None)


class SqlUserStateStore(UserStateStore):
    """
    Store backed by the user_state table.

    Each update is one transaction that reads the row with SELECT ... FOR
    UPDATE (a no-op on SQLite, which serializes writers on its own).
    Same-slot updates from this process are additionally serialized with an
    asyncio.Lock, kept only while some coroutine holds or waits on it.
    Writers in other processes racing on a slot that does not exist yet can
    still collide on the unique constraint; that write is lost.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self._session_maker = session_maker
        self._locks: "weakref.WeakValueDictionary[Tuple[uuid.UUID, str], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock(self, user_id: uuid.UUID, key: UserKeyDefinition) -> asyncio.Lock:
        slot = (user_id, key.storage_key)
        lock = self._locks.get(slot)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[slot] = lock
        return lock

    @staticmethod
    def _select(user_id: uuid.UUID, key: UserKeyDefinition):
        return select(UserStateRecord).where(
            UserStateRecord.user_id == user_id,
            UserStateRecord.state_key == key.storage_key,
        )

    async def get(self, user_id: uuid.UUID, key: UserKeyDefinition) -> Optional[Any]:
        async with self._session_maker() as session:
            result = await session.execute(self._select(user_id, key))
            record = result.scalar_one_or_none()
            if record is None:
                return None
            return key.deserialize(record.value)

    async def update(
        self,
        user_id: uuid.UUID,
        key: UserKeyDefinition,
        update_fn: UpdateFn,
    ) -> Optional[Any]:
        async with self._lock(user_id, key):
            async with self._session_maker() as session:
                async with session.begin():
                    result = await session.execute(
                        self._select(user_id, key).with_for_update()
                    )
                    record = result.scalar_one_or_none()
                    current = key.deserialize(record.value) if record is not None else None
                    new_value = update_fn(current)

                    if new_value is None:
                        if record is not None:
                            await session.delete(record)
                    elif record is None:
                        session.add(UserStateRecord(
                            user_id=user_id,
                            state_key=key.storage_key,
                            value=new_value,
                        ))
                    else:
                        record.value = new_value

        self._publish(user_id, key, new_value)
        return new_value

    async def _delete(self, user_id: uuid.UUID, key: UserKeyDefinition) -> None:
        async with self._lock(user_id, key):
            async with self._session_maker() as session:
                async with session.begin():
                    await session.execute(
                        delete(UserStateRecord).where(
                            UserStateRecord.user_id == user_id,
                            UserStateRecord.state_key == key.storage_key,
                        )
                    )
