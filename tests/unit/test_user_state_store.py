"""Unit tests for the in-memory user state store and key definitions."""

import asyncio
import uuid

import pytest

from src.kernel.state.channel import StateChannel
from src.kernel.state.key_definition import (
    ClearEvent,
    UserKeyDefinition,
    definitions_cleared_on,
)
from src.kernel.state.user_state_store import InMemoryUserStateStore

NOTES_KEY = UserKeyDefinition.array("test", "notes", deserializer=str)
SESSION_KEY = UserKeyDefinition.array(
    "test", "sessionItems", deserializer=str, clear_on=[ClearEvent.LOGOUT]
)


class TestUserKeyDefinition:
    """Tests for state key definitions."""

    def test_storage_key_joins_namespace_and_key(self):
        assert SESSION_KEY.storage_key == "test.sessionItems"

    def test_array_deserializes_each_element(self):
        numbers = UserKeyDefinition.array("test", "numbers", deserializer=int)
        assert numbers.deserialize(["1", "2"]) == [1, 2]
        assert numbers.deserialize(None) is None

    def test_registry_filters_by_event(self):
        cleared = definitions_cleared_on(ClearEvent.LOGOUT)

        assert SESSION_KEY in cleared
        assert NOTES_KEY not in cleared


class TestStateChannel:
    """Tests for value fan-out."""

    def test_publish_reaches_every_subscriber(self):
        channel = StateChannel()
        first = channel.subscribe()
        second = channel.subscribe()

        channel.publish("value")

        assert first.get_nowait() == "value"
        assert second.get_nowait() == "value"

    def test_unsubscribed_queue_gets_nothing(self):
        channel = StateChannel()
        queue = channel.subscribe()
        channel.unsubscribe(queue)

        channel.publish("value")

        assert queue.empty()
        assert channel.subscriber_count == 0


class TestInMemoryUserStateStore:
    """Tests for the in-memory store contract."""

    @pytest.mark.asyncio
    async def test_absent_is_none(self, state_store, user_id):
        assert await state_store.get(user_id, NOTES_KEY) is None

    @pytest.mark.asyncio
    async def test_empty_list_is_present(self, state_store, user_id):
        await state_store.update(user_id, NOTES_KEY, lambda _: [])

        assert await state_store.get(user_id, NOTES_KEY) == []

    @pytest.mark.asyncio
    async def test_update_receives_current_value(self, state_store, user_id):
        seen = []

        def append(current):
            seen.append(current)
            return (current or []) + ["x"]

        await state_store.update(user_id, NOTES_KEY, append)
        await state_store.update(user_id, NOTES_KEY, append)

        assert seen == [None, ["x"]]
        assert await state_store.get(user_id, NOTES_KEY) == ["x", "x"]

    @pytest.mark.asyncio
    async def test_update_returning_none_deletes(self, state_store, user_id):
        await state_store.update(user_id, NOTES_KEY, lambda _: ["x"])
        await state_store.update(user_id, NOTES_KEY, lambda _: None)

        assert await state_store.get(user_id, NOTES_KEY) is None

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, state_store, user_id):
        other_id = uuid.uuid4()
        await state_store.update(user_id, NOTES_KEY, lambda _: ["mine"])

        assert await state_store.get(other_id, NOTES_KEY) is None

    @pytest.mark.asyncio
    async def test_returned_value_is_a_copy(self, state_store, user_id):
        await state_store.update(user_id, NOTES_KEY, lambda _: ["x"])

        value = await state_store.get(user_id, NOTES_KEY)
        value.append("mutated")

        assert await state_store.get(user_id, NOTES_KEY) == ["x"]

    @pytest.mark.asyncio
    async def test_concurrent_updates_are_not_lost(self, state_store, user_id):
        await asyncio.gather(*[
            state_store.update(user_id, NOTES_KEY, lambda cur, i=i: (cur or []) + [str(i)])
            for i in range(10)
        ])

        assert sorted(await state_store.get(user_id, NOTES_KEY)) == sorted(str(i) for i in range(10))

    @pytest.mark.asyncio
    async def test_watch_yields_current_then_writes(self, state_store, user_id):
        await state_store.update(user_id, NOTES_KEY, lambda _: ["first"])
        stream = state_store.watch(user_id, NOTES_KEY)
        try:
            assert await asyncio.wait_for(stream.__anext__(), 1) == ["first"]

            await state_store.update(user_id, NOTES_KEY, lambda _: ["second"])
            assert await asyncio.wait_for(stream.__anext__(), 1) == ["second"]
        finally:
            await stream.aclose()

    @pytest.mark.asyncio
    async def test_clear_on_logout_removes_only_declared_keys(self, state_store, user_id):
        await state_store.update(user_id, NOTES_KEY, lambda _: ["keep"])
        await state_store.update(user_id, SESSION_KEY, lambda _: ["drop"])

        await state_store.clear_on(user_id, ClearEvent.LOGOUT)

        assert await state_store.get(user_id, NOTES_KEY) == ["keep"]
        assert await state_store.get(user_id, SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_clear_on_notifies_watchers(self, state_store, user_id):
        await state_store.update(user_id, SESSION_KEY, lambda _: ["drop"])
        stream = state_store.watch(user_id, SESSION_KEY)
        try:
            assert await asyncio.wait_for(stream.__anext__(), 1) == ["drop"]

            await state_store.clear_on(user_id, ClearEvent.LOGOUT)
            assert await asyncio.wait_for(stream.__anext__(), 1) is None
        finally:
            await stream.aclose()

    @pytest.mark.asyncio
    async def test_watch_releases_channel_after_last_watcher(self, state_store):
        for _ in range(50):
            stream = state_store.watch(uuid.uuid4(), NOTES_KEY)
            await asyncio.wait_for(stream.__anext__(), 1)
            await stream.aclose()

        assert state_store._channels == {}

    @pytest.mark.asyncio
    async def test_channel_kept_while_another_watcher_remains(self, state_store, user_id):
        first = state_store.watch(user_id, NOTES_KEY)
        second = state_store.watch(user_id, NOTES_KEY)
        await asyncio.wait_for(first.__anext__(), 1)
        await asyncio.wait_for(second.__anext__(), 1)
        try:
            await first.aclose()
            await state_store.update(user_id, NOTES_KEY, lambda _: ["still heard"])

            assert await asyncio.wait_for(second.__anext__(), 1) == ["still heard"]
        finally:
            await second.aclose()

        assert state_store._channels == {}
