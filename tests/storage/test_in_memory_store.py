from datetime import datetime, timedelta, timezone

import pytest

from bookkeep.storage import DuplicateKeyError, InMemoryBookStore, InMemoryUserStore


def _record(owner, title="Dune", minutes_ago=0):
    return {
        "owner": owner,
        "title": title,
        "author": "Herbert",
        "totalPages": 412,
        "currentPage": 0,
        "genre": "Sci-Fi",
        "status": "unread",
        "dateAdded": datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    }


class TestInMemoryUserStore:
    @pytest.mark.asyncio
    async def test_create_and_fetch(self):
        store = InMemoryUserStore()
        user = await store.create_user("alice", "a@x.com", "hash")

        assert user["id"]
        fetched = await store.get_user_by_email("a@x.com")
        assert fetched["id"] == user["id"]
        assert fetched["username"] == "alice"

    @pytest.mark.asyncio
    async def test_duplicate_email(self):
        store = InMemoryUserStore()
        await store.create_user("alice", "a@x.com", "hash")

        with pytest.raises(DuplicateKeyError):
            await store.create_user("other", "a@x.com", "hash2")
        assert store.count() == 1

    @pytest.mark.asyncio
    async def test_missing_user(self):
        store = InMemoryUserStore()
        assert await store.get_user_by_email("none@x.com") is None

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self):
        store = InMemoryUserStore()
        user = await store.create_user("alice", "a@x.com", "hash")
        user["username"] = "mallory"

        assert (await store.get_user_by_email("a@x.com"))["username"] == "alice"


class TestInMemoryBookStore:
    @pytest.mark.asyncio
    async def test_insert_assigns_unique_ids(self):
        store = InMemoryBookStore()
        first = await store.insert(_record("u1"))
        second = await store.insert(_record("u1"))

        assert first["id"] != second["id"]

    @pytest.mark.asyncio
    async def test_insert_ignores_supplied_id(self):
        store = InMemoryBookStore()
        stored = await store.insert({**_record("u1"), "id": "mine"})
        assert stored["id"] != "mine"

    @pytest.mark.asyncio
    async def test_list_by_owner_sorted_newest_first(self):
        store = InMemoryBookStore()
        await store.insert(_record("u1", "old", minutes_ago=10))
        await store.insert(_record("u1", "new", minutes_ago=1))
        await store.insert(_record("u2", "other"))

        titles = [b["title"] for b in await store.list_by_owner("u1")]
        assert titles == ["new", "old"]

    @pytest.mark.asyncio
    async def test_update_requires_owner_match(self):
        store = InMemoryBookStore()
        book = await store.insert(_record("u1"))

        assert await store.update_owned(book["id"], "u2", {"title": "x"}) is None
        updated = await store.update_owned(book["id"], "u1", {"title": "x"})
        assert updated["title"] == "x"

    @pytest.mark.asyncio
    async def test_update_missing(self):
        store = InMemoryBookStore()
        assert await store.update_owned("nope", "u1", {"title": "x"}) is None

    @pytest.mark.asyncio
    async def test_delete_requires_owner_match(self):
        store = InMemoryBookStore()
        book = await store.insert(_record("u1"))

        assert await store.delete_owned(book["id"], "u2") is None
        assert store.count() == 1
        assert (await store.delete_owned(book["id"], "u1"))["id"] == book["id"]
        assert store.count() == 0
