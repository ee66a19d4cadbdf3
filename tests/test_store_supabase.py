"""Tests for the Supabase query helper and store, using a recording fake client."""

from types import SimpleNamespace

import pytest

from skillswap.core.exceptions import StoreError
from skillswap.core.supabase import execute_query
from skillswap.services.store_supabase import SupabaseStore


class FakeQuery:
    """Query builder that records each chained call."""

    def __init__(self, client, table):
        self.client = client
        self.calls = [("table", (table,), {})]

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return record

    def execute(self):
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.rows)


class FakeClient:

    def __init__(self, rows=None, error=None):
        self.rows = rows if rows is not None else []
        self.error = error
        self.queries = []

    def table(self, name):
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query

    @property
    def last_calls(self):
        return self.queries[-1].calls


class TestExecuteQuery:

    @pytest.mark.asyncio
    async def test_select_builds_filters_order_and_limit(self):
        client = FakeClient(rows=[{"id": "r1"}])

        rows = await execute_query(
            client,
            table="swap_requests",
            query_type="select",
            filters={"status": "pending"},
            or_filter="from_user_id.eq.u1,to_user_id.eq.u1",
            order_by={"created_at": "desc"},
            limit=5
        )

        assert rows == [{"id": "r1"}]
        assert client.last_calls == [
            ("table", ("swap_requests",), {}),
            ("select", ("*",), {}),
            ("eq", ("status", "pending"), {}),
            ("or_", ("from_user_id.eq.u1,to_user_id.eq.u1",), {}),
            ("order", ("created_at",), {"desc": True}),
            ("limit", (5,), {}),
        ]

    @pytest.mark.asyncio
    async def test_order_and_limit_only_apply_to_select(self):
        client = FakeClient(rows=[{"id": "u1"}])

        await execute_query(
            client,
            table="profiles",
            query_type="update",
            data={"rating": 4.0},
            filters={"id": "u1"},
            order_by={"created_at": "asc"},
            limit=1
        )

        names = [name for name, _, _ in client.last_calls]
        assert names == ["table", "update", "eq"]

    @pytest.mark.asyncio
    async def test_empty_result_is_an_empty_list(self):
        client = FakeClient()
        client.rows = None
        assert await execute_query(client, table="profiles", query_type="select") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query_type,data,filters", [
        ("insert", None, None),
        ("update", None, {"id": "u1"}),
        ("update", {"rating": 1}, None),
        ("delete", None, None),
        ("truncate", None, None),
    ])
    async def test_invalid_arguments_raise_value_error(self, query_type, data, filters):
        client = FakeClient()

        with pytest.raises(ValueError):
            await execute_query(client, table="profiles", query_type=query_type, data=data, filters=filters)

    @pytest.mark.asyncio
    async def test_backend_failure_is_wrapped(self):
        cause = ConnectionError("connection reset")
        client = FakeClient(error=cause)

        with pytest.raises(StoreError) as exc_info:
            await execute_query(client, table="ratings", query_type="select")

        assert exc_info.value.__cause__ is cause
        assert "ratings" in exc_info.value.detail


class TestSupabaseStore:

    @pytest.mark.asyncio
    async def test_get_profile(self):
        client = FakeClient(rows=[{"id": "u1", "name": "Alex"}])
        store = SupabaseStore(client)

        assert (await store.get_profile("u1"))["name"] == "Alex"
        assert ("eq", ("id", "u1"), {}) in client.last_calls
        assert ("limit", (1,), {}) in client.last_calls

        client.rows = []
        assert await store.get_profile("ghost") is None

    @pytest.mark.asyncio
    async def test_party_lists_use_or_filter(self):
        client = FakeClient()
        store = SupabaseStore(client)

        await store.list_swap_requests("u1")
        assert ("or_", ("from_user_id.eq.u1,to_user_id.eq.u1",), {}) in client.last_calls
        assert ("order", ("created_at",), {"desc": True}) in client.last_calls

        await store.list_ratings("u2")
        assert client.last_calls[0] == ("table", ("ratings",), {})
        assert ("or_", ("from_user_id.eq.u2,to_user_id.eq.u2",), {}) in client.last_calls

    @pytest.mark.asyncio
    async def test_public_profiles_filter(self):
        client = FakeClient()
        await SupabaseStore(client).list_public_profiles()
        assert ("eq", ("is_public", True), {}) in client.last_calls

    @pytest.mark.asyncio
    async def test_insert_swap_request_defaults_to_pending(self):
        client = FakeClient(rows=[{"id": "r1"}])

        await SupabaseStore(client).insert_swap_request({"from_user_id": "u1", "to_user_id": "u2"})

        name, args, _ = client.last_calls[1]
        assert name == "insert"
        assert args[0]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_find_ratings_filters_by_request_and_rater(self):
        client = FakeClient()

        await SupabaseStore(client).find_ratings("r1", "u1")

        assert ("eq", ("swap_request_id", "r1"), {}) in client.last_calls
        assert ("eq", ("from_user_id", "u1"), {}) in client.last_calls

    @pytest.mark.asyncio
    async def test_delete_reports_whether_a_row_was_removed(self):
        client = FakeClient(rows=[{"id": "r1"}])
        store = SupabaseStore(client)

        assert await store.delete_swap_request("r1") is True
        assert [name for name, _, _ in client.last_calls] == ["table", "delete", "eq"]

        client.rows = []
        assert await store.delete_swap_request("r1") is False

    @pytest.mark.asyncio
    async def test_update_missing_row(self):
        client = FakeClient(rows=[])
        store = SupabaseStore(client)

        assert await store.update_swap_request("ghost", {"status": "accepted"}) is None
        assert await store.update_profile_rating("ghost", 4.0, 1) is None

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self):
        store = SupabaseStore(FakeClient(error=TimeoutError("read timed out")))

        with pytest.raises(StoreError) as exc_info:
            await store.insert_rating({"rating": 5})

        assert isinstance(exc_info.value.__cause__, TimeoutError)
