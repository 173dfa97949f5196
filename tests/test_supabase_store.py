"""Supabase 适配器单元测试（不访问网络）。"""

import asyncio
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from collabswipe.errors import MatchStoreError, QuotaGateError
from collabswipe.models import Match
from collabswipe.services.supabase_store import (
    SupabaseClient,
    SupabaseClientError,
    SupabaseMatchStore,
    SupabaseProfileSource,
    SupabaseQuotaGate,
)


def make_client(tables=None):
    """构建按表名返回行的 Mock 客户端。"""
    tables = tables or {}
    client = MagicMock(spec=SupabaseClient)
    client.select.side_effect = lambda table, params=None: list(tables.get(table, []))
    return client


class TestSupabaseClient:
    """测试 HTTP 客户端。"""

    def test_requires_credentials(self):
        with pytest.raises(SupabaseClientError):
            SupabaseClient(url="", key="")

    def test_select_sends_auth_headers(self):
        client = SupabaseClient(url="https://db.example.co/", key="secret")
        response = MagicMock(content=b"[]", status_code=200)
        response.json.return_value = [{"id": "user_1"}]
        client.session.request = MagicMock(return_value=response)

        rows = client.select("users", {"id": "eq.user_1"})

        assert rows == [{"id": "user_1"}]
        method, url = client.session.request.call_args.args
        assert (method, url) == ("GET", "https://db.example.co/rest/v1/users")
        assert client.session.request.call_args.kwargs["params"] == {"select": "*", "id": "eq.user_1"}
        assert client.session.headers["apikey"] == "secret"

    def test_http_error_is_wrapped(self):
        client = SupabaseClient(url="https://db.example.co", key="secret")
        client.session.request = MagicMock(side_effect=requests.ConnectionError("down"))

        with pytest.raises(SupabaseClientError) as exc_info:
            client.select("users")

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


class TestSupabaseProfileSource:
    """测试 users 表读取。"""

    def test_current_profile(self, raw_profile):
        source = SupabaseProfileSource(make_client({"users": [raw_profile]}), "user_9")

        viewer = asyncio.run(source.get_current_profile())

        assert viewer.name == "Nina Keys"

    def test_missing_current_profile(self):
        source = SupabaseProfileSource(make_client(), "user_9")

        assert asyncio.run(source.get_current_profile()) is None


class TestSupabaseMatchStore:
    """测试 matches 表写入。"""

    def test_add_match_inserts_row(self):
        client = make_client()
        match = Match.create("user_1", "user_2")

        asyncio.run(SupabaseMatchStore(client).add_match(match))

        client.insert.assert_called_once_with("matches", match.to_dict())

    def test_pair_filter_quotes_ids(self):
        """测试包含保留字符的 id 在过滤条件中被加引号。"""
        client = make_client()
        match = Match.create("a,b)", 'say "hi"')

        asyncio.run(SupabaseMatchStore(client).add_match(match))

        table, params = client.select.call_args.args
        assert table == "matches"
        assert params["or"] == (
            '(and(user_id.eq."a,b)",matched_user_id.eq."say \\"hi\\""),'
            'and(user_id.eq."say \\"hi\\"",matched_user_id.eq."a,b)"))'
        )

    def test_existing_pair_rejected(self):
        client = make_client({"matches": [{"id": "m1"}]})

        with pytest.raises(MatchStoreError):
            asyncio.run(SupabaseMatchStore(client).add_match(Match.create("user_2", "user_1")))

        client.insert.assert_not_called()

    def test_client_error_becomes_store_error(self):
        client = make_client()
        client.select.side_effect = SupabaseClientError("boom")

        with pytest.raises(MatchStoreError):
            asyncio.run(SupabaseMatchStore(client).get_matches())


class TestSupabaseQuotaGate:
    """测试 user_limits / subscriptions 配额。"""

    today = date(2024, 5, 1)

    def make_gate(self, tables):
        return SupabaseQuotaGate(make_client(tables), "user_1", likes_per_day=3, clock=lambda: self.today)

    def test_premium_always_allowed(self):
        gate = self.make_gate({
            "subscriptions": [{"status": "active"}],
            "user_limits": [{"likes_used_today": 99, "last_like_reset_date": "2024-05-01"}],
        })

        assert asyncio.run(gate.can_accept_now()).allowed

    def test_free_user_over_limit_blocked(self):
        gate = self.make_gate({
            "user_limits": [{"likes_used_today": 3, "last_like_reset_date": "2024-05-01"}],
        })

        state = asyncio.run(gate.can_accept_now())

        assert not state.allowed
        assert "3 likes per day" in state.reason

    def test_stale_counter_is_reset(self):
        """测试跨天的计数被重置。"""
        gate = self.make_gate({
            "user_limits": [{"likes_used_today": 3, "last_like_reset_date": "2024-04-30"}],
        })

        assert asyncio.run(gate.can_accept_now()).allowed
        gate._client.update.assert_called_once_with(
            "user_limits",
            {"user_id": "eq.user_1"},
            {"likes_used_today": 0, "last_like_reset_date": "2024-05-01"},
        )

    def test_missing_row_is_created(self):
        gate = self.make_gate({})

        assert asyncio.run(gate.can_accept_now()).allowed
        gate._client.insert.assert_called_once()

    def test_consume_increments_counter(self):
        gate = self.make_gate({
            "user_limits": [{"likes_used_today": 1, "last_like_reset_date": "2024-05-01"}],
        })

        asyncio.run(gate.consume_one())

        table, filters, values = gate._client.update.call_args.args
        assert table == "user_limits"
        assert values["likes_used_today"] == 2

    def test_client_error_becomes_quota_error(self):
        gate = self.make_gate({})
        gate._client.select.side_effect = SupabaseClientError("boom")

        with pytest.raises(QuotaGateError):
            asyncio.run(gate.can_accept_now())
