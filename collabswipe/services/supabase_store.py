"""Supabase store adapters.

Implements the store interfaces against a Supabase (PostgREST) backend:
- users: profile records
- matches: match records
- subscriptions / user_limits: premium status and daily like counters

The HTTP client is blocking (requests); every call is pushed onto a worker
thread with asyncio.to_thread so the event loop never blocks.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any

import requests

from config import FREE_LIKES_PER_DAY, SUPABASE_KEY, SUPABASE_TIMEOUT, SUPABASE_URL
from collabswipe.errors import CollabSwipeError, MatchStoreError, QuotaGateError
from collabswipe.models import Match, Profile, QuotaState
from collabswipe.services.stores import MatchStore, ProfileSource, QuotaGate

logger = logging.getLogger(__name__)


class SupabaseClientError(CollabSwipeError):
    """Raised when a Supabase request fails."""
    pass


class SupabaseClient:
    """Minimal PostgREST client over requests."""

    def __init__(
        self,
        url: str = SUPABASE_URL,
        key: str = SUPABASE_KEY,
        timeout: float = SUPABASE_TIMEOUT,
    ):
        if not url or not key:
            raise SupabaseClientError("SUPABASE_URL and SUPABASE_KEY must be set")
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _request(self, method: str, table: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/{table}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SupabaseClientError(f"{method} {table} failed: {e}") from e
        logger.debug("[supabase] %s %s -> %d", method, table, response.status_code)
        if not response.content:
            return None
        return response.json()

    def select(self, table: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        query = {"select": "*"}
        query.update(params or {})
        rows = self._request("GET", table, params=query)
        return rows if isinstance(rows, list) else []

    def insert(self, table: str, row: dict[str, Any]) -> None:
        self._request("POST", table, json=row, headers={"Prefer": "return=minimal"})

    def update(self, table: str, filters: dict[str, str], values: dict[str, Any]) -> None:
        self._request("PATCH", table, params=filters, json=values, headers={"Prefer": "return=minimal"})


class SupabaseProfileSource(ProfileSource):
    """Profiles from the ``users`` table."""

    def __init__(self, client: SupabaseClient, current_user_id: str):
        self._client = client
        self.current_user_id = current_user_id

    async def get_current_profile(self) -> Profile | None:
        rows = await asyncio.to_thread(
            self._client.select, "users", {"id": f"eq.{self.current_user_id}"}
        )
        if not rows:
            return None
        return Profile.from_dict(rows[0])

    async def get_all_profiles(self) -> list[Profile | dict[str, Any]]:
        return await asyncio.to_thread(self._client.select, "users")


def _quote(value: str) -> str:
    """Quote a value for a PostgREST logic filter so reserved characters stay literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SupabaseMatchStore(MatchStore):
    """Matches in the ``matches`` table, one row per unordered pair."""

    def __init__(self, client: SupabaseClient):
        self._client = client

    async def get_matches(self) -> list[Match | dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._client.select, "matches")
        except SupabaseClientError as e:
            raise MatchStoreError(str(e)) from e

    def _pair_filter(self, match: Match) -> dict[str, str]:
        a, b = _quote(match.user_id), _quote(match.matched_user_id)
        return {
            "or": f"(and(user_id.eq.{a},matched_user_id.eq.{b}),"
                  f"and(user_id.eq.{b},matched_user_id.eq.{a}))",
        }

    def _add_match(self, match: Match) -> None:
        if self._client.select("matches", self._pair_filter(match)):
            raise MatchStoreError(f"Pair {sorted(match.pair)} is already matched")
        self._client.insert("matches", match.to_dict())

    async def add_match(self, match: Match) -> None:
        try:
            await asyncio.to_thread(self._add_match, match)
        except SupabaseClientError as e:
            raise MatchStoreError(str(e)) from e


def _today() -> date:
    return datetime.now(timezone.utc).date()


class SupabaseQuotaGate(QuotaGate):
    """Daily like quota kept in ``user_limits``; premium users are unlimited."""

    def __init__(
        self,
        client: SupabaseClient,
        user_id: str,
        likes_per_day: int = FREE_LIKES_PER_DAY,
        clock: Callable[[], date] = _today,
    ):
        self._client = client
        self.user_id = user_id
        self.likes_per_day = likes_per_day
        self._clock = clock

    def _is_premium(self) -> bool:
        rows = self._client.select(
            "subscriptions", {"user_id": f"eq.{self.user_id}", "status": "eq.active"}
        )
        return bool(rows)

    def _likes_used_today(self) -> int:
        """Current counter, creating or resetting the row as needed."""
        today = self._clock().isoformat()
        rows = self._client.select("user_limits", {"user_id": f"eq.{self.user_id}"})
        if not rows:
            self._client.insert("user_limits", {
                "user_id": self.user_id,
                "likes_used_today": 0,
                "last_like_reset_date": today,
            })
            return 0
        limits = rows[0]
        if limits.get("last_like_reset_date") != today:
            self._client.update(
                "user_limits",
                {"user_id": f"eq.{self.user_id}"},
                {"likes_used_today": 0, "last_like_reset_date": today},
            )
            return 0
        return int(limits.get("likes_used_today") or 0)

    def _check(self) -> QuotaState:
        if self._is_premium():
            return QuotaState(allowed=True)
        if self._likes_used_today() >= self.likes_per_day:
            return QuotaState(
                allowed=False,
                reason=(
                    f"Free users get {self.likes_per_day} likes per day. "
                    "Upgrade to Premium for unlimited likes!"
                ),
            )
        return QuotaState(allowed=True)

    def _consume(self) -> None:
        if self._is_premium():
            return
        used = self._likes_used_today()
        self._client.update(
            "user_limits",
            {"user_id": f"eq.{self.user_id}"},
            {
                "likes_used_today": used + 1,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    async def can_accept_now(self) -> QuotaState:
        try:
            return await asyncio.to_thread(self._check)
        except SupabaseClientError as e:
            raise QuotaGateError(str(e)) from e

    async def consume_one(self) -> None:
        try:
            await asyncio.to_thread(self._consume)
        except SupabaseClientError as e:
            raise QuotaGateError(str(e)) from e
