"""Tests for the catalog repository and the Redis rate limiter."""

from __future__ import annotations

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError
from redis.exceptions import ConnectionError as RedisConnectionError

from src.catalog.repository import load_health_conditions, load_plans, plan_from_row
from src.models.plan import InsurancePlanRecord
from src.security.rate_limiter import RateLimiter, chat_key

# ── Helpers ──────────────────────────────────────────────────────────


def _row(**overrides) -> InsurancePlanRecord:
    data = {
        "id": uuid.uuid4(),
        "company_name": "Acme",
        "product_name": "Term 20",
        "product_category": "Life",
        "product_price": Decimal("35.00"),
        "product_benefits": "Level premium",
        "available_states": ["tx", "CA"],
        "disqualifying_health_conditions": None,
        "disqualifying_medications": ["Warfarin"],
    }
    data.update(overrides)
    return InsurancePlanRecord(**data)


def _make_db(rows: list) -> AsyncMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    db = AsyncMock()
    db.execute = AsyncMock(return_value=result)
    return db


# ── Repository ───────────────────────────────────────────────────────


class TestPlanFromRow:
    def test_converts_fields(self):
        row = _row()
        plan = plan_from_row(row)
        assert plan.id == str(row.id)
        assert plan.monthly_price == Decimal("35.00")
        assert plan.benefits_description == "Level premium"
        assert plan.available_states == frozenset({"TX", "CA"})
        assert plan.disqualifying_health_conditions == frozenset()
        assert plan.disqualifying_medications == frozenset({"Warfarin"})

    def test_null_states_unrestricted(self):
        assert plan_from_row(_row(available_states=None)).available_states == frozenset()

    def test_null_benefits_empty(self):
        assert plan_from_row(_row(product_benefits=None)).benefits_description == ""

    def test_negative_price_invalid(self):
        with pytest.raises(ValidationError):
            plan_from_row(_row(product_price=Decimal("-1")))


class TestLoadPlans:
    @pytest.mark.asyncio()
    async def test_keeps_query_order(self):
        rows = [_row(product_name="B"), _row(product_name="A")]
        plans = await load_plans(_make_db(rows))
        assert [p.product_name for p in plans] == ["B", "A"]

    @pytest.mark.asyncio()
    async def test_skips_malformed_rows(self):
        rows = [_row(product_name="Good"), _row(company_name=None), _row(product_price=Decimal("-5"))]
        plans = await load_plans(_make_db(rows))
        assert [p.product_name for p in plans] == ["Good"]

    @pytest.mark.asyncio()
    async def test_empty_table(self):
        assert await load_plans(_make_db([])) == []


class TestLoadReference:
    @pytest.mark.asyncio()
    async def test_health_conditions(self):
        db = _make_db(["Asthma", "Diabetes"])
        assert await load_health_conditions(db) == ["Asthma", "Diabetes"]


# ── Rate limiter ─────────────────────────────────────────────────────


def _make_redis(count: int, ttl: int = 30) -> AsyncMock:
    redis = AsyncMock()
    redis.incr = AsyncMock(return_value=count)
    redis.expire = AsyncMock()
    redis.ttl = AsyncMock(return_value=ttl)
    return redis


class TestRateLimiter:
    def test_chat_key(self):
        assert chat_key("broker1") == "rate:chat:broker1"

    @pytest.mark.asyncio()
    async def test_first_request_sets_expiry(self):
        redis = _make_redis(count=1)
        allowed, retry_after = await RateLimiter(redis).check("k", limit=20, window=60)
        assert (allowed, retry_after) == (True, 0)
        redis.expire.assert_awaited_once_with("k", 60)

    @pytest.mark.asyncio()
    async def test_at_limit_allowed(self):
        redis = _make_redis(count=20)
        allowed, _ = await RateLimiter(redis).check("k", limit=20, window=60)
        assert allowed is True
        redis.expire.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_over_limit_blocked(self):
        redis = _make_redis(count=21, ttl=42)
        assert await RateLimiter(redis).check("k", limit=20, window=60) == (False, 42)

    @pytest.mark.asyncio()
    async def test_redis_error_fails_open(self):
        redis = AsyncMock()
        redis.incr = AsyncMock(side_effect=RedisConnectionError("redis down"))
        assert await RateLimiter(redis).check("k", limit=20, window=60) == (True, 0)

    @pytest.mark.asyncio()
    async def test_missing_expiry_is_rearmed(self):
        redis = _make_redis(count=25, ttl=-1)
        assert await RateLimiter(redis).check("k", limit=20, window=60) == (False, 60)
        redis.expire.assert_awaited_once_with("k", 60)

    @pytest.mark.asyncio()
    async def test_check_chat_uses_configured_limit(self):
        redis = _make_redis(count=4, ttl=12)
        mock_settings = MagicMock()
        mock_settings.rate_limit.chat_limit = 3
        mock_settings.rate_limit.chat_window = 60
        with patch("src.security.rate_limiter.settings", mock_settings):
            result = await RateLimiter(redis).check_chat("broker1")

        assert result == (False, 12)
        redis.incr.assert_awaited_once_with("rate:chat:broker1")
