"""Tests for plan table helpers and US display formatters."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from src.eligibility.display import (
    PlanSortField,
    SortDirection,
    filter_plans,
    plan_categories,
    sort_plans,
)
from src.schemas.plans import InsurancePlan
from src.web.formatters import format_date, format_price, format_time_saved


def _plan(plan_id: str, company: str, product: str, category: str, price: str, benefits: str = "") -> InsurancePlan:
    return InsurancePlan(
        id=plan_id,
        company_name=company,
        product_name=product,
        product_category=category,
        monthly_price=Decimal(price),
        benefits_description=benefits,
    )


PLANS = [
    _plan("1", "Acme", "Term 20", "Life", "35.00", "Level premium for 20 years"),
    _plan("2", "Blue Shield", "Gold PPO", "Health", "420.50", "Low deductible"),
    _plan("3", "acme", "Dental Basic", "Dental", "19.99", "Two cleanings a year"),
    _plan("4", "Zenith", "Silver HMO", "Health", "310.00", "Includes vision"),
]


class TestPlanCategories:
    def test_first_seen_order(self):
        assert plan_categories(PLANS) == ["Life", "Health", "Dental"]

    def test_empty(self):
        assert plan_categories([]) == []


class TestFilterPlans:
    def test_no_filters(self):
        assert filter_plans(PLANS) == PLANS

    def test_category(self):
        assert [p.id for p in filter_plans(PLANS, category="Health")] == ["2", "4"]

    def test_search_company_case_insensitive(self):
        assert [p.id for p in filter_plans(PLANS, search="ACME")] == ["1", "3"]

    def test_search_benefits(self):
        assert [p.id for p in filter_plans(PLANS, search="vision")] == ["4"]

    def test_category_and_search(self):
        assert [p.id for p in filter_plans(PLANS, category="Health", search="gold")] == ["2"]

    def test_no_results(self):
        assert filter_plans(PLANS, search="pet insurance") == []


class TestSortPlans:
    def test_default_is_price_ascending(self):
        assert [p.id for p in sort_plans(PLANS)] == ["3", "1", "4", "2"]

    def test_price_descending(self):
        result = sort_plans(PLANS, PlanSortField.MONTHLY_PRICE, SortDirection.DESC)
        assert [p.id for p in result] == ["2", "4", "1", "3"]

    def test_company_ignores_case(self):
        result = sort_plans(PLANS, PlanSortField.COMPANY_NAME)
        assert [p.company_name for p in result] == ["Acme", "acme", "Blue Shield", "Zenith"]

    def test_product_name(self):
        result = sort_plans(PLANS, PlanSortField.PRODUCT_NAME)
        assert [p.product_name for p in result] == ["Dental Basic", "Gold PPO", "Silver HMO", "Term 20"]

    def test_does_not_mutate_input(self):
        before = list(PLANS)
        sort_plans(PLANS, PlanSortField.PRODUCT_CATEGORY, SortDirection.DESC)
        assert before == PLANS


# ── Formatters ───────────────────────────────────────────────────────


class TestFormatPrice:
    def test_decimal(self):
        assert format_price(Decimal("35")) == "$35.00"

    def test_thousands(self):
        assert format_price(Decimal("1234.5")) == "$1,234.50"

    def test_float(self):
        assert format_price(19.99) == "$19.99"

    def test_zero(self):
        assert format_price(0) == "$0.00"

    def test_none(self):
        assert format_price(None) == "-"


class TestFormatDate:
    def test_date(self):
        assert format_date(date(2024, 3, 7)) == "03/07/2024"

    def test_none(self):
        assert format_date(None) == "-"


class TestFormatTimeSaved:
    def test_minutes_only(self):
        assert format_time_saved(45) == "45m"

    def test_hours_and_minutes(self):
        assert format_time_saved(125) == "2h 5m"

    def test_exact_hour(self):
        assert format_time_saved(60) == "1h 0m"

    def test_negative_clamped(self):
        assert format_time_saved(-3) == "0m"
