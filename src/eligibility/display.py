"""Presentation helpers for matched plan lists.

Category filter, free-text search and sorting used by the plans endpoint.
None of this affects which plans match; it only reorders or narrows a list
the engine already produced.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from src.schemas.plans import InsurancePlan


class PlanSortField(str, Enum):
    """Columns the plan table can be sorted by."""

    COMPANY_NAME = "company_name"
    PRODUCT_NAME = "product_name"
    PRODUCT_CATEGORY = "product_category"
    MONTHLY_PRICE = "monthly_price"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


def plan_categories(plans: Iterable[InsurancePlan]) -> list[str]:
    """Unique categories in first-seen order."""
    return list(dict.fromkeys(plan.product_category for plan in plans))


def filter_plans(
    plans: Iterable[InsurancePlan],
    category: str | None = None,
    search: str | None = None,
) -> list[InsurancePlan]:
    """Keep plans in `category` (exact) whose company, product or benefits contain `search`."""
    needle = search.strip().lower() if search else ""
    filtered: list[InsurancePlan] = []
    for plan in plans:
        if category and plan.product_category != category:
            continue
        if needle and not (
            needle in plan.company_name.lower()
            or needle in plan.product_name.lower()
            or needle in plan.benefits_description.lower()
        ):
            continue
        filtered.append(plan)
    return filtered


def sort_plans(
    plans: Iterable[InsurancePlan],
    field: PlanSortField = PlanSortField.MONTHLY_PRICE,
    direction: SortDirection = SortDirection.ASC,
) -> list[InsurancePlan]:
    """Sort by price numerically, by any other column case-insensitively."""
    reverse = direction == SortDirection.DESC
    if field == PlanSortField.MONTHLY_PRICE:
        return sorted(plans, key=lambda p: p.monthly_price, reverse=reverse)
    return sorted(plans, key=lambda p: str(getattr(p, field.value)).lower(), reverse=reverse)
