"""Rule-based assistant used when the LLM is unavailable.

Keyword routing over the lower-cased query, checked in this order:
plans/products, health conditions, medications, prices. Anything else
gets the help message. Replies are markdown.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.schemas.assistant import AssistantContext
from src.schemas.plans import InsurancePlan

PLAN_KEYWORDS = ("product", "plan", "insurance")
HEALTH_KEYWORDS = ("health", "condition", "medical")
MEDICATION_KEYWORDS = ("medication", "drug", "medicine")
PRICE_KEYWORDS = ("price", "cost", "affordable")

HELP_MESSAGE = (
    "I can help you with information about our insurance products, health conditions, "
    "medications, and pricing. Please ask me about specific insurance plans, health "
    "conditions, or how to find the right coverage for your needs."
)


def _price(plan: InsurancePlan) -> str:
    return f"${plan.monthly_price:.2f}/month"


def _has_any(text: str, keywords: Iterable[str]) -> bool:
    return any(k in text for k in keywords)


def answer_query(query: str, context: AssistantContext) -> str:
    """Answer a broker question from catalog data alone."""
    q = query.lower()

    if _has_any(q, PLAN_KEYWORDS):
        return _answer_plans(q, context.insurance_plans)
    if _has_any(q, HEALTH_KEYWORDS):
        return _answer_disqualifier(
            q,
            context.insurance_plans,
            context.health_conditions,
            attr="disqualifying_health_conditions",
            subject="clients with {name}",
            none_left="There are no plans available for this health condition.\n",
            overview="Here are the health conditions that may affect insurance eligibility:\n\n",
        )
    if _has_any(q, MEDICATION_KEYWORDS):
        return _answer_disqualifier(
            q,
            context.insurance_plans,
            context.medications,
            attr="disqualifying_medications",
            subject="clients taking {name}",
            none_left="There are no plans available for clients taking this medication.\n",
            overview="Here are the medications that may affect insurance eligibility:\n\n",
        )
    if _has_any(q, PRICE_KEYWORDS):
        return _answer_prices(context.insurance_plans)
    return HELP_MESSAGE


# ── Plans ─────────────────────────────────────────────────────────────────


def _answer_plans(q: str, plans: list[InsurancePlan]) -> str:
    categories = list(dict.fromkeys(p.product_category for p in plans))
    for category in categories:
        if category.lower() in q:
            in_category = [p for p in plans if p.product_category.lower() == category.lower()]
            lines = [f"Here are the {category} insurance plans available:\n\n"]
            for plan in in_category:
                lines.append(f"- **{plan.company_name} - {plan.product_name}**: {_price(plan)}\n")
                lines.append(f"  {plan.benefits_description}\n\n")
            return "".join(lines)

    companies = list(dict.fromkeys(p.company_name for p in plans))
    for company in companies:
        if company.lower() in q:
            by_company = [p for p in plans if p.company_name.lower() == company.lower()]
            lines = [f"Here are the insurance plans offered by {company}:\n\n"]
            for plan in by_company:
                lines.append(f"- **{plan.product_name}** ({plan.product_category}): {_price(plan)}\n")
                lines.append(f"  {plan.benefits_description}\n\n")
            return "".join(lines)

    by_category: dict[str, list[InsurancePlan]] = {}
    for plan in plans:
        by_category.setdefault(plan.product_category, []).append(plan)

    lines = ["Here are the insurance plans we offer:\n\n"]
    for category, grouped in by_category.items():
        lines.append(f"**{category} Plans:**\n")
        for plan in grouped:
            lines.append(f"- {plan.company_name} - {plan.product_name}: {_price(plan)}\n")
        lines.append("\n")
    return "".join(lines)


# ── Conditions / medications ──────────────────────────────────────────────


def _answer_disqualifier(
    q: str,
    plans: list[InsurancePlan],
    names: list[str],
    *,
    attr: str,
    subject: str,
    none_left: str,
    overview: str,
) -> str:
    """Shared answer shape for health conditions and medications."""
    for name in names:
        if name.lower() in q:
            qualifying = [p for p in plans if name not in getattr(p, attr)]
            lines = [f"For {subject.format(name=name)}, here are the insurance options:\n\n"]
            if qualifying:
                lines.append("**Available Plans:**\n")
                for plan in qualifying:
                    lines.append(
                        f"- {plan.company_name} - {plan.product_name} "
                        f"({plan.product_category}): {_price(plan)}\n"
                    )
            else:
                lines.append(none_left)
            return "".join(lines)

    lines = [overview]
    for name in names:
        count = sum(1 for p in plans if name in getattr(p, attr))
        lines.append(f"- **{name}**: Disqualifies from {count} plans\n")
    return "".join(lines)


# ── Prices ────────────────────────────────────────────────────────────────


def _answer_prices(plans: list[InsurancePlan]) -> str:
    lines = ["Here are our insurance plans sorted by price (lowest to highest):\n\n"]
    for plan in sorted(plans, key=lambda p: p.monthly_price):
        lines.append(
            f"- **{plan.company_name} - {plan.product_name}** "
            f"({plan.product_category}): {_price(plan)}\n"
        )
    return "".join(lines)
