"""
Deterministic narrative for a single provider.

Everything here is template-driven: synthesized sentences come from fixed
per-dimension tables and are placed ahead of the provider's own dataset
text, then truncated. Scores shown in text are rounded to one decimal.
"""
from __future__ import annotations

import math

from ..providers.models import ProviderRecord, TradeOffs
from .models import (
    Budget,
    Constraint,
    Dimension,
    Evaluation,
    Experience,
    Priority,
    ProviderSection,
    Workload,
)

STRENGTH_THRESHOLD = 7
WEAKNESS_THRESHOLD = 5
MAX_SYNTHESIZED = 3
MAX_STRENGTHS = 5
MAX_WEAKNESSES = 4
MAX_USE_CASES = 4

_STRENGTH_TEMPLATES: dict[Dimension, str] = {
    Dimension.cost: "Strong cost optimization ({score}/10) - suits budget-conscious projects",
    Dimension.ease_of_use: "Very user-friendly ({score}/10) - suits teams prioritizing simplicity",
    Dimension.scalability: "High scalability ({score}/10) - well suited to growing applications",
    Dimension.ecosystem: "Rich service ecosystem ({score}/10) - extensive integration options",
    Dimension.devops: "Strong DevOps support ({score}/10) - broad automation capabilities",
    Dimension.aiml: "Advanced AI/ML services ({score}/10) - broad machine learning platform",
    Dimension.enterprise: "Enterprise-ready ({score}/10) - comprehensive compliance and support",
    Dimension.vendor_lock_in: "Good portability ({score}/10) - easier migration and flexibility",
}

_WEAKNESS_TEMPLATES: dict[Dimension, str] = {
    Dimension.cost: "Higher costs ({score}/10) - may exceed budget constraints",
    Dimension.ease_of_use: "Steeper learning curve ({score}/10) - requires more technical expertise",
    Dimension.scalability: "Limited scalability ({score}/10) - may not handle rapid growth well",
    Dimension.ecosystem: "Smaller service portfolio ({score}/10) - fewer integration options",
    Dimension.devops: "Basic DevOps tools ({score}/10) - limited automation capabilities",
    Dimension.aiml: "Limited AI/ML services ({score}/10) - fewer machine learning options",
    Dimension.enterprise: "Less enterprise focus ({score}/10) - limited compliance features",
    Dimension.vendor_lock_in: "Higher lock-in risk ({score}/10) - harder to migrate later",
}

_USE_CASE_LOW_BUDGET = "Cost-sensitive projects with budget constraints"
_USE_CASE_BEGINNER = "Teams new to cloud platforms seeking ease of use"
_USE_CASE_ENTERPRISE = "Large-scale enterprise applications requiring compliance"
_USE_CASE_AIML = "AI/ML projects requiring advanced data processing"
_USE_CASE_DEVOPS = "DevOps-focused teams needing automation tools"

# priority -> (dimension, gain threshold, loss threshold, gain phrase, loss phrase)
_TRADE_OFF_TRIGGERS: tuple[tuple[Priority, Dimension, float, float, str, str], ...] = (
    (Priority.cost, Dimension.cost, 7, 5, "cost-effective pricing", "higher costs"),
    (Priority.ease_of_use, Dimension.ease_of_use, 7, 5, "user-friendly experience", "steeper learning curve"),
    (Priority.scalability, Dimension.scalability, 8, 6, "excellent scalability", "limited scaling options"),
)


def round_score(value: float) -> float:
    """Round to one decimal, halves away from zero."""
    scaled = math.floor(abs(value) * 10 + 0.5) / 10
    return math.copysign(scaled, value) if value else 0.0


def format_score(value: float) -> str:
    return f"{round_score(value):.1f}"


def constraint_strengths(evaluation: Evaluation, record: ProviderRecord) -> list[str]:
    top = sorted(
        ((d, s) for d, s in evaluation.dimension_scores.items() if s >= STRENGTH_THRESHOLD),
        key=lambda item: -item[1],
    )[:MAX_SYNTHESIZED]
    synthesized = [_STRENGTH_TEMPLATES[d].format(score=format_score(s)) for d, s in top]
    return [*synthesized, *record.strengths][:MAX_STRENGTHS]


def constraint_weaknesses(evaluation: Evaluation, record: ProviderRecord) -> list[str]:
    low = sorted(
        ((d, s) for d, s in evaluation.dimension_scores.items() if s <= WEAKNESS_THRESHOLD),
        key=lambda item: item[1],
    )[:MAX_SYNTHESIZED]
    synthesized = [_WEAKNESS_TEMPLATES[d].format(score=format_score(s)) for d, s in low]
    return [*synthesized, *record.weaknesses][:MAX_WEAKNESSES]


def constraint_use_cases(record: ProviderRecord, constraint: Constraint) -> list[str]:
    synthesized: list[str] = []
    if constraint.budget is Budget.low:
        synthesized.append(_USE_CASE_LOW_BUDGET)
    if constraint.experience is Experience.beginner:
        synthesized.append(_USE_CASE_BEGINNER)
    if constraint.workload is Workload.enterprise:
        synthesized.append(_USE_CASE_ENTERPRISE)
    if constraint.has_priority(Priority.aiml):
        synthesized.append(_USE_CASE_AIML)
    if constraint.has_priority(Priority.devops):
        synthesized.append(_USE_CASE_DEVOPS)
    return [*synthesized, *record.ideal_use_cases][:MAX_USE_CASES]


def format_trade_offs(trade_offs: TradeOffs) -> str:
    return f"Gains: {', '.join(trade_offs.gains)}. Losses: {', '.join(trade_offs.losses)}."


def constraint_trade_offs(evaluation: Evaluation, record: ProviderRecord, constraint: Constraint) -> str:
    gains: list[str] = []
    losses: list[str] = []
    for priority, dimension, gain_at, loss_at, gain, loss in _TRADE_OFF_TRIGGERS:
        score = evaluation.dimension_scores.get(dimension)
        if not constraint.has_priority(priority) or score is None:
            continue
        if score >= gain_at:
            gains.append(gain)
        elif score <= loss_at:
            losses.append(loss)

    if not gains and not losses:
        return format_trade_offs(record.trade_offs)

    return (
        f"Choosing this provider gains you: {', '.join(gains) or 'various benefits'}. "
        f"However, you may lose: {', '.join(losses) or 'some capabilities'}."
    )


def build_provider_section(
    evaluation: Evaluation,
    record: ProviderRecord,
    constraint: Constraint,
) -> ProviderSection:
    return ProviderSection(
        strengths=constraint_strengths(evaluation, record),
        weaknesses=constraint_weaknesses(evaluation, record),
        ideal_use_cases=constraint_use_cases(record, constraint),
        trade_offs=constraint_trade_offs(evaluation, record, constraint),
        match_score=round_score(evaluation.total_score),
        passes_filters=evaluation.passes_filters,
    )
