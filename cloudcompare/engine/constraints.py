from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from ..errors import ConstraintValidationError
from .models import (
    Budget,
    Constraint,
    ConstraintSummary,
    DescribedValue,
    Experience,
    Priority,
    Workload,
)

logger = logging.getLogger(__name__)

# (field, enum, label, default)
_SCALAR_FIELDS: tuple[tuple[str, type[Enum], str, Enum], ...] = (
    ("budget", Budget, "Budget level", Budget.medium),
    ("experience", Experience, "Experience level", Experience.intermediate),
    ("workload", Workload, "Workload type", Workload.startup),
)

DESCRIPTIONS: dict[str, dict[str, str]] = {
    "budget": {
        "low": "Cost-conscious approach with emphasis on free tiers and budget-friendly options",
        "medium": "Balanced approach considering both cost and features",
        "high": "Feature-first approach favouring advanced and enterprise capabilities over cost",
    },
    "experience": {
        "beginner": "New to cloud platforms, prioritizing ease of use and learning resources",
        "intermediate": "Some cloud experience, comfortable with moderate complexity",
        "expert": "Extensive cloud experience, comfortable with advanced features and complexity",
    },
    "workload": {
        "startup": "Small to medium applications with growth potential and cost sensitivity",
        "enterprise": "Large-scale applications requiring compliance, support, and reliability",
        "research": "Data-intensive and experimental workloads requiring AI/ML capabilities",
    },
    "priorities": {
        "cost": "Minimize total cost of ownership and optimize spending",
        "scalability": "Handle growth and traffic spikes with global reach",
        "ease-of-use": "Simple setup and management with intuitive interfaces",
        "compliance": "Meet regulatory requirements and security standards",
        "devops": "Support modern development practices and automation",
        "aiml": "Artificial intelligence and machine learning capabilities",
        "performance": "High throughput and low latency for demanding workloads",
        "reliability": "High availability, disaster recovery, and uptime guarantees",
        "innovation": "Access to newer technologies and emerging cloud services",
        "support": "Enterprise support plans with dedicated account management",
        "integration": "Easy integration with existing systems and third-party tools",
        "security": "Security features and compliance certifications",
    },
}


def _normalize_scalar(value: Any) -> str | None:
    """Lower-case a scalar input; ``None`` means "not supplied"."""
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped.lower() if stripped else None
    return str(value)


def normalize_constraints(raw: Any) -> tuple[Constraint, list[str]]:
    """
    Validate and canonicalize raw user constraints.

    Absent (or empty) budget/experience/workload fields fall back to
    medium / intermediate / startup with a warning. A field that is
    supplied but not one of its allowed values is rejected. Unknown
    priorities are dropped with a warning; the rest are de-duplicated and
    put in ``Priority`` declaration order.

    Returns ``(constraint, warnings)``; raises ``ConstraintValidationError``
    listing every invalid field.
    """
    if not isinstance(raw, Mapping):
        raise ConstraintValidationError(["Constraints must be an object"], ["constraints"])

    errors: list[str] = []
    invalid_fields: list[str] = []
    warnings: list[str] = []
    values: dict[str, Any] = {}

    for field_name, enum_cls, label, default in _SCALAR_FIELDS:
        candidate = _normalize_scalar(raw.get(field_name))
        if candidate is None:
            warnings.append(f"{label} not specified, defaulting to {default.value}")
            values[field_name] = default
            continue
        try:
            values[field_name] = enum_cls(candidate)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            errors.append(f"Invalid {label.lower()}: {raw.get(field_name)}. Must be one of: {allowed}")
            invalid_fields.append(field_name)

    raw_priorities = raw.get("priorities")
    selected: set[Priority] = set()
    if raw_priorities is None:
        warnings.append("No priorities specified, using default weighting")
    elif not isinstance(raw_priorities, (list, tuple, set, frozenset)):
        warnings.append("Priorities must be a list, using default weighting")
    else:
        dropped: list[str] = []
        for item in raw_priorities:
            try:
                selected.add(Priority(_normalize_scalar(item)))
            except ValueError:
                dropped.append(str(item))
        if dropped:
            warnings.append(f"Invalid priorities ignored: {', '.join(dropped)}")
        if not selected:
            warnings.append("No valid priorities specified, using default weighting")

    if errors:
        logger.info("Rejected constraints: %s", errors)
        raise ConstraintValidationError(errors, invalid_fields, warnings)

    constraint = Constraint(
        **values,
        priorities=tuple(p for p in Priority if p in selected),
    )
    if warnings:
        logger.info("Constraint warnings: %s", warnings)
    return constraint, warnings


def text_summary(constraint: Constraint) -> str:
    parts = [
        f"{constraint.budget.value} budget",
        f"{constraint.experience.value} experience level",
        f"{constraint.workload.value} workload",
    ]
    if constraint.priorities:
        parts.append(f"prioritizing {', '.join(p.value for p in constraint.priorities)}")
    return f"Looking for a cloud platform with {', '.join(parts)}."


def summarize_constraints(constraint: Constraint) -> ConstraintSummary:
    def _described(kind: str, value: str) -> DescribedValue:
        return DescribedValue(value=value, description=DESCRIPTIONS[kind][value])

    return ConstraintSummary(
        budget=_described("budget", constraint.budget.value),
        experience=_described("experience", constraint.experience.value),
        workload=_described("workload", constraint.workload.value),
        priorities=[_described("priorities", p.value) for p in constraint.priorities],
        summary=text_summary(constraint),
    )
