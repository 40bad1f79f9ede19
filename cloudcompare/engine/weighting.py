from __future__ import annotations

from typing import Mapping

from .models import Constraint, Dimension, WeightingDistribution
from .rules import BUDGET_RULES, EXPERIENCE_RULES, PRIORITY_RULES, WORKLOAD_RULES

EXPERIENCE_INFLUENCE = 0.3
WORKLOAD_INFLUENCE = 0.4
PRIORITY_INFLUENCE = 0.2


def blend(
    base: dict[Dimension, float],
    overlay: Mapping[Dimension, float],
    influence: float,
) -> None:
    """Pull ``base`` towards ``overlay`` in place.

    Only dimensions present in both are touched:
    ``base[d] = base[d] * (1 - influence) + overlay[d] * influence``.
    """
    for dimension, weight in overlay.items():
        if dimension in base:
            base[dimension] = base[dimension] * (1 - influence) + weight * influence


def normalize(weights: Mapping[Dimension, float]) -> WeightingDistribution:
    """Scale to sum to 1 over all eight dimensions, or all zeros if empty."""
    total = sum(weights.get(d, 0.0) for d in Dimension)
    if total <= 0:
        return {d: 0.0 for d in Dimension}
    return {d: weights.get(d, 0.0) / total for d in Dimension}


def compose_weightings(constraint: Constraint) -> WeightingDistribution:
    """
    Build the weighting distribution for a normalized constraint.

    Starts from the budget rule, then blends experience (0.3), workload
    (0.4) and each priority (0.2) in turn. Blending is sequential, so
    later overlays compound over earlier ones: workload and priorities
    take precedence over the budget/experience baseline.
    """
    weights = dict(BUDGET_RULES[constraint.budget].weightings)
    blend(weights, EXPERIENCE_RULES[constraint.experience].weightings, EXPERIENCE_INFLUENCE)
    blend(weights, WORKLOAD_RULES[constraint.workload].weightings, WORKLOAD_INFLUENCE)
    for priority in constraint.priorities:
        blend(weights, PRIORITY_RULES[priority].weightings, PRIORITY_INFLUENCE)
    return normalize(weights)
