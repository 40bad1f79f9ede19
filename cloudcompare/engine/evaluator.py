from __future__ import annotations

import numpy as np

from ..providers.models import ProviderRecord
from .models import Constraint, Dimension, Evaluation, WeightingDistribution
from .rules import MetricFilter, filters_for


def dimension_score(record: ProviderRecord, dimension: Dimension) -> float:
    """Unweighted mean of the numeric sub-metrics in one dimension block."""
    values = record.numeric_metrics(dimension)
    return float(np.mean(values)) if values else 0.0


def passes_filter(record: ProviderRecord, metric_filter: MetricFilter) -> bool:
    value = record.metric(metric_filter.dimension, metric_filter.metric)
    if value is None:
        return False
    if metric_filter.min is not None and value < metric_filter.min:
        return False
    if metric_filter.max is not None and value > metric_filter.max:
        return False
    return True


def evaluate_provider(
    provider_id: str,
    record: ProviderRecord,
    constraint: Constraint,
    weightings: WeightingDistribution,
) -> Evaluation:
    """
    Score one provider under the given weightings.

    Only dimensions with a non-zero weight are scored. Hard filters from
    the budget / experience / workload rules are checked separately;
    failing them is reported through ``passes_filters`` and never removes
    the provider from scoring.
    """
    total = 0.0
    dimension_scores: dict[Dimension, float] = {}
    for dimension, weight in weightings.items():
        if weight > 0 and dimension in record.dimensions:
            score = dimension_score(record, dimension)
            dimension_scores[dimension] = score
            total += score * weight

    failed = tuple(
        f.path
        for f in filters_for(constraint.budget, constraint.experience, constraint.workload)
        if not passes_filter(record, f)
    )

    return Evaluation(
        provider_id=provider_id,
        total_score=total,
        dimension_scores=dimension_scores,
        passes_filters=not failed,
        failed_filters=failed,
    )
