from __future__ import annotations

from typing import Mapping

import pandas as pd

from ..providers.models import ProviderRecord
from .evaluator import dimension_score
from .models import (
    Constraint,
    CrossProviderAnalysis,
    DecisionGuidance,
    Dimension,
    Evaluation,
)
from .narrative import format_score

_TOTAL = "_total"

# output field -> (dimension, label)
_ANALYSIS_DIMENSIONS: dict[str, tuple[Dimension, str]] = {
    "cost_trade_offs": (Dimension.cost, "cost-effectiveness"),
    "complexity_trade_offs": (Dimension.ease_of_use, "ease of use"),
    "ecosystem_trade_offs": (Dimension.ecosystem, "service ecosystem"),
    "flexibility_trade_offs": (Dimension.vendor_lock_in, "flexibility and portability"),
}

_GUIDANCE_DIMENSIONS: dict[str, Dimension] = {
    "cost_optimized": Dimension.cost,
    "ease_of_use": Dimension.ease_of_use,
    "enterprise": Dimension.enterprise,
    "innovation": Dimension.aiml,
}

GUIDANCE_SIZE = 2


def score_matrix(
    evaluations: Mapping[str, Evaluation],
    providers: Mapping[str, ProviderRecord],
) -> pd.DataFrame:
    """One row per provider (dataset order), one column per dimension plus
    the weighted total.

    Dimensions that carried no weight were not scored during evaluation;
    they are read straight from the record here so every cell is a real
    score.
    """
    rows: dict[str, dict[str, float]] = {}
    for provider_id, evaluation in evaluations.items():
        record = providers[provider_id]
        row = {
            d.value: evaluation.dimension_scores.get(d, dimension_score(record, d))
            for d in Dimension
        }
        row[_TOTAL] = evaluation.total_score
        rows[provider_id] = row
    return pd.DataFrame.from_dict(rows, orient="index")


def _label(provider_id: str, score: float) -> str:
    return f"{provider_id.upper()} ({format_score(score)}/10)"


def dimension_analysis(frame: pd.DataFrame, dimension: Dimension, label: str, constraint: Constraint) -> str:
    # Ties go to the earlier provider for the high end and the later one for
    # the low end, matching a stable descending sort over dataset order.
    column = frame[dimension.value]
    best = column.nlargest(1, keep="first")
    worst = column.nsmallest(1, keep="last")
    best_id, best_score = best.index[0], float(best.iloc[0])
    worst_id, worst_score = worst.index[0], float(worst.iloc[0])
    return (
        f"For {label}: {best_id.upper()} scores highest at {format_score(best_score)}/10 in this area. "
        f"{worst_id.upper()} scores {format_score(worst_score)}/10, which may be a consideration "
        f"for your {constraint.workload.value} workload."
    )


def cross_provider_analysis(frame: pd.DataFrame, constraint: Constraint) -> CrossProviderAnalysis:
    return CrossProviderAnalysis(**{
        field: dimension_analysis(frame, dimension, label, constraint)
        for field, (dimension, label) in _ANALYSIS_DIMENSIONS.items()
    })


def decision_guidance(frame: pd.DataFrame) -> DecisionGuidance:
    """Top providers per guidance category plus a non-binding overall fit."""
    buckets = {
        field: [
            _label(provider_id, float(score))
            for provider_id, score in frame[dimension.value].nlargest(GUIDANCE_SIZE, keep="first").items()
        ]
        for field, dimension in _GUIDANCE_DIMENSIONS.items()
    }
    overall = frame[_TOTAL].nlargest(1, keep="first")
    overall_text = (
        f"{_label(overall.index[0], float(overall.iloc[0]))} - closest overall fit to the stated "
        "constraints; a non-binding guide, review every option's trade-offs before deciding"
    )
    return DecisionGuidance(**buckets, overall_best_match=overall_text)
