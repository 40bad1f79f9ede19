from __future__ import annotations

from cloudcompare.engine.analysis import (
    cross_provider_analysis,
    decision_guidance,
    dimension_analysis,
    score_matrix,
)
from cloudcompare.engine.evaluator import evaluate_provider
from cloudcompare.engine.models import Constraint, Dimension, Workload
from cloudcompare.engine.weighting import compose_weightings


def _frame(providers, constraint):
    weights = compose_weightings(constraint)
    evaluations = {
        pid: evaluate_provider(pid, record, constraint, weights)
        for pid, record in providers.items()
    }
    return score_matrix(evaluations, providers)


def test_score_matrix_keeps_dataset_order(providers):
    frame = _frame(providers, Constraint())
    assert list(frame.index) == ["aws", "azure", "gcp"]
    assert "_total" in frame.columns


def test_ties_break_by_dataset_order(make_record):
    providers = {pid: make_record(pid, score=5) for pid in ("aws", "azure", "gcp")}
    constraint = Constraint()
    frame = _frame(providers, constraint)
    assert dimension_analysis(frame, Dimension.cost, "cost-effectiveness", constraint) == (
        "For cost-effectiveness: AWS scores highest at 5.0/10 in this area. "
        "GCP scores 5.0/10, which may be a consideration for your startup workload."
    )
    guidance = decision_guidance(frame)
    assert guidance.cost_optimized == ["AWS (5.0/10)", "AZURE (5.0/10)"]
    assert guidance.overall_best_match.startswith("AWS (5.0/10)")


def test_unweighted_dimension_read_from_record(providers):
    frame = _frame(providers, Constraint())
    analysis = cross_provider_analysis(frame, Constraint())
    assert "GCP scores highest at 7.0/10" in analysis.flexibility_trade_offs
    assert "AWS scores 5.0/10" in analysis.flexibility_trade_offs


def test_analysis_mentions_workload(providers):
    constraint = Constraint(workload=Workload.research)
    analysis = cross_provider_analysis(_frame(providers, constraint), constraint)
    assert analysis.cost_trade_offs.endswith("for your research workload.")


def test_decision_guidance(providers):
    guidance = decision_guidance(_frame(providers, Constraint()))
    assert guidance.cost_optimized == ["GCP (7.5/10)", "AZURE (6.0/10)"]
    assert guidance.ease_of_use == ["GCP (7.5/10)", "AZURE (7.3/10)"]
    assert guidance.enterprise == ["AWS (9.3/10)", "AZURE (9.3/10)"]
    assert guidance.innovation == ["GCP (9.5/10)", "AWS (8.5/10)"]
    assert "non-binding" in guidance.overall_best_match
