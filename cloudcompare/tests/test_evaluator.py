from __future__ import annotations

import itertools

import pytest

from cloudcompare.engine.evaluator import dimension_score, evaluate_provider, passes_filter
from cloudcompare.engine.models import Budget, Constraint, Dimension, Experience, Priority, Workload
from cloudcompare.engine.rules import MetricFilter
from cloudcompare.engine.weighting import compose_weightings
from cloudcompare.providers.models import ProviderRecord


def test_dimension_score_is_mean_of_sub_metrics(providers):
    assert dimension_score(providers["aws"], Dimension.cost) == 5.0
    assert dimension_score(providers["aws"], Dimension.ease_of_use) == 6.25
    assert dimension_score(providers["gcp"], Dimension.aiml) == 9.5


def test_dimension_score_ignores_descriptive_fields(provider_payload):
    payload = provider_payload("aws", score=4)
    payload["dimensions"]["cost"]["pricingModel"] = "On demand"
    payload["dimensions"]["cost"]["freeTierOffering"] = {"available": True}
    record = ProviderRecord.model_validate(payload)
    assert dimension_score(record, Dimension.cost) == 4.0


def test_passes_filter_bounds(providers):
    at_most_six = MetricFilter(Dimension.cost, "budgetFriendliness", max=6)
    assert passes_filter(providers["aws"], at_most_six)
    assert not passes_filter(providers["gcp"], at_most_six)
    assert not passes_filter(providers["aws"], MetricFilter(Dimension.cost, "budgetFriendliness", min=6))


def test_missing_metric_fails_filter(providers):
    assert not passes_filter(providers["aws"], MetricFilter(Dimension.cost, "nonexistent", min=1))


def test_only_weighted_dimensions_are_scored(providers):
    constraint = Constraint()
    weights = compose_weightings(constraint)
    evaluation = evaluate_provider("azure", providers["azure"], constraint, weights)
    assert Dimension.aiml not in evaluation.dimension_scores
    assert Dimension.vendor_lock_in not in evaluation.dimension_scores
    assert set(evaluation.dimension_scores) == {d for d, w in weights.items() if w > 0}


def test_failed_filters_do_not_change_score(providers):
    constraint = Constraint(budget=Budget.low, experience=Experience.beginner, workload=Workload.startup)
    weights = compose_weightings(constraint)
    evaluation = evaluate_provider("aws", providers["aws"], constraint, weights)

    assert not evaluation.passes_filters
    assert "cost.budgetFriendliness" in evaluation.failed_filters
    assert "easeOfUse.learningCurve" in evaluation.failed_filters
    assert "easeOfUse.uiIntuitiveness" not in evaluation.failed_filters
    expected = sum(w * dimension_score(providers["aws"], d) for d, w in weights.items() if w > 0)
    assert evaluation.total_score == pytest.approx(expected)


def test_enterprise_workload_filters(providers):
    constraint = Constraint(workload=Workload.enterprise)
    weights = compose_weightings(constraint)
    gcp = evaluate_provider("gcp", providers["gcp"], constraint, weights)
    azure = evaluate_provider("azure", providers["azure"], constraint, weights)
    assert gcp.failed_filters == ("enterprise.support",)
    assert azure.passes_filters


def test_constant_provider_scores_its_constant(make_record):
    record = make_record("aws", score=7)
    for constraint in (Constraint(), Constraint(budget=Budget.high, workload=Workload.research)):
        evaluation = evaluate_provider("aws", record, constraint, compose_weightings(constraint))
        assert evaluation.total_score == pytest.approx(7.0)


def test_scores_stay_within_bounds(providers):
    for budget, experience, workload in itertools.product(Budget, Experience, Workload):
        for priorities in [(), tuple(Priority)]:
            constraint = Constraint(budget=budget, experience=experience, workload=workload, priorities=priorities)
            weights = compose_weightings(constraint)
            for pid, record in providers.items():
                evaluation = evaluate_provider(pid, record, constraint, weights)
                assert 1 <= evaluation.total_score <= 10
                assert all(1 <= s <= 10 for s in evaluation.dimension_scores.values())
