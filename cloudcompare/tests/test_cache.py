from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from cloudcompare.engine.cache import ResultCache, fingerprint
from cloudcompare.engine.constraints import normalize_constraints
from cloudcompare.engine.models import Budget, Constraint, Priority, Workload


def test_fingerprint_ignores_priority_order():
    base = {"budget": "low", "experience": "beginner", "workload": "startup"}
    first, _ = normalize_constraints({**base, "priorities": ["cost", "aiml"]})
    second, _ = normalize_constraints({**base, "priorities": ["aiml", "cost", "aiml"]})
    assert fingerprint(first) == fingerprint(second)
    assert fingerprint(first).startswith("comparison_")
    assert len(fingerprint(first)) == len("comparison_") + 16


def test_fingerprint_differs_for_different_constraints():
    assert fingerprint(Constraint()) != fingerprint(Constraint(budget=Budget.low))
    assert fingerprint(Constraint()) != fingerprint(Constraint(priorities=(Priority.cost,)))


def test_miss_then_hit():
    cache = ResultCache(10)
    result = object()
    assert cache.get(Constraint()) is None
    cache.set(Constraint(), result)
    assert cache.get(Constraint()) is result
    stats = cache.stats()
    assert stats == {"size": 1, "maxSize": 10, "hits": 1, "misses": 1, "hitRate": 50.0}


def test_oldest_entry_is_evicted():
    cache = ResultCache(2)
    first, second, third = Constraint(), Constraint(budget=Budget.low), Constraint(budget=Budget.high)
    for constraint in (first, second, third):
        cache.set(constraint, object())
    assert len(cache) == 2
    assert first not in cache
    assert second in cache and third in cache


def test_get_or_compute_computes_once():
    cache = ResultCache(10)
    compute = Mock(return_value="result")
    assert cache.get_or_compute(Constraint(), compute) == ("result", False)
    assert cache.get_or_compute(Constraint(), compute) == ("result", True)
    assert compute.call_count == 1


def test_failed_compute_is_not_cached():
    cache = ResultCache(10)
    compute = Mock(side_effect=RuntimeError("boom"))
    with pytest.raises(RuntimeError):
        cache.get_or_compute(Constraint(), compute)
    assert len(cache) == 0


def test_concurrent_identical_requests_share_one_entry():
    cache = ResultCache(10)
    constraint = Constraint(workload=Workload.research)

    def compute():
        time.sleep(0.01)
        return "result"

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: cache.get_or_compute(constraint, compute), range(50)))

    assert all(result == "result" for result, _ in results)
    stats = cache.stats()
    assert len(cache) == 1
    assert stats["hits"] + stats["misses"] == 50
    assert 1 <= stats["hits"] <= 49


def test_clear_resets_entries_and_counters():
    cache = ResultCache(10)
    cache.get_or_compute(Constraint(), lambda: "result")
    cache.clear()
    assert cache.stats() == {"size": 0, "maxSize": 10, "hits": 0, "misses": 0, "hitRate": 0.0}


def test_result_computed_before_clear_is_not_stored():
    cache = ResultCache(10)

    def compute():
        cache.clear()
        return "stale"

    result, from_cache = cache.get_or_compute(Constraint(), compute)
    assert (result, from_cache) == ("stale", False)
    assert len(cache) == 0
    assert Constraint() not in cache

    result, from_cache = cache.get_or_compute(Constraint(), lambda: "fresh")
    assert (result, from_cache) == ("fresh", False)
    assert cache.get_or_compute(Constraint(), lambda: "unused") == ("fresh", True)


def test_set_with_outdated_generation_is_dropped():
    cache = ResultCache(10)
    generation = cache.generation
    cache.clear()
    assert cache.set(Constraint(), "stale", generation) is False
    assert cache.set(Constraint(), "fresh", cache.generation) is True
    assert cache.get(Constraint()) == "fresh"


def test_max_size_must_be_positive():
    with pytest.raises(ValueError):
        ResultCache(0)
