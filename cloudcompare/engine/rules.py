"""
Constraint rule table.

Each budget / experience / workload / priority value maps to a base
weighting distribution over the eight dimensions. Budget, experience and
workload rules may also attach hard filters on individual provider
sub-metrics; priorities never carry filters.

Filters reference a (dimension, sub-metric) pair from the closed set in
``providers.models.DIMENSION_METRICS`` and the whole table is checked
when this module is imported.
"""
from __future__ import annotations

from dataclasses import dataclass

from ..errors import RuleTableError
from ..providers.models import DIMENSION_METRICS
from .models import Budget, Dimension, Experience, Priority, Workload


@dataclass(frozen=True)
class MetricFilter:
    dimension: Dimension
    metric: str
    min: float | None = None
    max: float | None = None

    @property
    def path(self) -> str:
        return f"{self.dimension.value}.{self.metric}"


@dataclass(frozen=True)
class Rule:
    weightings: dict[Dimension, float]
    filters: tuple[MetricFilter, ...] = ()


def _weights(**values: float) -> dict[Dimension, float]:
    """Build a full distribution; dimensions not named get 0.0."""
    weights = {d: 0.0 for d in Dimension}
    for name, value in values.items():
        weights[Dimension[name]] = value
    return weights


def _min(dimension: Dimension, metric: str, bound: float) -> MetricFilter:
    return MetricFilter(dimension=dimension, metric=metric, min=bound)


BUDGET_RULES: dict[Budget, Rule] = {
    Budget.low: Rule(
        weightings=_weights(cost=0.4, ease_of_use=0.3, scalability=0.1, enterprise=0.1, ecosystem=0.1),
        filters=(
            _min(Dimension.cost, "budgetFriendliness", 6),
            _min(Dimension.cost, "costPredictability", 6),
        ),
    ),
    Budget.medium: Rule(
        weightings=_weights(
            cost=0.25, scalability=0.25, ecosystem=0.2, ease_of_use=0.15, enterprise=0.1, devops=0.05,
        ),
    ),
    Budget.high: Rule(
        weightings=_weights(
            enterprise=0.3, scalability=0.25, ecosystem=0.2, cost=0.1, ease_of_use=0.05, devops=0.05, aiml=0.05,
        ),
        filters=(
            _min(Dimension.enterprise, "compliance", 7),
            _min(Dimension.enterprise, "support", 7),
        ),
    ),
}

EXPERIENCE_RULES: dict[Experience, Rule] = {
    Experience.beginner: Rule(
        weightings=_weights(ease_of_use=0.4, cost=0.3, ecosystem=0.15, scalability=0.1, enterprise=0.05),
        filters=(
            _min(Dimension.ease_of_use, "learningCurve", 6),
            _min(Dimension.ease_of_use, "setupComplexity", 6),
            _min(Dimension.ease_of_use, "uiIntuitiveness", 6),
        ),
    ),
    Experience.intermediate: Rule(
        weightings=_weights(
            scalability=0.25, ecosystem=0.25, ease_of_use=0.2, cost=0.15, devops=0.1, enterprise=0.05,
        ),
    ),
    Experience.expert: Rule(
        weightings=_weights(
            ecosystem=0.3, scalability=0.25, devops=0.2, enterprise=0.15, aiml=0.05, cost=0.05,
        ),
        filters=(
            _min(Dimension.ecosystem, "serviceCount", 7),
            _min(Dimension.devops, "automationTools", 7),
        ),
    ),
}

WORKLOAD_RULES: dict[Workload, Rule] = {
    Workload.startup: Rule(
        weightings=_weights(cost=0.35, ease_of_use=0.25, scalability=0.2, ecosystem=0.15, enterprise=0.05),
        filters=(_min(Dimension.cost, "budgetFriendliness", 6),),
    ),
    Workload.enterprise: Rule(
        weightings=_weights(
            enterprise=0.35, scalability=0.25, ecosystem=0.2, devops=0.1, cost=0.05, ease_of_use=0.05,
        ),
        filters=(
            _min(Dimension.enterprise, "compliance", 8),
            _min(Dimension.enterprise, "support", 8),
            _min(Dimension.enterprise, "sla", 8),
        ),
    ),
    Workload.research: Rule(
        weightings=_weights(aiml=0.4, scalability=0.25, cost=0.2, ecosystem=0.1, ease_of_use=0.05),
        filters=(
            _min(Dimension.aiml, "mlServices", 7),
            _min(Dimension.aiml, "dataProcessing", 7),
        ),
    ),
}

PRIORITY_RULES: dict[Priority, Rule] = {
    Priority.cost: Rule(
        weightings=_weights(cost=0.5, vendor_lock_in=0.2, ease_of_use=0.15, scalability=0.1, ecosystem=0.05),
    ),
    Priority.scalability: Rule(
        weightings=_weights(scalability=0.4, ecosystem=0.25, enterprise=0.2, devops=0.1, cost=0.05),
    ),
    Priority.ease_of_use: Rule(
        weightings=_weights(ease_of_use=0.5, cost=0.2, ecosystem=0.15, scalability=0.1, enterprise=0.05),
    ),
    Priority.compliance: Rule(
        weightings=_weights(enterprise=0.5, scalability=0.2, ecosystem=0.15, cost=0.1, ease_of_use=0.05),
    ),
    Priority.devops: Rule(
        weightings=_weights(devops=0.4, ecosystem=0.25, scalability=0.2, enterprise=0.1, cost=0.05),
    ),
    Priority.aiml: Rule(
        weightings=_weights(aiml=0.5, scalability=0.2, ecosystem=0.15, cost=0.1, enterprise=0.05),
    ),
    Priority.performance: Rule(
        weightings=_weights(scalability=0.4, enterprise=0.25, ecosystem=0.2, devops=0.1, cost=0.05),
    ),
    Priority.reliability: Rule(
        weightings=_weights(enterprise=0.4, scalability=0.3, ecosystem=0.15, devops=0.1, cost=0.05),
    ),
    Priority.innovation: Rule(
        weightings=_weights(ecosystem=0.35, aiml=0.25, devops=0.2, scalability=0.15, enterprise=0.05),
    ),
    Priority.support: Rule(
        weightings=_weights(enterprise=0.5, ecosystem=0.2, scalability=0.15, cost=0.1, ease_of_use=0.05),
    ),
    Priority.integration: Rule(
        weightings=_weights(ecosystem=0.4, ease_of_use=0.25, devops=0.2, enterprise=0.1, scalability=0.05),
    ),
    Priority.security: Rule(
        weightings=_weights(enterprise=0.5, scalability=0.2, ecosystem=0.15, devops=0.1, cost=0.05),
    ),
}


def validate_rule_table() -> None:
    """Raise ``RuleTableError`` if any rule references an unknown metric,
    carries a negative weight, or declares an empty filter."""
    errors: list[str] = []
    tables = {
        "budget": BUDGET_RULES,
        "experience": EXPERIENCE_RULES,
        "workload": WORKLOAD_RULES,
        "priorities": PRIORITY_RULES,
    }
    for kind, table in tables.items():
        for key, rule in table.items():
            label = f"{kind}.{key.value}"
            for dimension, weight in rule.weightings.items():
                if weight < 0:
                    errors.append(f"{label}: negative weight for {dimension.value}")
            if kind == "priorities" and rule.filters:
                errors.append(f"{label}: priorities cannot carry filters")
            for f in rule.filters:
                if f.metric not in DIMENSION_METRICS.get(f.dimension, ()):
                    errors.append(f"{label}: unknown filter path {f.path}")
                if f.min is None and f.max is None:
                    errors.append(f"{label}: filter {f.path} has no bounds")
    if errors:
        raise RuleTableError("Invalid constraint rule table", details=errors)


def filters_for(budget: Budget, experience: Experience, workload: Workload) -> list[MetricFilter]:
    """Union of hard filters from the three selected scalar rules."""
    return [
        *BUDGET_RULES[budget].filters,
        *EXPERIENCE_RULES[experience].filters,
        *WORKLOAD_RULES[workload].filters,
    ]


validate_rule_table()
