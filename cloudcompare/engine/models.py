from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Dimension(str, Enum):
    cost = "cost"
    ease_of_use = "easeOfUse"
    scalability = "scalability"
    ecosystem = "ecosystem"
    devops = "devops"
    aiml = "aiml"
    enterprise = "enterprise"
    vendor_lock_in = "vendorLockIn"


class Budget(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class Experience(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    expert = "expert"


class Workload(str, Enum):
    startup = "startup"
    enterprise = "enterprise"
    research = "research"


class Priority(str, Enum):
    cost = "cost"
    scalability = "scalability"
    ease_of_use = "ease-of-use"
    compliance = "compliance"
    devops = "devops"
    aiml = "aiml"
    performance = "performance"
    reliability = "reliability"
    innovation = "innovation"
    support = "support"
    integration = "integration"
    security = "security"


# Provider identifiers every result must cover, in dataset order.
PROVIDER_IDS: tuple[str, ...] = ("aws", "azure", "gcp")

WeightingDistribution = dict[Dimension, float]


class Constraint(BaseModel):
    """Normalized user constraints. Priorities are de-duplicated and kept
    in ``Priority`` declaration order so that equal sets compare equal."""

    model_config = ConfigDict(frozen=True)

    budget: Budget = Budget.medium
    experience: Experience = Experience.intermediate
    workload: Workload = Workload.startup
    priorities: tuple[Priority, ...] = ()

    def has_priority(self, priority: Priority) -> bool:
        return priority in self.priorities


@dataclass(frozen=True)
class Evaluation:
    provider_id: str
    total_score: float
    dimension_scores: dict[Dimension, float]
    passes_filters: bool
    failed_filters: tuple[str, ...] = field(default_factory=tuple)


# ── Wire models (camelCase on the wire) ─────────────────────────────────


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ProviderSection(_WireModel):
    strengths: list[str]
    weaknesses: list[str]
    ideal_use_cases: list[str]
    trade_offs: str
    match_score: float
    passes_filters: bool


class CrossProviderAnalysis(_WireModel):
    cost_trade_offs: str
    complexity_trade_offs: str
    ecosystem_trade_offs: str
    flexibility_trade_offs: str


class DecisionGuidance(_WireModel):
    cost_optimized: list[str]
    ease_of_use: list[str]
    enterprise: list[str]
    innovation: list[str]
    overall_best_match: str


class DescribedValue(_WireModel):
    value: str
    description: str


class ConstraintSummary(_WireModel):
    budget: DescribedValue
    experience: DescribedValue
    workload: DescribedValue
    priorities: list[DescribedValue] = Field(default_factory=list)
    summary: str


class ComparisonResult(_WireModel):
    """Engine output. Built once per fingerprint and never mutated; the
    payload carries no wall-clock timestamp."""

    constraints: Constraint
    weightings: dict[Dimension, float]
    providers: dict[str, ProviderSection]
    cross_provider_analysis: CrossProviderAnalysis
    decision_guidance: DecisionGuidance
    constraint_summary: ConstraintSummary

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class EvaluationOutcome:
    result: ComparisonResult
    warnings: list[str]
    from_cache: bool
    cache_stats: dict[str, Any]
