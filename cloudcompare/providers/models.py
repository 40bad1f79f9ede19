from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..engine.models import Dimension

SCORE_MIN = 1
SCORE_MAX = 10

# Numeric sub-metrics every provider must report, per dimension.
DIMENSION_METRICS: dict[Dimension, tuple[str, ...]] = {
    Dimension.cost: ("costPredictability", "budgetFriendliness"),
    Dimension.ease_of_use: ("learningCurve", "documentation", "setupComplexity", "uiIntuitiveness"),
    Dimension.scalability: (
        "globalPresence",
        "autoScaling",
        "performanceConsistency",
        "infrastructureMaturity",
    ),
    Dimension.ecosystem: ("serviceCount", "integrationOptions", "thirdPartySupport", "communitySize"),
    Dimension.devops: ("cicdSupport", "automationTools", "containerSupport", "infrastructureAsCode"),
    Dimension.aiml: ("mlServices", "dataProcessing", "pretrainedModels", "customModelSupport"),
    Dimension.enterprise: ("compliance", "support", "sla", "securityFeatures"),
    Dimension.vendor_lock_in: ("portability", "standardsCompliance", "exitStrategy"),
}


def is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ProviderInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: Literal["aws", "azure", "gcp"]
    display_name: str = Field(..., alias="displayName", min_length=1)
    last_updated: datetime = Field(..., alias="lastUpdated")


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


class TradeOffs(BaseModel):
    model_config = ConfigDict(frozen=True)

    gains: tuple[str, ...] = Field(..., min_length=1)
    losses: tuple[str, ...] = Field(..., min_length=1)


class ProviderRecord(BaseModel):
    """One provider's persisted dataset entry (``data/<name>.json``).

    Dimension blocks are flat mappings of sub-metric -> score in [1, 10].
    The cost block may also carry descriptive, non-numeric fields
    (``pricingModel``, ``freeTierOffering``) which scoring ignores.

    Records are read-only all the way down: list fields are tuples and
    dimension blocks are exposed as read-only mappings.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    provider: ProviderInfo
    dimensions: Mapping[Dimension, Mapping[str, Any]]
    strengths: tuple[str, ...] = Field(..., min_length=1)
    weaknesses: tuple[str, ...] = Field(..., min_length=1)
    ideal_use_cases: tuple[str, ...] = Field(..., alias="idealUseCases", min_length=1)
    trade_offs: TradeOffs = Field(..., alias="tradeOffs")

    @field_validator("dimensions")
    @classmethod
    def _check_dimensions(cls, value: Mapping[Dimension, Mapping[str, Any]]) -> Mapping[Dimension, Mapping[str, Any]]:
        errors: list[str] = []
        for dimension in Dimension:
            block = value.get(dimension)
            if block is None:
                errors.append(f"missing dimension {dimension.value}")
                continue
            for metric in DIMENSION_METRICS[dimension]:
                if metric not in block:
                    errors.append(f"{dimension.value}.{metric} is required")
                elif not is_numeric(block[metric]):
                    errors.append(f"{dimension.value}.{metric} must be a number")
            for metric, score in block.items():
                if is_numeric(score) and not SCORE_MIN <= score <= SCORE_MAX:
                    errors.append(
                        f"{dimension.value}.{metric} is {score}, must be between "
                        f"{SCORE_MIN} and {SCORE_MAX}"
                    )
        if errors:
            raise ValueError("; ".join(errors))
        return _freeze(value)

    @property
    def name(self) -> str:
        return self.provider.name

    def metric(self, dimension: Dimension, metric: str) -> float | None:
        """Return a numeric sub-metric, or ``None`` when it is absent."""
        value = self.dimensions.get(dimension, {}).get(metric)
        return float(value) if is_numeric(value) else None

    def numeric_metrics(self, dimension: Dimension) -> list[float]:
        return [float(v) for v in self.dimensions.get(dimension, {}).values() if is_numeric(v)]
