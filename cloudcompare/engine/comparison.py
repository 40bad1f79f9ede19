from __future__ import annotations

import logging
import time
from typing import Any

from ..config import DEFAULT_SETTINGS, Settings
from ..providers.data_store import ProviderStore
from .analysis import cross_provider_analysis, decision_guidance, score_matrix
from .cache import ResultCache
from .constraints import normalize_constraints, summarize_constraints
from .evaluator import evaluate_provider
from .models import ComparisonResult, Constraint, EvaluationOutcome
from .narrative import build_provider_section
from .validator import BiasClassifier, OutputValidator
from .weighting import compose_weightings

logger = logging.getLogger(__name__)


class ComparisonEngine:
    """
    Entry point of the evaluation pipeline.

    normalize -> weight -> evaluate each provider -> narrative ->
    cross-provider analysis & guidance -> validate -> cache.

    One instance is built at process start and shared by every request;
    the result cache is its only mutable state.
    """

    def __init__(
        self,
        store: ProviderStore,
        settings: Settings = DEFAULT_SETTINGS,
        classifier: BiasClassifier | None = None,
    ) -> None:
        self.store = store
        self.cache = ResultCache(settings.cache_max_size)
        self.validator = OutputValidator(classifier)

    def evaluate(self, raw_constraints: Any) -> EvaluationOutcome:
        """
        Compare all providers under ``raw_constraints``.

        Raises ``ConstraintValidationError``, ``NoDataAvailable``,
        ``OutputStructureError`` or ``BiasDetectedError``.
        """
        start_time = time.time()
        constraint, warnings = normalize_constraints(raw_constraints)

        result, from_cache = self.cache.get_or_compute(constraint, lambda: self.compute(constraint))

        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        logger.info(
            "Comparison for %s served in %sms (cache_hit=%s)",
            constraint.model_dump(mode="json"),
            elapsed_ms,
            from_cache,
        )
        return EvaluationOutcome(
            result=result,
            warnings=warnings,
            from_cache=from_cache,
            cache_stats=self.cache.stats(),
        )

    def compute(self, constraint: Constraint) -> ComparisonResult:
        """Build and validate a fresh result, bypassing the cache."""
        providers = self.store.get_all_providers()
        weightings = compose_weightings(constraint)

        evaluations = {
            provider_id: evaluate_provider(provider_id, record, constraint, weightings)
            for provider_id, record in providers.items()
        }
        for evaluation in evaluations.values():
            if not evaluation.passes_filters:
                logger.debug(
                    "%s fails filters %s (kept in output)",
                    evaluation.provider_id,
                    ", ".join(evaluation.failed_filters),
                )

        frame = score_matrix(evaluations, providers)
        result = ComparisonResult(
            constraints=constraint,
            weightings=weightings,
            providers={
                provider_id: build_provider_section(evaluations[provider_id], record, constraint)
                for provider_id, record in providers.items()
            },
            cross_provider_analysis=cross_provider_analysis(frame, constraint),
            decision_guidance=decision_guidance(frame),
            constraint_summary=summarize_constraints(constraint),
        )

        self.validator.validate(result.to_payload())
        return result

    def cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()
