"""
Output validation.

Two independent passes run over the assembled payload (camelCase, as it
goes on the wire):

1. Structure: every mandatory section, provider and sub-section exists.
2. Neutrality: the concatenated text contains no bias, promotional,
   ranking or definitive-recommendation language.

Either failure is raised to the caller; output is never patched up.
Neutrality scanning is delegated to a ``BiasClassifier`` so a stricter or
learned detector can replace the pattern lists without touching the
engine.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Protocol

from ..errors import BiasDetectedError, OutputStructureError
from .models import PROVIDER_IDS

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("providers", "crossProviderAnalysis", "decisionGuidance")
REQUIRED_PROVIDER_SECTIONS = ("strengths", "weaknesses", "idealUseCases", "tradeOffs")
REQUIRED_ANALYSIS_SECTIONS = (
    "costTradeOffs",
    "complexityTradeOffs",
    "ecosystemTradeOffs",
    "flexibilityTradeOffs",
)
REQUIRED_GUIDANCE_SECTIONS = ("costOptimized", "easeOfUse", "enterprise", "innovation")

BIAS_KEYWORDS = (
    "winner",
    "loser",
    "definitely choose",
    "avoid at all costs",
    "hands down",
    "without question",
    "obviously the best",
    "clearly superior",
    "terrible choice",
    "awful option",
)

PROMOTIONAL_KEYWORDS = (
    "revolutionary",
    "game-changing",
    "industry-leading",
    "cutting-edge",
    "state-of-the-art",
    "world-class",
    "premium",
    "exclusive",
    "unmatched",
    "unparalleled",
    "breakthrough",
    "innovative",
)

RANKING_PATTERNS = (
    re.compile(r"\b(first|second|third|1st|2nd|3rd|#1|#2|#3)\s+(choice|option|provider|place|position)\b", re.I),
    re.compile(r"\b(rank|ranking|ranked)\s+\d+", re.I),
    re.compile(r"\b(top|bottom)\s+(choice|option|provider)\b", re.I),
)

RECOMMENDATION_PATTERNS = (
    re.compile(r"\b(should choose|must use|go with|pick)\b", re.I),
    re.compile(r"\b(the answer is|the solution is)\b", re.I),
    re.compile(r"\b(definitely|absolutely|certainly)\s+(use|choose|pick)\b", re.I),
)


class BiasClassifier(Protocol):
    def flag(self, text: str) -> list[str]:
        """Return a description of every problematic phrase found in ``text``."""
        ...


class PatternBiasClassifier:
    """Keyword and regex based neutrality check."""

    def __init__(
        self,
        bias_keywords: tuple[str, ...] = BIAS_KEYWORDS,
        promotional_keywords: tuple[str, ...] = PROMOTIONAL_KEYWORDS,
        ranking_patterns: tuple[re.Pattern[str], ...] = RANKING_PATTERNS,
        recommendation_patterns: tuple[re.Pattern[str], ...] = RECOMMENDATION_PATTERNS,
    ) -> None:
        self.bias_keywords = bias_keywords
        self.promotional_keywords = promotional_keywords
        self.ranking_patterns = ranking_patterns
        self.recommendation_patterns = recommendation_patterns

    def flag(self, text: str) -> list[str]:
        lowered = text.lower()
        issues: list[str] = []
        for keyword in self.bias_keywords:
            if keyword.lower() in lowered:
                issues.append(f'Potential bias detected: "{keyword}"')
        for keyword in self.promotional_keywords:
            if keyword.lower() in lowered:
                issues.append(f'Promotional language detected: "{keyword}"')
        for pattern in self.ranking_patterns:
            match = pattern.search(text)
            if match:
                issues.append(f'Numerical ranking detected: "{match.group(0)}"')
        for pattern in self.recommendation_patterns:
            match = pattern.search(text)
            if match:
                issues.append(f'Definitive recommendation detected: "{match.group(0)}"')
        return issues


def extract_text(value: Any) -> str:
    """Concatenate every string value in a nested payload (keys excluded)."""
    texts: list[str] = []

    def _walk(node: Any) -> None:
        if isinstance(node, str):
            texts.append(node)
        elif isinstance(node, Mapping):
            for child in node.values():
                _walk(child)
        elif isinstance(node, (list, tuple)):
            for child in node:
                _walk(child)

    _walk(value)
    return " ".join(texts)


def _missing(container: Any, keys: tuple[str, ...]) -> list[str]:
    if not isinstance(container, Mapping):
        return list(keys)
    return [k for k in keys if k not in container]


def structure_errors(payload: Mapping[str, Any]) -> list[str]:
    errors = [f"Missing required section: {s}" for s in _missing(payload, REQUIRED_SECTIONS)]

    providers = payload.get("providers")
    if isinstance(providers, Mapping):
        for required in PROVIDER_IDS:
            if required not in providers:
                errors.append(f"Missing required provider: {required}")
        for name in providers:
            if name not in PROVIDER_IDS:
                errors.append(f"Unexpected provider: {name}")
        for name, section in providers.items():
            for missing in _missing(section, REQUIRED_PROVIDER_SECTIONS):
                errors.append(f"Provider {name} missing required section: {missing}")
    elif "providers" in payload:
        errors.append("Section providers must be an object")

    if "crossProviderAnalysis" in payload:
        for missing in _missing(payload["crossProviderAnalysis"], REQUIRED_ANALYSIS_SECTIONS):
            errors.append(f"Missing cross-provider analysis section: {missing}")

    if "decisionGuidance" in payload:
        for missing in _missing(payload["decisionGuidance"], REQUIRED_GUIDANCE_SECTIONS):
            errors.append(f"Missing decision guidance section: {missing}")

    return errors


class OutputValidator:
    def __init__(self, classifier: BiasClassifier | None = None) -> None:
        self.classifier = classifier or PatternBiasClassifier()

    def check_structure(self, payload: Mapping[str, Any]) -> list[str]:
        return structure_errors(payload)

    def check_neutrality(self, payload: Mapping[str, Any]) -> list[str]:
        return self.classifier.flag(extract_text(payload))

    def validate(self, payload: Mapping[str, Any]) -> None:
        """Raise ``OutputStructureError`` or ``BiasDetectedError``; structure
        is checked first."""
        errors = self.check_structure(payload)
        if errors:
            logger.error("Output structure validation failed: %s", errors)
            raise OutputStructureError(errors)

        issues = self.check_neutrality(payload)
        if issues:
            logger.error("Bias detected in output: %s", issues)
            raise BiasDetectedError(issues)
