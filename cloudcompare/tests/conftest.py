from __future__ import annotations

import json
from pathlib import Path

import pytest

from cloudcompare.providers.data_store import ProviderStore
from cloudcompare.providers.models import DIMENSION_METRICS, ProviderRecord

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def build_payload(name: str, score: float = 5) -> dict:
    """Minimal valid provider file where every sub-metric equals ``score``."""
    return {
        "provider": {
            "name": name,
            "displayName": name.upper(),
            "lastUpdated": "2024-01-15T00:00:00.000Z",
        },
        "dimensions": {
            dimension.value: {metric: score for metric in metrics}
            for dimension, metrics in DIMENSION_METRICS.items()
        },
        "strengths": ["Reliable networking"],
        "weaknesses": ["Fewer regions"],
        "idealUseCases": ["General web hosting"],
        "tradeOffs": {"gains": ["simplicity"], "losses": ["breadth"]},
    }


@pytest.fixture
def provider_payload():
    return build_payload


@pytest.fixture
def make_record():
    def _make(name: str = "aws", score: float = 5) -> ProviderRecord:
        return ProviderRecord.model_validate(build_payload(name, score))

    return _make


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture(scope="session")
def provider_store() -> ProviderStore:
    store = ProviderStore(DATA_DIR)
    store.load()
    return store


@pytest.fixture
def providers(provider_store):
    return provider_store.get_all_providers()


@pytest.fixture
def write_dataset(tmp_path):
    """Write ``{name: payload_or_text}`` as provider files under tmp_path."""

    def _write(files: dict) -> Path:
        for name, content in files.items():
            text = content if isinstance(content, str) else json.dumps(content)
            (tmp_path / f"{name}.json").write_text(text, encoding="utf-8")
        return tmp_path

    return _write
