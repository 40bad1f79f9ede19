from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import ValidationError

from ..config import DEFAULT_SETTINGS
from ..engine.models import PROVIDER_IDS
from ..errors import DataIntegrityError, NoDataAvailable
from .models import ProviderRecord

logger = logging.getLogger(__name__)


def _format_validation_error(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    ]


def load_provider_file(path: Path) -> ProviderRecord:
    """Read and validate a single provider JSON file."""
    with path.open("r", encoding="utf-8") as fh:
        raw = json.load(fh)
    try:
        return ProviderRecord.model_validate(raw)
    except ValidationError as exc:
        raise DataIntegrityError(
            f"Invalid data structure in {path.name}",
            details=_format_validation_error(exc),
        ) from exc


class ProviderStore:
    """Read-only provider dataset, swapped wholesale on every (re)load.

    Readers always see either the previous or the new mapping; records are
    never mutated in place.
    """

    def __init__(self, data_dir: Path | None = None) -> None:
        self.data_dir = Path(data_dir or DEFAULT_SETTINGS.data_dir)
        self._providers: Mapping[str, ProviderRecord] = MappingProxyType({})
        self._load_lock = threading.Lock()
        self._initialized = False
        self._last_loaded: float | None = None
        self._load_results: list[dict[str, Any]] = []

    # ── Loading ───────────────────────────────────────────────────────

    def load(self) -> dict[str, Any]:
        with self._load_lock:
            loaded: dict[str, ProviderRecord] = {}
            results: list[dict[str, Any]] = []
            for name in PROVIDER_IDS:
                path = self.data_dir / f"{name}.json"
                if not path.is_file():
                    logger.warning("Provider data file not found: %s", path)
                    results.append({"provider": name, "success": False, "error": "File not found"})
                    continue
                try:
                    record = load_provider_file(path)
                except DataIntegrityError as exc:
                    logger.warning("Failed to load provider %s: %s", name, exc.details)
                    results.append({"provider": name, "success": False, "error": exc.message, "details": exc.details})
                    continue
                except (OSError, json.JSONDecodeError) as exc:
                    logger.warning("Failed to load provider %s: %s", name, exc)
                    results.append({"provider": name, "success": False, "error": str(exc)})
                    continue
                if record.name != name:
                    logger.warning("Provider file %s declares name %r", path.name, record.name)
                    results.append({
                        "provider": name,
                        "success": False,
                        "error": f"File declares provider {record.name!r}",
                    })
                    continue
                loaded[name] = record
                results.append({"provider": name, "success": True})

            self._providers = MappingProxyType(loaded)
            self._initialized = True
            self._last_loaded = time.time()
            self._load_results = results

        logger.info("Loaded %d provider(s) from %s", len(loaded), self.data_dir)
        return {"success": bool(loaded), "providersLoaded": len(loaded), "loadResults": results}

    def reload(self) -> dict[str, Any]:
        logger.info("Reloading provider data")
        return self.load()

    # ── Access ────────────────────────────────────────────────────────

    def get_all_providers(self) -> Mapping[str, ProviderRecord]:
        """Return the current ordered provider mapping.

        Raises ``NoDataAvailable`` if nothing is loaded.
        """
        providers = self._providers
        if not providers:
            raise NoDataAvailable()
        return providers

    def get_provider(self, name: str) -> ProviderRecord | None:
        if name not in PROVIDER_IDS:
            raise ValueError(f"Invalid provider name: {name}. Must be one of: {', '.join(PROVIDER_IDS)}")
        return self._providers.get(name)

    def provider_names(self) -> list[str]:
        return list(self._providers)

    # ── Diagnostics ───────────────────────────────────────────────────

    def validate_integrity(self) -> dict[str, Any]:
        errors: list[str] = []
        if not self._initialized:
            return {"isValid": False, "errors": ["Provider store not initialized"], "warnings": []}

        reasons = {r["provider"]: r.get("error") for r in self._load_results if not r["success"]}
        for required in PROVIDER_IDS:
            if required not in self._providers:
                reason = reasons.get(required)
                errors.append(
                    f"Missing required provider: {required}" + (f" ({reason})" if reason else "")
                )

        return {"isValid": not errors, "errors": errors, "warnings": []}

    def statistics(self) -> dict[str, Any]:
        return {
            "isInitialized": self._initialized,
            "providerCount": len(self._providers),
            "providers": self.provider_names(),
            "lastLoaded": self._last_loaded,
        }
