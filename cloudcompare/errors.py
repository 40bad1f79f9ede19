"""
Typed failures raised by the comparison engine and its collaborators.

Every error carries a stable ``code``, a human-readable ``message`` and
optional structured ``details`` (invalid fields, flagged phrases, ...).
The HTTP layer maps ``status_code`` straight onto the response.
"""
from __future__ import annotations

from typing import Any


class EngineError(Exception):
    code = "ENGINE_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ConstraintValidationError(EngineError):
    code = "CONSTRAINT_VALIDATION_ERROR"
    status_code = 400

    def __init__(
        self,
        errors: list[str],
        invalid_fields: list[str],
        warnings: list[str] | None = None,
    ) -> None:
        super().__init__("Invalid constraints provided", details=errors)
        self.errors = errors
        self.invalid_fields = invalid_fields
        self.warnings = warnings or []


class NoDataAvailable(EngineError):
    code = "NO_DATA_AVAILABLE"
    status_code = 503

    def __init__(self, message: str = "No provider data available") -> None:
        super().__init__(message)


class DataIntegrityError(EngineError):
    code = "DATA_INTEGRITY_ERROR"
    status_code = 503


class OutputStructureError(EngineError):
    code = "OUTPUT_STRUCTURE_ERROR"

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            f"Output structure validation failed: {', '.join(errors)}",
            details=errors,
        )
        self.errors = errors


class BiasDetectedError(EngineError):
    code = "BIAS_DETECTED"

    def __init__(self, issues: list[str]) -> None:
        super().__init__(f"Bias detected in output: {', '.join(issues)}", details=issues)
        self.issues = issues


class RuleTableError(EngineError):
    code = "RULE_TABLE_ERROR"


class DataReloadError(EngineError):
    code = "DATA_RELOAD_ERROR"

    def __init__(self, load_results: list[dict[str, Any]]) -> None:
        super().__init__("Failed to reload data", details=load_results)


class RateLimitExceeded(EngineError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, retry_after: int) -> None:
        super().__init__("Too many requests from this IP, please try again later.")
        self.retry_after = retry_after
