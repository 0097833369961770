"""
Result types for explicit success/failure tracking in query verification.

The verification core raises on the first failing gate. The service layer
converts those exceptions into these structured results so that batch runs
can report every rejected bundle without silently dropping any.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Severity levels for processing errors."""

    WARNING = "warning"  # Continue processing, log issue
    ERROR = "error"  # Skip this item, continue others
    CRITICAL = "critical"  # Stop processing entirely


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Component that generated the error (e.g., "binding", "validator")
        message: Human-readable error description
        severity: How severe the error is (affects control flow)
        context: Additional context like the query identifier or block range
        exception: Original exception if available
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    @property
    def reason(self) -> Optional[str]:
        """Class name of the original exception (e.g. "DigestBindingMismatch")."""
        if self.exception is None:
            return None
        return type(self.exception).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
            "reason": self.reason,
            "context": self.context,
        }


@dataclass
class Result(Generic[T]):
    """
    Result type that carries success/failure information.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        errors: List of errors encountered (can have errors even on success for warnings)
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result with data."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ProcessingError) -> "Result[T]":
        """Create a failed result with an error."""
        return cls(success=False, errors=[error])

    def has_critical_errors(self) -> bool:
        """Check if result has any CRITICAL level errors."""
        return any(e.severity == ErrorSeverity.CRITICAL for e in self.errors)

    def get_error_messages(self) -> List[str]:
        """Get all error messages as strings."""
        return [e.message for e in self.errors]

    def unwrap(self) -> T:
        """Return the data, raising RuntimeError if the result failed."""
        if not self.success:
            raise RuntimeError("; ".join(self.get_error_messages()))
        return self.data  # type: ignore[return-value]


@dataclass
class VerificationSummary:
    """
    Summary of a batch verification run.

    Counts accepted and rejected bundles per query identifier and keeps the
    rejection reasons so that a run can be audited afterwards.
    """

    accepted: int = 0
    rejected: int = 0
    accepted_by_identifier: Dict[int, int] = field(default_factory=dict)
    errors: List[ProcessingError] = field(default_factory=list)
    results: List[Dict[str, Any]] = field(default_factory=list)

    def record_success(
        self, identifier: int, label: str, values: List[int]
    ) -> None:
        """Record an accepted bundle and its released result."""
        self.accepted += 1
        self.accepted_by_identifier[identifier] = (
            self.accepted_by_identifier.get(identifier, 0) + 1
        )
        self.results.append({"label": label, "result": values})

    def record_failure(self, result: Result) -> None:
        """Record a rejected bundle with all errors carried by its result."""
        self.rejected += 1
        self.errors.extend(result.errors)

    def rejection_reasons(self) -> Dict[str, int]:
        """Count rejections by exception class name."""
        reasons: Dict[str, int] = {}
        for error in self.errors:
            if error.severity == ErrorSeverity.WARNING:
                continue
            key = error.reason or error.source
            reasons[key] = reasons.get(key, 0) + 1
        return reasons

    def to_dict(self) -> Dict[str, Any]:
        """Convert summary to dictionary for JSON serialization."""
        total = self.accepted + self.rejected
        return {
            "success_rate": f"{self.accepted}/{total}" if total else "N/A",
            "counts": {
                "accepted": self.accepted,
                "rejected": self.rejected,
                "accepted_by_identifier": {
                    str(k): v for k, v in self.accepted_by_identifier.items()
                },
            },
            "rejection_reasons": self.rejection_reasons(),
            "errors": [e.to_dict() for e in self.errors],
            "results": self.results,
        }
