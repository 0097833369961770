"""
Query verification service.

Wraps ``QueryProcessor`` for callers that prefer structured results to
exceptions, such as the CLI and batch verification runs.
"""

from typing import Iterable, List, Optional, Tuple

from lpn_query_toolkit.query.processor import BundleLike, QueryProcessor
from lpn_query_toolkit.query.primitive import (
    ContractPairingVerifier,
    ProofPrimitiveVerifier,
)
from lpn_query_toolkit.query.types import Query
from lpn_query_toolkit.shared.exceptions import (
    CircuitBindingMismatch,
    DigestBindingMismatch,
    FieldMismatch,
    MalformedBundle,
    ProofPrimitiveException,
    QueryVerificationException,
    RetryableException,
    UnsupportedIdentifier,
)
from lpn_query_toolkit.shared.logging import get_logger
from lpn_query_toolkit.shared.results import (
    ErrorSeverity,
    ProcessingError,
    Result,
    VerificationSummary,
)

_logger = get_logger(__name__)

# Rejection source by exception family, in gate order
_SOURCES = (
    (MalformedBundle, "bundle"),
    (ProofPrimitiveException, "primitive"),
    (CircuitBindingMismatch, "binding"),
    (DigestBindingMismatch, "binding"),
    (FieldMismatch, "validator"),
    (UnsupportedIdentifier, "extractor"),
)


def _error_source(error: Exception) -> str:
    for exc_type, source in _SOURCES:
        if isinstance(error, exc_type):
            return source
    return "processor"


class QueryVerificationService:
    """A service for verifying LPN query proofs"""

    def __init__(
        self,
        primitive: ProofPrimitiveVerifier,
        circuit_digest: Optional[int] = None,
    ):
        self.processor = QueryProcessor(primitive, circuit_digest)

    @classmethod
    def for_chain(
        cls,
        chain_id: int,
        verifier_address: Optional[str] = None,
        circuit_digest: Optional[int] = None,
    ) -> "QueryVerificationService":
        """Build a service backed by the on-chain Groth16 verifier."""
        primitive = ContractPairingVerifier(chain_id, verifier_address)
        return cls(primitive, circuit_digest)

    def verify(self, bundle: BundleLike, query: Query) -> Result[List[int]]:
        """
        Verify a bundle against a query.

        Args:
            bundle: A ProofBundle or its 32-byte words
            query: The query the caller expects the bundle to answer

        Returns:
            Result[List[int]]: Success with the released result, or failure
            naming the gate that rejected the bundle
        """
        context = {
            "identifier": query.identifier,
            "contract": query.contract_address,
            "user": query.user_address,
            "blocks": f"{query.min_block_number}-{query.max_block_number}",
        }

        try:
            return Result.ok(self.processor.process_query(bundle, query))
        except QueryVerificationException as e:
            return Result.fail(
                ProcessingError(
                    source=_error_source(e),
                    message=f"Query proof rejected: {e.message}",
                    severity=ErrorSeverity.ERROR,
                    context=context,
                    exception=e,
                )
            )
        except RetryableException as e:
            # Retries already exhausted; the proof itself is undecided
            return Result.fail(
                ProcessingError(
                    source="primitive",
                    message=f"Verifier unavailable: {e.message}",
                    severity=ErrorSeverity.CRITICAL,
                    context=context,
                    exception=e,
                )
            )

    def verify_many(
        self, items: Iterable[Tuple[str, BundleLike, Query]]
    ) -> VerificationSummary:
        """
        Verify a batch of ``(label, bundle, query)`` items.

        Rejections are recorded and the batch continues; a CRITICAL error
        (verifier unreachable) stops the batch.
        """
        summary = VerificationSummary()

        for label, bundle, query in items:
            result = self.verify(bundle, query)
            if result.success:
                summary.record_success(query.identifier, label, result.data)
                continue

            for error in result.errors:
                error.context["label"] = label
            summary.record_failure(result)

            if result.has_critical_errors():
                _logger.error(
                    f"Stopping batch at {label}: "
                    f"{'; '.join(result.get_error_messages())}"
                )
                break

        _logger.info(
            f"Verified {summary.accepted + summary.rejected} bundle(s): "
            f"{summary.accepted} accepted, {summary.rejected} rejected"
        )
        return summary
