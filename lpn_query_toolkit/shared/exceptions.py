"""
Exception hierarchy for the LPN Query Toolkit.

Exception Categories:
- RetryableException: Transient failures that may succeed on retry (RPC, network)
- NonRetryableException: Permanent failures that won't benefit from retry (bad data)
- ConfigurationException: Startup/config errors that prevent operation

Query verification failures are all NonRetryableException: a bundle that
was rejected once will be rejected again, so nothing upstream should retry
them. Only the transport of the on-chain pairing check is retryable.

QueryVerificationException
├── MalformedBundle
├── ProofPrimitiveException
│   ├── ProofInvalid
│   └── PublicInputNotInField
├── CircuitBindingMismatch
├── DigestBindingMismatch
├── FieldMismatch
│   ├── MinBlockNumberMismatch
│   ├── MaxBlockNumberMismatch
│   ├── ContractAddressMismatch
│   ├── UserAddressMismatch
│   ├── BlockHashMismatch
│   ├── RewardsRateMismatch
│   └── IdentifierMismatch
└── UnsupportedIdentifier
"""

from typing import Any, Optional


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on retry.

    Use for transient failures like:
    - RPC timeouts
    - Rate limiting
    - Temporary network issues
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Invalid input data
    - Rejected proofs
    - Query mismatches
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are missing (circuit digest, RPC URL)
    - Invalid configuration values
    - Missing required resources (verifier ABI)
    """

    pass


class VerifierRpcException(RetryableException):
    """
    Exception for transport failures while calling the on-chain verifier.

    Inherits from RetryableException because an unreachable RPC node says
    nothing about the proof itself.
    """

    pass


# =============================================================================
# QUERY VERIFICATION
# =============================================================================


class QueryVerificationException(NonRetryableException):
    """Base class for every reason a proof bundle can be rejected."""

    pass


class MalformedBundle(QueryVerificationException):
    """The bundle does not have the fixed word layout."""

    pass


class ProofPrimitiveException(QueryVerificationException):
    """The Groth16 pairing check rejected the proof or its inputs."""

    pass


class ProofInvalid(ProofPrimitiveException):
    """The pairing equation does not hold for the given proof."""

    pass


class PublicInputNotInField(ProofPrimitiveException):
    """A Groth16 public input is not a canonical scalar field element."""

    pass


class CircuitBindingMismatch(QueryVerificationException):
    """The proof was produced for a different wrapping circuit."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Circuit digest mismatch: expected {hex(expected)}, got {hex(actual)}"
        )
        self.expected = expected
        self.actual = actual


class DigestBindingMismatch(QueryVerificationException):
    """The public-input bytes do not hash to the digest the proof commits to."""

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Public inputs digest mismatch: proof commits to {hex(expected)}, "
            f"bytes hash to {hex(actual)}"
        )
        self.expected = expected
        self.actual = actual


class FieldMismatch(QueryVerificationException):
    """
    A decoded public input disagrees with the query the caller asserted.

    Subclasses set ``field_name``; ``expected`` is the caller's value and
    ``actual`` the value that was proved.
    """

    field_name = "field"

    def __init__(self, expected: Any, actual: Any):
        super().__init__(
            f"{self.field_name} mismatch: query has {expected!r}, "
            f"proof has {actual!r}"
        )
        self.expected = expected
        self.actual = actual


class MinBlockNumberMismatch(FieldMismatch):
    field_name = "min_block_number"


class MaxBlockNumberMismatch(FieldMismatch):
    field_name = "max_block_number"


class ContractAddressMismatch(FieldMismatch):
    field_name = "contract_address"


class UserAddressMismatch(FieldMismatch):
    field_name = "user_address"


class BlockHashMismatch(FieldMismatch):
    field_name = "block_hash"


class RewardsRateMismatch(FieldMismatch):
    field_name = "rewards_rate"


class IdentifierMismatch(FieldMismatch):
    field_name = "identifier"


class UnsupportedIdentifier(QueryVerificationException):
    """The operation tag is neither the NFT nor the ERC20 identifier."""

    def __init__(self, identifier: Optional[int]):
        super().__init__(f"Unsupported query identifier: {identifier!r}")
        self.identifier = identifier
