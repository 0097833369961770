"""Binding between the Groth16 proof and the recursive-proof public inputs"""

from typing import Sequence

from eth_utils import keccak

from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import (
    CircuitBindingMismatch,
    DigestBindingMismatch,
)

# Positions inside the Groth16 public-input triple
CIRCUIT_DIGEST_INDEX = 0
PUBLIC_INPUTS_DIGEST_INDEX = 2


def compute_public_inputs_digest(data: bytes) -> int:
    """
    keccak256 of the public-input bytes with the top 3 bits cleared.

    The masked value is always below the BN254 scalar field modulus.
    """
    digest = int.from_bytes(keccak(bytes(data)), "big")
    return digest & QueryConstants.DIGEST_MASK


class BindingHasher:
    """Checks that a Groth16 proof wraps the expected circuit and inputs."""

    def __init__(self, circuit_digest: int):
        self.circuit_digest = circuit_digest

    def verify_circuit_binding(self, groth16_inputs: Sequence[int]) -> None:
        actual = groth16_inputs[CIRCUIT_DIGEST_INDEX]
        if actual != self.circuit_digest:
            raise CircuitBindingMismatch(self.circuit_digest, actual)

    def verify_digest_binding(
        self, groth16_inputs: Sequence[int], public_inputs: bytes
    ) -> int:
        """
        Recompute the public-inputs digest and compare it to the proof's.

        Returns:
            int: The masked digest, for logging by the caller.
        """
        claimed = groth16_inputs[PUBLIC_INPUTS_DIGEST_INDEX]
        computed = compute_public_inputs_digest(public_inputs)
        if computed != claimed:
            raise DigestBindingMismatch(claimed, computed)
        return computed
