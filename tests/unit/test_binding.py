"""
Unit tests for the Groth16 / public inputs binding checks.
"""

import pytest
from eth_utils import keccak

from lpn_query_toolkit.query.binding import (
    BindingHasher,
    compute_public_inputs_digest,
)
from lpn_query_toolkit.query.codec import encode_public_inputs
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import (
    CircuitBindingMismatch,
    DigestBindingMismatch,
)


class TestComputeDigest:
    """Tests for compute_public_inputs_digest."""

    def test_is_masked_keccak(self):
        data = b"lpn public inputs"
        expected = int.from_bytes(keccak(data), "big") & ((1 << 253) - 1)
        assert compute_public_inputs_digest(data) == expected

    def test_top_three_bits_cleared(self):
        for i in range(32):
            digest = compute_public_inputs_digest(bytes([i]) * 368)
            assert digest >> 253 == 0

    def test_fits_scalar_field(self):
        assert QueryConstants.DIGEST_MASK < QueryConstants.BN254_SCALAR_FIELD


class TestBindingHasher:
    """Tests for the circuit and digest bindings."""

    def test_circuit_binding_accepts_expected(self, circuit_digest):
        BindingHasher(circuit_digest).verify_circuit_binding(
            [circuit_digest, 0, 0]
        )

    def test_circuit_binding_rejects_other(self, circuit_digest):
        hasher = BindingHasher(circuit_digest)
        with pytest.raises(CircuitBindingMismatch) as exc_info:
            hasher.verify_circuit_binding([circuit_digest + 1, 0, 0])
        assert exc_info.value.expected == circuit_digest
        assert exc_info.value.actual == circuit_digest + 1

    def test_digest_binding_returns_digest(
        self, circuit_digest, nft_public_inputs
    ):
        data = encode_public_inputs(nft_public_inputs)
        digest = compute_public_inputs_digest(data)
        hasher = BindingHasher(circuit_digest)
        assert hasher.verify_digest_binding([0, 0, digest], data) == digest

    def test_digest_binding_rejects_changed_byte(
        self, circuit_digest, nft_public_inputs
    ):
        data = bytearray(encode_public_inputs(nft_public_inputs))
        digest = compute_public_inputs_digest(bytes(data))
        data[100] ^= 0x01
        with pytest.raises(DigestBindingMismatch):
            BindingHasher(circuit_digest).verify_digest_binding(
                [0, 0, digest], bytes(data)
            )

    def test_digest_is_checked_in_third_slot(
        self, circuit_digest, nft_public_inputs
    ):
        data = encode_public_inputs(nft_public_inputs)
        digest = compute_public_inputs_digest(data)
        with pytest.raises(DigestBindingMismatch):
            BindingHasher(circuit_digest).verify_digest_binding(
                [0, digest, 0], data
            )
