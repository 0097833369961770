"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

from dataclasses import replace
from typing import Callable, Dict, Optional, Sequence, Set, Tuple
from unittest.mock import MagicMock

import pytest
from eth_utils import keccak

from lpn_query_toolkit.query.binding import compute_public_inputs_digest
from lpn_query_toolkit.query.bundle import ProofBundle
from lpn_query_toolkit.query.codec import encode_public_inputs
from lpn_query_toolkit.query.types import PublicInputs, Query
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import (
    ProofInvalid,
    PublicInputNotInField,
)

TEST_CIRCUIT_DIGEST = 0x1F3C5A7B9D0E2F4A6C8E0B1D3F5A7C9E0B2D4F6A8C0E1B3D5F7A9C0E2B4D6F8

CONTRACT_ADDRESS = "0xb90ed61bffed1df72f2ceebd965198ad57adfcbd"
USER_ADDRESS = "0x21471c9771c39149b1e42483a785a49f3873d0a5"
BLOCK_HASH = int.from_bytes(
    bytes(
        [
            59, 29, 137, 127, 105, 222, 146, 7, 197, 154, 29, 147, 160, 158,
            243, 163, 194, 164, 70, 74, 21, 84, 190, 107, 170, 77, 180, 48,
            171, 56, 194, 78,
        ]
    ),
    "big",
)
MIN_BLOCK = 5594942
MAX_BLOCK = 5594951


class FakePairingVerifier:
    """
    Stand-in for the Groth16 pairing check.

    Accepts exactly the (proof, inputs) pairs it issued, so any change to
    the 11 Groth16 words of a bundle fails like a real pairing would.
    """

    def __init__(self):
        self.issued: Set[Tuple[Tuple[int, ...], Tuple[int, ...]]] = set()
        self.calls = 0

    def issue(self, inputs: Sequence[int]) -> list:
        seed = b"".join(v.to_bytes(32, "big") for v in inputs)
        proof = [
            int.from_bytes(keccak(bytes([i]) + seed), "big")
            % QueryConstants.BN254_SCALAR_FIELD
            for i in range(QueryConstants.NUM_PROOF_WORDS)
        ]
        self.issued.add((tuple(proof), tuple(inputs)))
        return proof

    def verify(self, proof: Sequence[int], inputs: Sequence[int]) -> None:
        self.calls += 1
        if any(v >= QueryConstants.BN254_SCALAR_FIELD for v in inputs):
            raise PublicInputNotInField("input not in field")
        if (tuple(proof), tuple(inputs)) not in self.issued:
            raise ProofInvalid("pairing check failed")


@pytest.fixture
def fake_primitive() -> FakePairingVerifier:
    """Fake Groth16 primitive that accepts only proofs it issued."""
    return FakePairingVerifier()


@pytest.fixture
def circuit_digest() -> int:
    return TEST_CIRCUIT_DIGEST


@pytest.fixture
def nft_public_inputs() -> PublicInputs:
    """Public inputs of an NFT query over the sample contract and user."""
    return PublicInputs(
        block_number=MAX_BLOCK,
        range=MAX_BLOCK - MIN_BLOCK + 1,
        min_block_number=MIN_BLOCK,
        max_block_number=MAX_BLOCK,
        contract_address=CONTRACT_ADDRESS,
        user_address=USER_ADDRESS,
        mapping_slot=2,
        mapping_slot_length=20,
        nft_ids=(1, 2, 3, 4, 5),
        block_hash=BLOCK_HASH,
        rewards_rate=0,
        erc20_result=0,
        identifier=QueryConstants.QUERY_IDENTIFIER_NFT,
    )


@pytest.fixture
def erc20_public_inputs(nft_public_inputs) -> PublicInputs:
    """Public inputs of an ERC20 query with rewards rate 2 and result 1."""
    return replace(
        nft_public_inputs,
        nft_ids=(0, 0, 0, 0, 0),
        rewards_rate=2,
        erc20_result=1,
        identifier=QueryConstants.QUERY_IDENTIFIER_ERC20,
    )


@pytest.fixture
def make_query() -> Callable[..., Query]:
    """Factory for queries matching the sample public inputs."""

    def _make(**overrides) -> Query:
        fields: Dict[str, object] = {
            "contract_address": CONTRACT_ADDRESS,
            "user_address": USER_ADDRESS,
            "client_address": USER_ADDRESS,
            "min_block_number": MIN_BLOCK,
            "max_block_number": MAX_BLOCK,
            "block_hash": BLOCK_HASH,
            "rewards_rate": 2,
            "identifier": QueryConstants.QUERY_IDENTIFIER_NFT,
        }
        fields.update(overrides)
        return Query(**fields)

    return _make


@pytest.fixture
def make_bundle(fake_primitive) -> Callable[..., ProofBundle]:
    """
    Factory for bundles the fake primitive accepts.

    ``digest`` and ``circuit`` override the values committed to in the
    Groth16 inputs; the proof is still issued for those inputs.
    """

    def _make(
        pis: PublicInputs,
        circuit: int = TEST_CIRCUIT_DIGEST,
        digest: Optional[int] = None,
    ) -> ProofBundle:
        public_inputs = encode_public_inputs(pis)
        if digest is None:
            digest = compute_public_inputs_digest(public_inputs)
        inputs = [circuit, 0, digest]
        proof = fake_primitive.issue(inputs)
        return ProofBundle.build(proof, inputs, public_inputs)

    return _make


@pytest.fixture
def nft_bundle(make_bundle, nft_public_inputs) -> ProofBundle:
    return make_bundle(nft_public_inputs)


@pytest.fixture
def erc20_bundle(make_bundle, erc20_public_inputs) -> ProofBundle:
    return make_bundle(erc20_public_inputs)


@pytest.fixture
def mock_web3_service():
    """Mock Web3Service whose verifier contract accepts every proof."""
    service = MagicMock()
    contract = MagicMock()
    contract.functions.verifyProof.return_value.call.return_value = []
    service.get_contract.return_value = contract
    return service


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line("markers", "slow: mark test as slow-running")
