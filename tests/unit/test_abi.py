"""
Unit tests for processQuery ABI helpers.
"""

import pytest
from eth_abi import encode
from eth_utils import keccak

from lpn_query_toolkit.query.abi import (
    PROCESS_QUERY_SELECTOR,
    PROCESS_QUERY_SIGNATURE,
    decode_process_query_calldata,
    decode_query_result,
    encode_process_query_calldata,
    encode_query_result,
)
from lpn_query_toolkit.query.processor import QueryProcessor
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import MalformedBundle


class TestProcessQueryCalldata:
    """Tests for processQuery calldata."""

    def test_selector(self):
        assert PROCESS_QUERY_SELECTOR == keccak(
            text=PROCESS_QUERY_SIGNATURE
        )[:4]

    def test_calldata_starts_with_selector(self, nft_bundle, make_query):
        calldata = encode_process_query_calldata(nft_bundle, make_query())
        assert calldata.startswith("0x" + PROCESS_QUERY_SELECTOR.hex())

    def test_decode_restores_arguments(self, nft_bundle, make_query):
        query = make_query(
            identifier=QueryConstants.QUERY_IDENTIFIER_ERC20, rewards_rate=9
        )
        calldata = encode_process_query_calldata(nft_bundle, query)
        bundle, decoded = decode_process_query_calldata(calldata)
        assert bundle == nft_bundle
        assert decoded == query

    def test_decoded_bundle_verifies(
        self, fake_primitive, circuit_digest, nft_bundle, make_query
    ):
        calldata = encode_process_query_calldata(nft_bundle, make_query())
        bundle, query = decode_process_query_calldata(calldata)
        processor = QueryProcessor(fake_primitive, circuit_digest)
        assert processor.process_query(bundle, query) == [1, 2, 3, 4, 5]

    def test_block_hash_is_big_endian_bytes32(self, nft_bundle, make_query):
        query = make_query(block_hash=1)
        calldata = encode_process_query_calldata(nft_bundle, query)
        _, decoded = decode_process_query_calldata(calldata)
        assert decoded.block_hash == 1

    def test_wrong_selector(self, nft_bundle, make_query):
        calldata = encode_process_query_calldata(nft_bundle, make_query())
        with pytest.raises(MalformedBundle):
            decode_process_query_calldata("0xdeadbeef" + calldata[10:])

    def test_truncated_calldata(self, nft_bundle, make_query):
        calldata = encode_process_query_calldata(nft_bundle, make_query())
        with pytest.raises(MalformedBundle):
            decode_process_query_calldata(calldata[:200])


class TestQueryResult:
    """Tests for the uint256[] result encoding."""

    def test_encode_matches_eth_abi(self):
        assert encode_query_result([1, 2]) == "0x" + encode(
            ["uint256[]"], [[1, 2]]
        ).hex()

    def test_decode(self):
        output = encode_query_result([1, 2, 3, 4, 5])
        assert decode_query_result(output) == [1, 2, 3, 4, 5]
