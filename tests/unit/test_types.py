"""
Unit tests for query types.
"""

import pytest
from eth_utils import to_checksum_address

from lpn_query_toolkit.query.types import (
    PublicInputs,
    Query,
    QueryIdentifier,
)
from lpn_query_toolkit.shared.exceptions import UnsupportedIdentifier

CONTRACT = "0xb90ed61bffed1df72f2ceebd965198ad57adfcbd"
USER = "0x21471c9771c39149b1e42483a785a49f3873d0a5"


def _query_dict(**overrides):
    data = {
        "contract_address": CONTRACT,
        "user_address": USER,
        "min_block_number": 5594942,
        "max_block_number": "0x555f47",
        "block_hash": "0x" + "ab" * 32,
        "identifier": "nft",
    }
    data.update(overrides)
    return data


class TestQueryIdentifier:
    """Tests for operation tag parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (67, QueryIdentifier.NFT),
            ("67", QueryIdentifier.NFT),
            ("nft", QueryIdentifier.NFT),
            ("ERC20", QueryIdentifier.ERC20),
            ("0x58", QueryIdentifier.ERC20),
            (QueryIdentifier.ERC20, QueryIdentifier.ERC20),
        ],
    )
    def test_parse(self, value, expected):
        assert QueryIdentifier.parse(value) is expected

    @pytest.mark.parametrize("value", [0, 68, "erc721", "", None])
    def test_parse_unsupported(self, value):
        with pytest.raises(UnsupportedIdentifier):
            QueryIdentifier.parse(value)


class TestQuery:
    """Tests for Query normalization."""

    def test_from_dict(self):
        query = Query.from_dict(_query_dict())
        assert query.contract_address == to_checksum_address(CONTRACT)
        assert query.client_address == query.user_address
        assert query.max_block_number == 5594951
        assert query.block_hash == int("ab" * 32, 16)
        assert query.rewards_rate == 0
        assert query.identifier == 67

    def test_to_dict_round_trips(self):
        query = Query.from_dict(_query_dict(rewards_rate="2"))
        assert Query.from_dict(query.to_dict()) == query

    def test_missing_field(self):
        data = _query_dict()
        del data["block_hash"]
        with pytest.raises(ValueError, match="block_hash"):
            Query.from_dict(data)

    def test_invalid_address(self):
        with pytest.raises(ValueError, match="contract_address"):
            Query.from_dict(_query_dict(contract_address="0x1234"))

    def test_block_number_must_fit_u32(self):
        with pytest.raises(ValueError):
            Query.from_dict(_query_dict(min_block_number=1 << 32))

    def test_negative_rewards_rate(self):
        with pytest.raises(ValueError):
            Query.from_dict(_query_dict(rewards_rate=-1))

    def test_unknown_numeric_identifier_is_kept(self):
        assert Query.from_dict(_query_dict(identifier=1)).identifier == 1

    def test_is_immutable(self):
        query = Query.from_dict(_query_dict())
        with pytest.raises(AttributeError):
            query.identifier = 88


class TestPublicInputs:
    """Tests for PublicInputs helpers."""

    def test_from_dict_defaults(self):
        pis = PublicInputs.from_dict(
            {
                "contract_address": CONTRACT,
                "user_address": USER,
                "min_block_number": 1,
                "max_block_number": 2,
                "identifier": "erc20",
                "erc20_result": "0x10",
            }
        )
        assert pis.identifier == 88
        assert pis.erc20_result == 16
        assert pis.nft_ids == (0, 0, 0, 0, 0)
        assert pis.block_hash == 0

    def test_from_dict_missing_identifier(self):
        with pytest.raises(ValueError, match="identifier"):
            PublicInputs.from_dict(
                {
                    "contract_address": CONTRACT,
                    "user_address": USER,
                    "min_block_number": 1,
                    "max_block_number": 2,
                }
            )

    def test_to_dict(self, nft_public_inputs):
        d = nft_public_inputs.to_dict()
        assert d["nft_ids"] == [1, 2, 3, 4, 5]
        assert d["identifier"] == 67
        assert d["block_hash"].startswith("0x")
        assert len(d["block_hash"]) == 66
