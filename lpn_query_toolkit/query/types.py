"""
Type definitions for LPN query verification.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Tuple, TypedDict, Union

from eth_utils import is_address, to_checksum_address

from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import UnsupportedIdentifier

# =============================================================================
# ENUMS
# =============================================================================


class QueryIdentifier(IntEnum):
    """Operation tag selecting the result shape of a query."""

    NFT = QueryConstants.QUERY_IDENTIFIER_NFT  # L token ids owned by a user
    ERC20 = QueryConstants.QUERY_IDENTIFIER_ERC20  # one uint256 aggregate

    @classmethod
    def parse(
        cls, value: Union[int, str, "QueryIdentifier"]
    ) -> "QueryIdentifier":
        """Accept a tag value (67 / 88) or a name ("nft" / "erc20")."""
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
        try:
            if isinstance(value, str):
                return cls(int(value.strip(), 0))
            return cls(int(value))
        except (TypeError, ValueError):
            raise UnsupportedIdentifier(value) from None


# =============================================================================
# QUERY
# =============================================================================


def _parse_uint(value: Union[int, str, bytes], name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {name}: {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, (bytes, bytearray)):
        result = int.from_bytes(value, "big")
    elif isinstance(value, str):
        try:
            result = int(value.strip(), 0)
        except ValueError:
            raise ValueError(f"Invalid {name}: {value!r}") from None
    else:
        raise ValueError(f"Invalid {name}: {value!r}")
    if result < 0 or result >= 1 << 256:
        raise ValueError(f"Invalid {name}: {value!r} is not a uint256")
    return result


def _parse_address(value: Union[str, bytes], name: str) -> str:
    if isinstance(value, (bytes, bytearray)) and len(value) == 20:
        return to_checksum_address(bytes(value))
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid {name}: {value!r} is not an address")
    return to_checksum_address(value)


@dataclass(frozen=True)
class Query:
    """
    The query a caller expects a proof bundle to answer.

    ``client_address`` is carried for the caller's bookkeeping only and is
    never compared with the proved public inputs.
    """

    contract_address: str
    user_address: str
    client_address: str
    min_block_number: int
    max_block_number: int
    block_hash: int
    rewards_rate: int
    identifier: int

    def __post_init__(self):
        for name in ("contract_address", "user_address", "client_address"):
            object.__setattr__(
                self, name, _parse_address(getattr(self, name), name)
            )
        for name in ("min_block_number", "max_block_number"):
            value = _parse_uint(getattr(self, name), name)
            if value >= 1 << 32:
                raise ValueError(f"Invalid {name}: {value} is not a uint32")
            object.__setattr__(self, name, value)
        object.__setattr__(
            self, "block_hash", _parse_uint(self.block_hash, "block_hash")
        )
        object.__setattr__(
            self,
            "rewards_rate",
            _parse_uint(self.rewards_rate, "rewards_rate"),
        )
        # Unknown numeric tags are accepted here and rejected by the
        # processor; only symbolic names are resolved eagerly
        identifier = self.identifier
        if (
            isinstance(identifier, str)
            and identifier.strip().upper() in QueryIdentifier.__members__
        ):
            identifier = int(QueryIdentifier[identifier.strip().upper()])
        object.__setattr__(
            self, "identifier", _parse_uint(identifier, "identifier")
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Query":
        """Build a query from JSON-style data (hex strings or integers)."""
        try:
            return cls(
                contract_address=data["contract_address"],
                user_address=data["user_address"],
                client_address=data.get(
                    "client_address", data["user_address"]
                ),
                min_block_number=data["min_block_number"],
                max_block_number=data["max_block_number"],
                block_hash=data["block_hash"],
                rewards_rate=data.get("rewards_rate", 0),
                identifier=data["identifier"],
            )
        except KeyError as e:
            raise ValueError(f"Missing query field: {e.args[0]}") from None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "contract_address": self.contract_address,
            "user_address": self.user_address,
            "client_address": self.client_address,
            "min_block_number": self.min_block_number,
            "max_block_number": self.max_block_number,
            "block_hash": "0x" + self.block_hash.to_bytes(32, "big").hex(),
            "rewards_rate": self.rewards_rate,
            "identifier": self.identifier,
        }


# =============================================================================
# DECODED PUBLIC INPUTS
# =============================================================================


@dataclass(frozen=True)
class PublicInputs:
    """
    Typed view over the recursive-proof public inputs.

    Only the query-related fields are compared with a Query; block_number,
    range and the mapping slots are exposed for inspection.
    """

    min_block_number: int
    max_block_number: int
    contract_address: str
    user_address: str
    identifier: int
    nft_ids: Tuple[int, ...] = field(
        default_factory=lambda: (0,) * QueryConstants.L
    )
    block_hash: int = 0
    rewards_rate: int = 0
    erc20_result: int = 0
    block_number: int = 0
    range: int = 0
    mapping_slot: int = 0
    mapping_slot_length: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PublicInputs":
        """Build public inputs from a JSON field description."""
        uint_fields = (
            "min_block_number",
            "max_block_number",
            "block_hash",
            "rewards_rate",
            "erc20_result",
            "block_number",
            "range",
            "mapping_slot",
            "mapping_slot_length",
        )
        try:
            values: Dict[str, Any] = {
                name: _parse_uint(data[name], name)
                for name in uint_fields
                if name in data
            }
            for name in ("contract_address", "user_address"):
                values[name] = _parse_address(data[name], name)
            values["identifier"] = int(
                QueryIdentifier.parse(data["identifier"])
            )
        except KeyError as e:
            raise ValueError(
                f"Missing public input field: {e.args[0]}"
            ) from None
        if "nft_ids" in data:
            values["nft_ids"] = tuple(
                _parse_uint(v, "nft_ids") for v in data["nft_ids"]
            )
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "block_number": self.block_number,
            "range": self.range,
            "min_block_number": self.min_block_number,
            "max_block_number": self.max_block_number,
            "contract_address": self.contract_address,
            "user_address": self.user_address,
            "mapping_slot": self.mapping_slot,
            "mapping_slot_length": self.mapping_slot_length,
            "nft_ids": list(self.nft_ids),
            "block_hash": "0x" + self.block_hash.to_bytes(32, "big").hex(),
            "rewards_rate": str(self.rewards_rate),
            "erc20_result": str(self.erc20_result),
            "identifier": self.identifier,
        }


class VerifiedQueryDict(TypedDict):
    """Output written by the verify-query command."""

    query: Dict[str, Any]
    identifier: str
    result: list
