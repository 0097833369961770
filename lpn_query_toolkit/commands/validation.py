from eth_utils import is_address, to_checksum_address

from lpn_query_toolkit.query.types import QueryIdentifier
from lpn_query_toolkit.shared.constants import GlobalConstants
from lpn_query_toolkit.shared.exceptions import UnsupportedIdentifier


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_chain_id(chain_id: int) -> None:
    """Validate chain ID"""
    valid_chain_ids = set(GlobalConstants.CHAIN_ID_TO_RPC)
    if chain_id not in valid_chain_ids:
        raise ValueError(
            f"Invalid chain_id: {chain_id}. Must be one of {valid_chain_ids}"
        )


def validate_identifier(identifier: str) -> QueryIdentifier:
    """Validate and normalize a query identifier ("nft", "erc20", 67, 88)"""
    try:
        return QueryIdentifier.parse(identifier)
    except UnsupportedIdentifier:
        valid = {i.name.lower(): i.value for i in QueryIdentifier}
        raise ValueError(
            f"Invalid identifier: {identifier}. Must be one of {valid}"
        ) from None
