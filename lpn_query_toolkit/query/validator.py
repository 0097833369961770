"""Comparison of decoded public inputs with the caller's query"""

from typing import Any, Type

from lpn_query_toolkit.query.types import PublicInputs, Query, QueryIdentifier
from lpn_query_toolkit.shared.exceptions import (
    BlockHashMismatch,
    ContractAddressMismatch,
    FieldMismatch,
    IdentifierMismatch,
    MaxBlockNumberMismatch,
    MinBlockNumberMismatch,
    RewardsRateMismatch,
    UserAddressMismatch,
)


def _check(expected: Any, actual: Any, error: Type[FieldMismatch]) -> None:
    if expected != actual:
        raise error(expected, actual)


class QueryValidator:
    """
    Field-by-field equality between a Query and proved public inputs.

    Checks run in a fixed order and the first mismatch raises. The rewards
    rate is part of the ERC20 query only; for NFT queries its slot is not
    constrained and is never compared. The identifier is compared last.
    """

    def validate(self, pis: PublicInputs, query: Query) -> None:
        _check(
            query.min_block_number,
            pis.min_block_number,
            MinBlockNumberMismatch,
        )
        _check(
            query.max_block_number,
            pis.max_block_number,
            MaxBlockNumberMismatch,
        )
        # Both sides are checksum addresses
        _check(
            query.contract_address,
            pis.contract_address,
            ContractAddressMismatch,
        )
        _check(query.user_address, pis.user_address, UserAddressMismatch)
        _check(query.block_hash, pis.block_hash, BlockHashMismatch)

        if pis.identifier == QueryIdentifier.ERC20:
            _check(query.rewards_rate, pis.rewards_rate, RewardsRateMismatch)

        _check(query.identifier, pis.identifier, IdentifierMismatch)
