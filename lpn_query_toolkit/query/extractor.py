"""Query result extraction from verified public inputs"""

from typing import List

from lpn_query_toolkit.query.codec import (
    convert_byte_slice_to_u256,
    convert_direct_32,
)
from lpn_query_toolkit.query.layout import LAYOUT, PublicInputsLayout
from lpn_query_toolkit.query.types import QueryIdentifier
from lpn_query_toolkit.shared.exceptions import UnsupportedIdentifier


class ResultExtractor:
    """Slices the result payload according to the decoded operation tag."""

    def __init__(self, layout: PublicInputsLayout = LAYOUT):
        self.layout = layout

    def extract(self, public_inputs: bytes, identifier: int) -> List[int]:
        """
        Decode the query result.

        Args:
            public_inputs: The verified public-input bytes
            identifier: The operation tag decoded from those bytes

        Returns:
            List[int]: L token ids for an NFT query, or a single aggregate
            value for an ERC20 query
        """
        if identifier == QueryIdentifier.NFT:
            return [
                convert_direct_32(public_inputs, offset)
                for offset in self.layout.nft_ids.digit_offsets()
            ]
        if identifier == QueryIdentifier.ERC20:
            return [
                convert_byte_slice_to_u256(
                    public_inputs, self.layout.erc20_result.offset
                )
            ]
        raise UnsupportedIdentifier(identifier)
