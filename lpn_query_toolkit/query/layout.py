"""
Byte layout of the recursive-proof public inputs.

Each public input of the revelation circuit is a Goldilocks element
serialized as 8 little-endian bytes. A "digit" is the low 4 bytes of one
element, so an N-digit field occupies N * 8 bytes. The elements appear in
the order the circuit registers them:

    idx  field                 digits
    0    block_number          1
    1    range                 1
    2    min_block_number      1
    3    max_block_number      1
    4    contract_address      5
    9    user_address          5
    14   mapping_slot          1
    15   mapping_slot_length   1
    16   nft_ids               L
    16+L block_hash            8
    24+L rewards_rate          8
    32+L erc20_result          8
    40+L identifier            1

which is (L + 41) elements in total. Every component that touches the
public-input bytes reads its offsets from ``LAYOUT``.
"""

from dataclasses import dataclass
from typing import List, Tuple

from lpn_query_toolkit.shared.constants import QueryConstants

ELEMENT_LEN = QueryConstants.ELEMENT_LEN
DIGIT_LEN = QueryConstants.DIGIT_LEN

ADDRESS_DIGITS = 5
HASH_DIGITS = 8
U256_DIGITS = 8


@dataclass(frozen=True)
class FieldSpan:
    """A contiguous run of serialized elements inside the public inputs."""

    name: str
    offset: int
    num_digits: int

    @property
    def length(self) -> int:
        return self.num_digits * ELEMENT_LEN

    @property
    def end(self) -> int:
        return self.offset + self.length

    def digit_offset(self, index: int) -> int:
        """Byte offset of the ``index``-th digit of this field."""
        if not 0 <= index < self.num_digits:
            raise IndexError(
                f"{self.name} has {self.num_digits} digits, got index {index}"
            )
        return self.offset + index * ELEMENT_LEN

    def digit_offsets(self) -> List[int]:
        return [self.digit_offset(i) for i in range(self.num_digits)]


@dataclass(frozen=True)
class PublicInputsLayout:
    """Offset table for one value of L (the number of NFT id slots)."""

    num_nft_ids: int
    block_number: FieldSpan
    range: FieldSpan
    min_block_number: FieldSpan
    max_block_number: FieldSpan
    contract_address: FieldSpan
    user_address: FieldSpan
    mapping_slot: FieldSpan
    mapping_slot_length: FieldSpan
    nft_ids: FieldSpan
    block_hash: FieldSpan
    rewards_rate: FieldSpan
    erc20_result: FieldSpan
    identifier: FieldSpan
    total_len: int

    @classmethod
    def build(
        cls, num_nft_ids: int = QueryConstants.L
    ) -> "PublicInputsLayout":
        """Lay the fields out back to back in circuit registration order."""
        sizes: List[Tuple[str, int]] = [
            ("block_number", 1),
            ("range", 1),
            ("min_block_number", 1),
            ("max_block_number", 1),
            ("contract_address", ADDRESS_DIGITS),
            ("user_address", ADDRESS_DIGITS),
            ("mapping_slot", 1),
            ("mapping_slot_length", 1),
            ("nft_ids", num_nft_ids),
            ("block_hash", HASH_DIGITS),
            ("rewards_rate", U256_DIGITS),
            ("erc20_result", U256_DIGITS),
            ("identifier", 1),
        ]
        spans = {}
        offset = 0
        for name, num_digits in sizes:
            spans[name] = FieldSpan(name, offset, num_digits)
            offset += num_digits * ELEMENT_LEN

        return cls(num_nft_ids=num_nft_ids, total_len=offset, **spans)

    def __post_init__(self):
        spans = self.spans()
        expected = 0
        for span in spans:
            if span.offset != expected:
                raise ValueError(
                    f"Layout gap or overlap at {span.name}: offset "
                    f"{span.offset}, expected {expected}"
                )
            expected = span.end
        if expected != self.total_len:
            raise ValueError(
                f"Layout length {expected} != total_len {self.total_len}"
            )
        if self.total_len != (self.num_nft_ids + 41) * ELEMENT_LEN:
            raise ValueError(
                f"Layout for L={self.num_nft_ids} must be "
                f"{(self.num_nft_ids + 41) * ELEMENT_LEN} bytes, "
                f"got {self.total_len}"
            )

    def spans(self) -> List[FieldSpan]:
        """All field spans in byte order."""
        return sorted(
            (
                value
                for value in vars(self).values()
                if isinstance(value, FieldSpan)
            ),
            key=lambda span: span.offset,
        )

    @property
    def identifier_offset(self) -> int:
        """The operation tag is the least significant byte of its element."""
        return self.identifier.offset


def check_total_len(layout: PublicInputsLayout) -> PublicInputsLayout:
    """Reject a layout whose size differs from the bundle's public inputs."""
    if layout.total_len != QueryConstants.PI_TOTAL_LEN:
        raise ValueError(
            f"Public inputs layout spans {layout.total_len} bytes, "
            f"expected {QueryConstants.PI_TOTAL_LEN}"
        )
    return layout


LAYOUT = check_total_len(PublicInputsLayout.build())
