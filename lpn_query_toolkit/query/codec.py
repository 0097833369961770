"""
Public inputs codec.

Decoding rules (see ``layout`` for the offsets):

- Single-digit numbers (block numbers, NFT ids) are read *directly*: the
  4 digit bytes as a little-endian u32.
- Addresses and the block hash are assembled from *left-padded* digits: the
  4 digit bytes as a big-endian u32, digit 0 being the most significant.
- uint256 values (rewards rate, ERC20 result) are 8 direct digits combined
  with a bitwise OR and no shift. The circuits only ever populate digit 0,
  and the on-chain verifier decodes them this way, so values with higher
  limbs set decode differently from a positional sum on purpose.

The encoder is the inverse used by the revelation circuits and is what
fixtures and the ``encode-pis`` command build bundles with.
"""

from typing import Iterable, List, Sequence

from eth_utils import to_checksum_address

from lpn_query_toolkit.query.layout import (
    ADDRESS_DIGITS,
    DIGIT_LEN,
    ELEMENT_LEN,
    HASH_DIGITS,
    LAYOUT,
    U256_DIGITS,
    FieldSpan,
    PublicInputsLayout,
)
from lpn_query_toolkit.query.types import PublicInputs
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import MalformedBundle

_U32_MASK = (1 << 32) - 1
_ADDRESS_MASK = (1 << 160) - 1


# =============================================================================
# DIGIT READS
# =============================================================================


def _digit_bytes(data: bytes, offset: int) -> bytes:
    if offset < 0 or offset + DIGIT_LEN > len(data):
        raise MalformedBundle(
            f"Digit at offset {offset} is outside the {len(data)}-byte "
            "public inputs"
        )
    return bytes(data[offset : offset + DIGIT_LEN])


def convert_direct_32(data: bytes, offset: int) -> int:
    """Read 4 bytes at ``offset`` as a little-endian u32."""
    return int.from_bytes(_digit_bytes(data, offset), "little")


def convert_left_padded_32(data: bytes, offset: int) -> int:
    """Read 4 bytes at ``offset`` as a big-endian u32."""
    return int.from_bytes(_digit_bytes(data, offset), "big")


def assemble_digits(data: bytes, offset: int, num_digits: int) -> int:
    """
    Assemble ``num_digits`` left-padded digits laid out at an 8-byte stride.

    Digit ``i`` is shifted left by ``32 * (num_digits - 1 - i)`` bits.
    """
    value = 0
    for i in range(num_digits):
        digit = convert_left_padded_32(data, offset + i * ELEMENT_LEN)
        value |= digit << (32 * (num_digits - 1 - i))
    return value


def convert_to_address(data: bytes, offset: int) -> str:
    """Assemble a 160-bit account id and return its checksum address."""
    value = assemble_digits(data, offset, ADDRESS_DIGITS) & _ADDRESS_MASK
    return to_checksum_address(value.to_bytes(20, "big"))


def convert_to_hash(data: bytes, offset: int) -> int:
    """Assemble a full 256-bit hash."""
    return assemble_digits(data, offset, HASH_DIGITS)


def convert_byte_slice_to_u256(data: bytes, offset: int) -> int:
    """OR together 8 direct digits at an 8-byte stride, with no shift."""
    value = 0
    for i in range(U256_DIGITS):
        value |= convert_direct_32(data, offset + i * ELEMENT_LEN)
    return value


def convert_element_64(data: bytes, offset: int) -> int:
    """Read a whole serialized element (8 bytes, little-endian)."""
    if offset < 0 or offset + ELEMENT_LEN > len(data):
        raise MalformedBundle(
            f"Element at offset {offset} is outside the {len(data)}-byte "
            "public inputs"
        )
    return int.from_bytes(data[offset : offset + ELEMENT_LEN], "little")


# =============================================================================
# DECODING
# =============================================================================


def words_to_public_inputs(
    words: Sequence[bytes], total_len: int = QueryConstants.PI_TOTAL_LEN
) -> bytes:
    """
    Concatenate 32-byte words into the public-input byte buffer.

    The last word may only partially belong to the buffer; its extra bytes
    are dropped. No byte is reordered here.
    """
    data = b"".join(bytes(w) for w in words)
    if len(data) < total_len:
        raise MalformedBundle(
            f"Public inputs need {total_len} bytes, got {len(data)}"
        )
    return data[:total_len]


def decode_public_inputs(
    data: bytes, layout: PublicInputsLayout = LAYOUT
) -> PublicInputs:
    """Decode the fixed-layout public-input bytes into typed fields."""
    if len(data) != layout.total_len:
        raise MalformedBundle(
            f"Public inputs must be {layout.total_len} bytes, got {len(data)}"
        )

    return PublicInputs(
        block_number=convert_element_64(data, layout.block_number.offset),
        range=convert_element_64(data, layout.range.offset),
        min_block_number=convert_direct_32(
            data, layout.min_block_number.offset
        ),
        max_block_number=convert_direct_32(
            data, layout.max_block_number.offset
        ),
        contract_address=convert_to_address(
            data, layout.contract_address.offset
        ),
        user_address=convert_to_address(data, layout.user_address.offset),
        mapping_slot=convert_element_64(data, layout.mapping_slot.offset),
        mapping_slot_length=convert_element_64(
            data, layout.mapping_slot_length.offset
        ),
        nft_ids=tuple(
            convert_direct_32(data, offset)
            for offset in layout.nft_ids.digit_offsets()
        ),
        block_hash=convert_to_hash(data, layout.block_hash.offset),
        rewards_rate=convert_byte_slice_to_u256(
            data, layout.rewards_rate.offset
        ),
        erc20_result=convert_byte_slice_to_u256(
            data, layout.erc20_result.offset
        ),
        identifier=data[layout.identifier_offset],
    )


# =============================================================================
# ENCODING
# =============================================================================


def _element(value: int) -> bytes:
    if not 0 <= value < 1 << 64:
        raise ValueError(f"Element value {value} does not fit in 64 bits")
    return value.to_bytes(ELEMENT_LEN, "little")


def _left_padded_elements(raw: bytes) -> Iterable[bytes]:
    # Big-endian digit bytes in the low half of each element
    for i in range(0, len(raw), DIGIT_LEN):
        yield raw[i : i + DIGIT_LEN] + b"\x00" * (ELEMENT_LEN - DIGIT_LEN)


def _u256_elements(value: int) -> Iterable[bytes]:
    if not 0 <= value < 1 << 256:
        raise ValueError(f"Value {value} does not fit in 256 bits")
    # Least significant limb first
    for i in range(U256_DIGITS):
        yield _element((value >> (32 * i)) & _U32_MASK)


def _write(buffer: bytearray, span: FieldSpan, chunks: Iterable[bytes]):
    encoded = b"".join(chunks)
    if len(encoded) != span.length:
        raise ValueError(
            f"{span.name} needs {span.length} bytes, got {len(encoded)}"
        )
    buffer[span.offset : span.end] = encoded


def encode_public_inputs(
    pis: PublicInputs, layout: PublicInputsLayout = LAYOUT
) -> bytes:
    """Serialize public inputs the way the revelation circuits do."""
    if len(pis.nft_ids) != layout.num_nft_ids:
        raise ValueError(
            f"Expected {layout.num_nft_ids} NFT ids, got {len(pis.nft_ids)}"
        )
    for name in ("min_block_number", "max_block_number"):
        if getattr(pis, name) > _U32_MASK:
            raise ValueError(f"{name} does not fit in 32 bits")
    if any(not 0 <= nft_id <= _U32_MASK for nft_id in pis.nft_ids):
        raise ValueError("NFT ids must fit in 32 bits")

    buffer = bytearray(layout.total_len)
    _write(buffer, layout.block_number, [_element(pis.block_number)])
    _write(buffer, layout.range, [_element(pis.range)])
    _write(buffer, layout.min_block_number, [_element(pis.min_block_number)])
    _write(buffer, layout.max_block_number, [_element(pis.max_block_number)])
    _write(
        buffer,
        layout.contract_address,
        _left_padded_elements(_address_bytes(pis.contract_address)),
    )
    _write(
        buffer,
        layout.user_address,
        _left_padded_elements(_address_bytes(pis.user_address)),
    )
    _write(buffer, layout.mapping_slot, [_element(pis.mapping_slot)])
    _write(
        buffer,
        layout.mapping_slot_length,
        [_element(pis.mapping_slot_length)],
    )
    _write(buffer, layout.nft_ids, [_element(i) for i in pis.nft_ids])
    _write(
        buffer,
        layout.block_hash,
        _left_padded_elements(pis.block_hash.to_bytes(32, "big")),
    )
    _write(buffer, layout.rewards_rate, _u256_elements(pis.rewards_rate))
    _write(buffer, layout.erc20_result, _u256_elements(pis.erc20_result))
    _write(buffer, layout.identifier, [_element(pis.identifier)])
    return bytes(buffer)


def _address_bytes(address: str) -> bytes:
    return bytes.fromhex(to_checksum_address(address)[2:])


def public_inputs_to_words(data: bytes) -> List[bytes]:
    """Split public-input bytes into 32-byte words, zero-padding the last."""
    word_len = QueryConstants.WORD_LEN
    padded = data + b"\x00" * (-len(data) % word_len)
    return [padded[i : i + word_len] for i in range(0, len(padded), word_len)]
