"""
ABI helpers for the on-chain ``processQuery`` entry point.

The verifier contract takes the bundle as ``bytes32[] data`` and the query
as a tuple, and returns the released result as ``uint256[]``. These helpers
let captured calldata be replayed through the local processor and let a
bundle be submitted with exactly the bytes the processor accepted.
"""

from typing import List, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes

from lpn_query_toolkit.query.bundle import ProofBundle
from lpn_query_toolkit.query.types import Query
from lpn_query_toolkit.shared.exceptions import MalformedBundle

QUERY_TUPLE_TYPE = (
    "(address,address,address,uint32,uint32,bytes32,uint256,uint8)"
)
PROCESS_QUERY_ARG_TYPES = ["bytes32[]", QUERY_TUPLE_TYPE]
PROCESS_QUERY_SIGNATURE = f"processQuery(bytes32[],{QUERY_TUPLE_TYPE})"
PROCESS_QUERY_SELECTOR = function_signature_to_4byte_selector(
    PROCESS_QUERY_SIGNATURE
)
RESULT_TYPES = ["uint256[]"]


def _query_tuple(query: Query) -> tuple:
    return (
        query.contract_address,
        query.user_address,
        query.client_address,
        query.min_block_number,
        query.max_block_number,
        query.block_hash.to_bytes(32, "big"),
        query.rewards_rate,
        int(query.identifier),
    )


def encode_process_query_calldata(bundle: ProofBundle, query: Query) -> str:
    """Build ``processQuery(data, query)`` calldata as a 0x-prefixed hex."""
    args = encode(
        PROCESS_QUERY_ARG_TYPES, [list(bundle.words), _query_tuple(query)]
    )
    return "0x" + (PROCESS_QUERY_SELECTOR + args).hex()


def decode_process_query_calldata(
    calldata: str,
) -> Tuple[ProofBundle, Query]:
    """
    Split ``processQuery`` calldata back into a bundle and a query.

    Args:
        calldata: Hex-encoded calldata including the 4-byte selector

    Returns:
        Tuple[ProofBundle, Query]: The decoded arguments
    """
    raw = bytes(HexBytes(calldata))
    if raw[:4] != PROCESS_QUERY_SELECTOR:
        raise MalformedBundle(
            f"Calldata selector 0x{raw[:4].hex()} is not processQuery"
        )
    try:
        words, fields = decode(PROCESS_QUERY_ARG_TYPES, raw[4:])
    except DecodingError as e:
        raise MalformedBundle(
            f"Undecodable processQuery calldata: {e}"
        ) from e
    query = Query(
        contract_address=fields[0],
        user_address=fields[1],
        client_address=fields[2],
        min_block_number=fields[3],
        max_block_number=fields[4],
        block_hash=int.from_bytes(fields[5], "big"),
        rewards_rate=fields[6],
        identifier=fields[7],
    )
    return ProofBundle.from_words(list(words)), query


def encode_query_result(values: List[int]) -> str:
    """Encode released values as the ``uint256[]`` ``processQuery`` returns."""
    return "0x" + encode(RESULT_TYPES, [list(values)]).hex()


def decode_query_result(output: str) -> List[int]:
    """Decode the ``uint256[]`` returned by ``processQuery``."""
    (values,) = decode(RESULT_TYPES, bytes(HexBytes(output)))
    return list(values)
