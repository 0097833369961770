from lpn_query_toolkit.query.bundle import ProofBundle
from lpn_query_toolkit.query.codec import (
    decode_public_inputs,
    encode_public_inputs,
)
from lpn_query_toolkit.query.primitive import (
    ContractPairingVerifier,
    ProofPrimitiveVerifier,
    is_in_scalar_field,
)
from lpn_query_toolkit.query.processor import QueryProcessor, process_query
from lpn_query_toolkit.query.service import QueryVerificationService
from lpn_query_toolkit.query.types import PublicInputs, Query, QueryIdentifier

__all__ = [
    "ProofBundle",
    "decode_public_inputs",
    "encode_public_inputs",
    "ContractPairingVerifier",
    "ProofPrimitiveVerifier",
    "is_in_scalar_field",
    "QueryProcessor",
    "process_query",
    "QueryVerificationService",
    "PublicInputs",
    "Query",
    "QueryIdentifier",
]
