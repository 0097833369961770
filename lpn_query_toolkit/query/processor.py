"""
Query proof processing.

``process_query`` is the single entry point that turns an untrusted proof
bundle plus the query the caller claims it answers into a released result.
Gates run in a fixed order and the first failure raises:

1. Groth16 pairing check (injected primitive)
2. Circuit binding: inputs[0] is the expected wrapping-circuit digest
3. Digest binding: inputs[2] commits to the public-input bytes
4. Field-by-field comparison with the query
5. Result extraction by operation tag
"""

from typing import List, Optional, Sequence, Union

from lpn_query_toolkit.query.binding import BindingHasher
from lpn_query_toolkit.query.bundle import ProofBundle, WordLike
from lpn_query_toolkit.query.codec import decode_public_inputs
from lpn_query_toolkit.query.extractor import ResultExtractor
from lpn_query_toolkit.query.layout import LAYOUT, PublicInputsLayout
from lpn_query_toolkit.query.primitive import ProofPrimitiveVerifier
from lpn_query_toolkit.query.types import Query
from lpn_query_toolkit.query.validator import QueryValidator
from lpn_query_toolkit.shared.constants import QueryConstants
from lpn_query_toolkit.shared.exceptions import QueryVerificationException
from lpn_query_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)

BundleLike = Union[ProofBundle, Sequence[WordLike]]


class QueryProcessor:
    """
    Stateless verifier for LPN query proofs.

    Holds only immutable configuration, so one instance can be shared.
    """

    def __init__(
        self,
        primitive: ProofPrimitiveVerifier,
        circuit_digest: Optional[int] = None,
        layout: PublicInputsLayout = LAYOUT,
    ):
        """
        Args:
            primitive: Groth16 pairing check
            circuit_digest: Expected wrapping-circuit digest; read from
                LPN_CIRCUIT_DIGEST when omitted
            layout: Public-input offset table
        """
        if circuit_digest is None:
            circuit_digest = QueryConstants.get_circuit_digest()
        self.primitive = primitive
        self.circuit_digest = circuit_digest
        self.layout = layout
        self.hasher = BindingHasher(circuit_digest)
        self.validator = QueryValidator()
        self.extractor = ResultExtractor(layout)

    def process_query(self, bundle: BundleLike, query: Query) -> List[int]:
        """
        Verify a proof bundle against a query and release its result.

        Args:
            bundle: A ProofBundle or its 32-byte words
            query: The query the caller asserts the proof answers

        Returns:
            List[int]: NFT ids (NFT query) or the aggregate (ERC20 query)

        Raises:
            QueryVerificationException: On the first failing gate
        """
        try:
            return self._process(bundle, query)
        except QueryVerificationException as e:
            _logger.warning(
                f"Rejected query proof ({type(e).__name__}): {e.message}"
            )
            raise

    def _process(self, bundle: BundleLike, query: Query) -> List[int]:
        if not isinstance(bundle, ProofBundle):
            bundle = ProofBundle.from_words(bundle)

        proof = bundle.groth16_proof
        inputs = bundle.groth16_inputs

        self.primitive.verify(proof, inputs)
        _logger.debug("Groth16 proof verified")

        self.hasher.verify_circuit_binding(inputs)
        _logger.debug("Circuit digest matches")

        public_inputs = bundle.public_input_bytes()
        digest = self.hasher.verify_digest_binding(inputs, public_inputs)
        _logger.debug(f"Public inputs digest matches: {hex(digest)}")

        pis = decode_public_inputs(public_inputs, self.layout)
        self.validator.validate(pis, query)
        _logger.debug(
            f"Query matches public inputs (identifier {pis.identifier}, "
            f"blocks {pis.min_block_number}-{pis.max_block_number})"
        )

        result = self.extractor.extract(public_inputs, pis.identifier)
        _logger.debug(f"Released {len(result)} result value(s)")
        return result


def process_query(
    bundle: BundleLike,
    query: Query,
    primitive: ProofPrimitiveVerifier,
    circuit_digest: Optional[int] = None,
) -> List[int]:
    """Shorthand for ``QueryProcessor(...).process_query(bundle, query)``."""
    return QueryProcessor(primitive, circuit_digest).process_query(
        bundle, query
    )
