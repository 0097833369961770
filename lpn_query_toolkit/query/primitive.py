"""
Groth16 pairing primitive.

The query processor never does pairing arithmetic itself; it delegates to
a ``ProofPrimitiveVerifier``. The production implementation calls the
deployed Groth16 verifier contract with a read-only ``eth_call`` and maps
its custom-error reverts back to ``ProofInvalid`` and
``PublicInputNotInField``.
"""

from typing import Optional, Protocol, Sequence

from eth_utils import function_signature_to_4byte_selector
from hexbytes import HexBytes
from web3.exceptions import ContractCustomError, ContractLogicError

from lpn_query_toolkit.shared.constants import (
    QueryConstants,
    VerifierConstants,
)
from lpn_query_toolkit.shared.exceptions import (
    ProofInvalid,
    PublicInputNotInField,
    VerifierRpcException,
)
from lpn_query_toolkit.shared.logging import get_logger
from lpn_query_toolkit.shared.retry import RPC_RETRY_CONFIG, RetryConfig
from lpn_query_toolkit.shared.services.web3_service import Web3Service

_logger = get_logger(__name__)

PROOF_INVALID_SELECTOR = function_signature_to_4byte_selector(
    "ProofInvalid()"
)
NOT_IN_FIELD_SELECTOR = function_signature_to_4byte_selector(
    "PublicInputNotInField()"
)


def is_in_scalar_field(value: int) -> bool:
    """True if ``value`` is a canonical BN254 scalar field element."""
    return 0 <= value < QueryConstants.BN254_SCALAR_FIELD


class ProofPrimitiveVerifier(Protocol):
    """Anything that can check a Groth16 proof against its 3 inputs."""

    def verify(self, proof: Sequence[int], inputs: Sequence[int]) -> None:
        """Return normally on success, raise a ProofPrimitiveException."""
        ...


def _revert_selector(error: ContractCustomError) -> bytes:
    data = getattr(error, "data", None)
    if not data:
        return b""
    try:
        return bytes(HexBytes(data))[:4]
    except (TypeError, ValueError):
        return b""


class ContractPairingVerifier:
    """
    ProofPrimitiveVerifier backed by an on-chain Groth16 verifier.

    Attributes:
        chain_id: Chain hosting the verifier
        verifier_address: Address of the verifier contract
    """

    def __init__(
        self,
        chain_id: int,
        verifier_address: Optional[str] = None,
        web3_service: Optional[Web3Service] = None,
        retry_config: RetryConfig = RPC_RETRY_CONFIG,
    ):
        self.chain_id = chain_id
        self.verifier_address = (
            verifier_address
            or VerifierConstants.get_verifier_address(chain_id)
        )
        self.web3_service = web3_service or Web3Service.get_instance(
            chain_id
        )
        self.retry_config = retry_config

    def verify(self, proof: Sequence[int], inputs: Sequence[int]) -> None:
        # Same check the contract performs before the pairing
        for i, value in enumerate(inputs):
            if not is_in_scalar_field(value):
                raise PublicInputNotInField(
                    f"Groth16 input {i} is not in the scalar field"
                )

        self.retry_config.run(
            self._call_verifier,
            list(proof),
            list(inputs),
            operation_name="verifyProof",
        )

    def _call_verifier(self, proof: list, inputs: list) -> None:
        contract = self.web3_service.get_contract(
            self.verifier_address, VerifierConstants.VERIFIER_ABI_NAME
        )
        try:
            contract.functions.verifyProof(proof, inputs).call()
        except ContractCustomError as e:
            selector = _revert_selector(e)
            if selector == NOT_IN_FIELD_SELECTOR:
                raise PublicInputNotInField(
                    "Verifier rejected a public input as out of field"
                ) from e
            if selector != PROOF_INVALID_SELECTOR:
                _logger.debug(f"Unknown verifier revert selector: {e}")
            raise ProofInvalid("Verifier rejected the proof") from e
        except ContractLogicError as e:
            raise ProofInvalid(f"Verifier reverted: {e}") from e
        except (ConnectionError, TimeoutError, OSError) as e:
            raise VerifierRpcException(
                f"Verifier call failed on chain {self.chain_id}: {e}"
            ) from e
