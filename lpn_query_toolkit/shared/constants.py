"""All constants for the project"""

import os
from typing import Optional

from dotenv import load_dotenv

from lpn_query_toolkit.shared.exceptions import ConfigurationException

load_dotenv()


class GlobalConstants:
    """Global class constants for the project"""

    CHAIN_ID_TO_RPC = {
        1: os.getenv("ETHEREUM_MAINNET_RPC_URL") or None,
        11155111: os.getenv("SEPOLIA_RPC_URL") or None,
        17000: os.getenv("HOLESKY_RPC_URL") or None,
        8453: os.getenv("BASE_MAINNET_RPC_URL") or None,
        84532: os.getenv("BASE_SEPOLIA_RPC_URL") or None,
    }

    @staticmethod
    def get_rpc_url(chain_id: int) -> str:
        """Get RPC URL for specified chain"""
        chain_id = int(chain_id)
        if chain_id not in GlobalConstants.CHAIN_ID_TO_RPC:
            raise ConfigurationException(f"Chain ID {chain_id} not supported")

        rpc_url = GlobalConstants.CHAIN_ID_TO_RPC[chain_id]
        if not rpc_url:
            raise ConfigurationException(
                f"RPC URL not set for chain {chain_id}"
            )

        return rpc_url


class QueryConstants:
    """Layout and binding constants shared with the proving circuits"""

    # Number of NFT ids revealed by an NFT query
    L = 5

    WORD_LEN = 32
    NUM_PROOF_WORDS = 8
    NUM_INPUT_WORDS = 3
    NUM_GROTH16_WORDS = NUM_PROOF_WORDS + NUM_INPUT_WORDS

    # Every recursive-proof public input is serialized as a u64 (8 bytes)
    ELEMENT_LEN = 8
    DIGIT_LEN = 4
    PI_TOTAL_LEN = (L + 41) * ELEMENT_LEN
    NUM_PI_WORDS = -(-PI_TOTAL_LEN // WORD_LEN)
    MIN_BUNDLE_WORDS = NUM_GROTH16_WORDS + NUM_PI_WORDS

    # First byte of keccak256("QueryNFT") / keccak256("QueryERC20")
    QUERY_IDENTIFIER_NFT = 67
    QUERY_IDENTIFIER_ERC20 = 88

    # Groth16 public inputs live in the BN254 scalar field; the digest is
    # truncated to 253 bits so it always fits
    BN254_SCALAR_FIELD = 21888242871839275222246405745257275088548364400416034343698204186575808495617
    DIGEST_MASK = (1 << 253) - 1

    CIRCUIT_DIGEST = os.getenv("LPN_CIRCUIT_DIGEST") or None

    @staticmethod
    def get_circuit_digest(override: Optional[str] = None) -> int:
        """Get the wrapping circuit digest the pairing proof must commit to"""
        value = override or QueryConstants.CIRCUIT_DIGEST
        if not value:
            raise ConfigurationException(
                "Circuit digest not set (LPN_CIRCUIT_DIGEST)"
            )
        try:
            return int(value, 0) if isinstance(value, str) else int(value)
        except ValueError as e:
            raise ConfigurationException(
                f"Invalid circuit digest {value!r}: {e}"
            ) from e


class VerifierConstants:
    """Deployed Groth16 verifier contracts"""

    VERIFIER_ADDRESS = {
        1: os.getenv("LPN_VERIFIER_ADDRESS_1") or None,
        11155111: os.getenv("LPN_VERIFIER_ADDRESS_11155111") or None,
        17000: os.getenv("LPN_VERIFIER_ADDRESS_17000") or None,
        8453: os.getenv("LPN_VERIFIER_ADDRESS_8453") or None,
        84532: os.getenv("LPN_VERIFIER_ADDRESS_84532") or None,
    }

    DEFAULT_VERIFIER_ADDRESS = os.getenv("LPN_VERIFIER_ADDRESS") or None

    VERIFIER_ABI_NAME = "groth16_verifier"

    @staticmethod
    def get_verifier_address(chain_id: int) -> str:
        """Get the Groth16 verifier address for a chain"""
        address = (
            VerifierConstants.VERIFIER_ADDRESS.get(int(chain_id))
            or VerifierConstants.DEFAULT_VERIFIER_ADDRESS
        )
        if not address:
            raise ConfigurationException(
                f"Verifier address not set for chain {chain_id}"
            )
        return address
