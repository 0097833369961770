"""
Web3 Service module for talking to the chains hosting the Groth16 verifier.

The toolkit only ever performs read-only ``eth_call`` requests, so the
service is a thin cached wrapper around a Web3 HTTP provider.
"""

from typing import Any, Dict, Tuple

from web3 import Web3

from lpn_query_toolkit.shared.constants import GlobalConstants
from lpn_query_toolkit.shared.services.resource_manager import (
    resource_manager,
)


class Web3Service:
    """
    A service class for managing Web3 connections and contract handles.
    """

    _instances: Dict[int, "Web3Service"] = {}

    def __init__(self, chain_id: int, rpc_url: str):
        """
        Initialize the Web3Service.

        Args:
            chain_id (int): The chain ID to use.
            rpc_url (str): The RPC URL to use.
        """
        self.chain_id = chain_id
        self.w3 = Web3(Web3.HTTPProvider(rpc_url))
        self._contract_cache: Dict[Tuple[str, str], Any] = {}

    @classmethod
    def get_instance(cls, chain_id: int) -> "Web3Service":
        """Get or create a Web3Service instance for a specific chain"""
        if chain_id not in cls._instances:
            rpc_url = GlobalConstants.get_rpc_url(chain_id)
            cls._instances[chain_id] = cls(chain_id, rpc_url)

        return cls._instances[chain_id]

    def get_contract(self, address: str, abi_name: str) -> Any:
        """Get a contract instance for a given address and ABI name"""
        key = (address.lower(), abi_name)
        if key not in self._contract_cache:
            abi = resource_manager.load_abi(abi_name)
            self._contract_cache[key] = self.w3.eth.contract(
                address=Web3.to_checksum_address(address.lower()), abi=abi
            )
        return self._contract_cache[key]
