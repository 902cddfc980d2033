"""
Network and console configuration.

Network definitions ship in networks.json. The contract address for each
network comes from an environment variable (or an explicit override) and is
validated at startup; a missing or malformed address is fatal.
"""
import importlib.resources
import json
import logging
import os
import re
from typing import Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigurationError
from .fees import DEFAULT_FEE_FLOOR_WEI

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
DEFAULT_NETWORK = "testnet"
DEFAULT_EVENT_WINDOW = 1000


def validate_contract_address(address: Optional[str], source: str) -> str:
    """
    Check that a configured contract address is 0x followed by 40 hex characters.

    Raises:
        ConfigurationError: If the address is missing or malformed
    """
    if not address:
        raise ConfigurationError(f"{source} is not set")
    address = address.strip()
    if not _ADDRESS_RE.match(address):
        raise ConfigurationError(
            f"Invalid contract address format in {source}: {address}. "
            "Must be a valid Ethereum address (0x followed by 40 hex characters)"
        )
    return address


class NetworkConfig:
    """Access to the bundled network definitions"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        if cls._networks_cache is None:
            path = importlib.resources.files("urwa_console") / "networks.json"
            with path.open("r") as f:
                cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network}'. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        if override:
            return override
        env_var = f"URWA_{network.upper().replace('-', '_')}_RPC_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            return env_url
        return cls.get_network(network)["rpc"]

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        return int(cls.get_network(network)["chainId"])

    @classmethod
    def get_contract_address(cls, network: str, override: Optional[str] = None) -> str:
        """
        Resolve and validate the contract address for a network.

        Raises:
            ConfigurationError: If no valid address is configured
        """
        if override:
            return validate_contract_address(override, "contract address override")
        env_var = cls.get_network(network)["contractAddressEnv"]
        return validate_contract_address(
            os.environ.get(env_var), f"{env_var} environment variable"
        )


class ConsoleConfig(BaseModel):
    """Configuration passed explicitly to every console component"""
    model_config = ConfigDict(frozen=True)

    network: str
    chain_id: int
    rpc_url: str
    contract_address: str
    origin_uri: Optional[str] = None
    fee_floor_wei: int = Field(DEFAULT_FEE_FLOOR_WEI, ge=0)
    event_window_blocks: int = Field(DEFAULT_EVENT_WINDOW, gt=0)
    receipt_timeout: float = Field(120.0, gt=0)
    readback_attempts: int = Field(5, ge=1)
    readback_backoff: float = Field(0.5, ge=0)

    @classmethod
    def for_network(
        cls,
        network: str = DEFAULT_NETWORK,
        rpc_url: Optional[str] = None,
        contract_address: Optional[str] = None,
        **overrides: Any,
    ) -> "ConsoleConfig":
        """
        Build a configuration from the bundled network definitions.

        Raises:
            ConfigurationError: If the network is unknown or the contract
                address is missing or malformed
        """
        try:
            chain_id = NetworkConfig.get_chain_id(network)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        config = cls(
            network=network,
            chain_id=chain_id,
            rpc_url=NetworkConfig.get_rpc_url(network, override=rpc_url),
            contract_address=NetworkConfig.get_contract_address(network, override=contract_address),
            **overrides,
        )
        logger.debug(f"Loaded configuration for {network} (chain {chain_id}) at {config.contract_address}")
        return config
