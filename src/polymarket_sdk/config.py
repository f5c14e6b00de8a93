"""Per-chain contract configuration.

The table is built once at import time and exposed read-only. Components
receive a ``ContractConfig`` by injection instead of reaching for globals.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .errors import ConfigurationError


# Chains
POLYGON = 137
AMOY = 80002

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT256 = 2**256 - 1

# Collateral token decimals (USDC)
USDC_DECIMALS = 6

EXCHANGE_DOMAIN_NAME = "Polymarket CTF Exchange"
SAFE_FACTORY_NAME = "Polymarket Contract Proxy Factory"
SAFE_DOMAIN_NAME = "Gnosis Safe"
SAFE_INIT_CODE_HASH = (
    "0x2bce2127ff07fb632d16c8347c4ebf501f4841168bed00d9e6ef715ddb6fcecf"
)

NEG_RISK_ADAPTER = "0xd91E80cF2E7be2e162c6513ceD06f1dD0dA35296"


@dataclass(frozen=True)
class ContractConfig:
    """Contract addresses for a single chain."""

    chain_id: int
    exchange: str
    neg_risk_exchange: str
    collateral: str
    neg_risk_collateral: str
    conditional_tokens: str
    neg_risk_conditional_tokens: str
    safe_factory: str
    safe_multisend: str
    neg_risk_adapter: str = NEG_RISK_ADAPTER

    def exchange_for(self, neg_risk: bool) -> str:
        """Return the exchange that verifies orders for the given market kind."""
        return self.neg_risk_exchange if neg_risk else self.exchange


CONTRACT_CONFIGS: Mapping[int, ContractConfig] = MappingProxyType(
    {
        POLYGON: ContractConfig(
            chain_id=POLYGON,
            exchange="0x4bFb41d5B3570DeFd03C39a9A4D8dE6Bd8B8982E",
            neg_risk_exchange="0xC5d563A36AE78145C45a50134d48A1215220f80a",
            collateral="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
            neg_risk_collateral="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
            conditional_tokens="0x4D97DCd97eC945f40cF65F87097ACe5EA0476045",
            neg_risk_conditional_tokens="0x4D97DCd97eC945f40cF65F87097ACe5EA0476045",
            safe_factory="0xaacFeEa03eb1561C4e67d661e40682Bd20E3541b",
            safe_multisend="0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761",
        ),
        AMOY: ContractConfig(
            chain_id=AMOY,
            exchange="0xdFE02Eb6733538f8Ea35D585af8DE5958AD99E40",
            neg_risk_exchange="0xd91E80cF2E7be2e162c6513ceD06f1dD0dA35296",
            collateral="0x9c4e1703476e875070ee25b56a58b008cfb8fa78",
            neg_risk_collateral="0x9c4e1703476e875070ee25b56a58b008cfb8fa78",
            conditional_tokens="0x69308FB512518e39F9b16112fA8d994F4e2Bf8bB",
            neg_risk_conditional_tokens="0x69308FB512518e39F9b16112fA8d994F4e2Bf8bB",
            safe_factory="0xaacFeEa03eb1561C4e67d661e40682Bd20E3541b",
            safe_multisend="0xA238CBeb142c10Ef7Ad8442C6D1f9E89e07e7761",
        ),
    }
)


def get_contract_config(chain_id: int) -> ContractConfig:
    """Look up the contract table entry for a chain.

    Args:
        chain_id: Numeric chain ID (137 for Polygon, 80002 for Amoy)

    Returns:
        ContractConfig for that chain

    Raises:
        ConfigurationError: If the chain is not supported
    """
    try:
        return CONTRACT_CONFIGS[chain_id]
    except KeyError:
        raise ConfigurationError(f"Invalid chainID: {chain_id}") from None


__all__ = [
    "POLYGON",
    "AMOY",
    "ZERO_ADDRESS",
    "MAX_UINT256",
    "USDC_DECIMALS",
    "EXCHANGE_DOMAIN_NAME",
    "SAFE_FACTORY_NAME",
    "SAFE_DOMAIN_NAME",
    "SAFE_INIT_CODE_HASH",
    "NEG_RISK_ADAPTER",
    "ContractConfig",
    "CONTRACT_CONFIGS",
    "get_contract_config",
]
