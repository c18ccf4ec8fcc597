"""
Ledger definitions.

Static identity of the source (L1) and destination (L2) networks.
"""

from dataclasses import dataclass

from depositor.config.constants import NATIVE_DECIMALS, NATIVE_SYMBOL


@dataclass(frozen=True)
class ChainSpec:
    """Expected identity of one ledger."""

    chain_id: int
    name: str
    rpc_url: str
    currency_symbol: str = NATIVE_SYMBOL
    decimals: int = NATIVE_DECIMALS


SEPOLIA_CHAIN_ID = 11155111
GIWA_SEPOLIA_CHAIN_ID = 91342

SEPOLIA_RPC_URL = "https://ethereum-sepolia-rpc.publicnode.com"
GIWA_SEPOLIA_RPC_URL = "https://sepolia-rpc.giwa.io"

SEPOLIA = ChainSpec(
    chain_id=SEPOLIA_CHAIN_ID,
    name="Sepolia",
    rpc_url=SEPOLIA_RPC_URL,
)

GIWA_SEPOLIA = ChainSpec(
    chain_id=GIWA_SEPOLIA_CHAIN_ID,
    name="Giwa Sepolia",
    rpc_url=GIWA_SEPOLIA_RPC_URL,
)
