"""
Core bridge constants and configurations.

This module contains all bridge-related constants including:
- L1StandardBridge contract ABI
- Bridge contract address on the source ledger
- Gas settings
"""

# L1StandardBridge ABI (native-coin deposit entry point only)
L1_STANDARD_BRIDGE_ABI = [
    {
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_minGasLimit", "type": "uint32"},
            {"name": "_extraData", "type": "bytes"},
        ],
        "name": "depositETHTo",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
]

DEPOSIT_FUNCTION_NAME = "depositETHTo"

# L1StandardBridge proxy for Giwa Sepolia, deployed on Sepolia
L1_STANDARD_BRIDGE_ADDRESS = "0x77b2ffc0F57598cAe1DB76cb398059cF5d10A7E7"

# Gas forwarded to the L2 side of the deposit
DEFAULT_MIN_GAS_LIMIT = 200_000
MAX_UINT32 = 2**32 - 1

# Safety buffer applied to the node's gas estimate for the L1 call
GAS_LIMIT_MULTIPLIER = 1.2

# Empty extraData for a plain self-deposit
EMPTY_EXTRA_DATA = b""
