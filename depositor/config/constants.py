"""
Application constants.

Centralized constants for the deposit tool.
"""

# ========================================================================
# BLOCKCHAIN CONSTANTS
# ========================================================================

# RPC operation timeouts (in seconds)
BLOCKCHAIN_TIMEOUT = 30.0  # Single read call (chain id, balance, receipt lookup)
BLOCKCHAIN_RPC_TIMEOUT = 30  # RPC provider HTTP timeout

# Native coin
NATIVE_DECIMALS = 18  # ETH on both ledgers
NATIVE_SYMBOL = "ETH"

# ========================================================================
# DEPOSIT POLLING CONSTANTS
# ========================================================================

# Destination credit detection (milliseconds)
CREDIT_POLL_INTERVAL_MS = 10_000  # 10 seconds between balance polls
CREDIT_DEADLINE_MS = 600_000  # 10 minutes from the start of the wait

# Source inclusion polling (milliseconds)
RECEIPT_POLL_INTERVAL_MS = 4_000

# ========================================================================
# CONSOLE CONSTANTS
# ========================================================================

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
SPINNER_FRAME_DELAY = 0.1  # seconds
