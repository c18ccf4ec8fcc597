"""
Log masking helpers.

Addresses and transaction hashes are shortened in log lines; RPC URLs are
reduced to scheme and host because providers embed API keys in the path or
query string. Private keys are never logged at all.
"""

from urllib.parse import urlsplit

MASK = "***"


def _keep_ends(value: str | None, head: int, tail: int) -> str:
    if not value or len(value) < head + tail:
        return MASK
    return f"{value[:head]}...{value[-tail:]}"


def mask_address(address: str | None) -> str:
    """
    Shorten an account or contract address.

    Examples:
        >>> mask_address("0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266")
        '0xf39F...2266'
        >>> mask_address(None)
        '***'
    """
    return _keep_ends(address, 6, 4)


def mask_tx_hash(tx_hash: str | None) -> str:
    """
    Shorten a transaction hash; enough remains to find it on an explorer page.

    Examples:
        >>> mask_tx_hash("0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef")
        '0x12345678...abcdef'
    """
    return _keep_ends(tx_hash, 10, 6)


def mask_rpc_url(url: str | None) -> str:
    """
    Keep only scheme and host of an RPC endpoint.

    Examples:
        >>> mask_rpc_url("https://eth-sepolia.g.alchemy.com/v2/SECRET")
        'https://eth-sepolia.g.alchemy.com/***'
        >>> mask_rpc_url("https://sepolia-rpc.giwa.io")
        'https://sepolia-rpc.giwa.io'
    """
    if not url:
        return MASK
    parts = urlsplit(url)
    if not parts.scheme or not parts.hostname:
        return MASK
    base = f"{parts.scheme}://{parts.hostname}"
    if parts.port:
        base += f":{parts.port}"
    if parts.path.strip("/") or parts.query:
        base += f"/{MASK}"
    return base
