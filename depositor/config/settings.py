"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

import re

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from web3 import Web3

from depositor.config.chains import (
    GIWA_SEPOLIA,
    SEPOLIA,
    ChainSpec,
)
from depositor.config.constants import (
    BLOCKCHAIN_RPC_TIMEOUT,
    CREDIT_DEADLINE_MS,
    CREDIT_POLL_INTERVAL_MS,
    RECEIPT_POLL_INTERVAL_MS,
)
from depositor.services.bridge.core_constants import (
    DEFAULT_MIN_GAS_LIMIT,
    L1_STANDARD_BRIDGE_ADDRESS,
    MAX_UINT32,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Wallet
    private_key: str | None = None

    # Blockchain RPC endpoints
    rpc_l1: str = SEPOLIA.rpc_url
    rpc_l2: str = GIWA_SEPOLIA.rpc_url
    rpc_request_timeout: int = Field(
        default=BLOCKCHAIN_RPC_TIMEOUT, gt=0, description="HTTP timeout per RPC request in seconds"
    )

    # Expected network identity
    l1_chain_id: int = Field(default=SEPOLIA.chain_id, gt=0)
    l2_chain_id: int = Field(default=GIWA_SEPOLIA.chain_id, gt=0)

    # Bridge
    l1_standard_bridge_address: str = L1_STANDARD_BRIDGE_ADDRESS
    deposit_min_gas_limit: int = Field(
        default=DEFAULT_MIN_GAS_LIMIT,
        gt=0,
        le=MAX_UINT32,
        description="Gas limit forwarded to the destination-ledger credit call",
    )

    # Polling
    credit_poll_interval_ms: int = Field(
        default=CREDIT_POLL_INTERVAL_MS, ge=1, description="Destination balance poll interval"
    )
    credit_deadline_ms: int = Field(
        default=CREDIT_DEADLINE_MS, ge=1, description="Destination credit detection deadline"
    )
    receipt_poll_interval_ms: int = Field(
        default=RECEIPT_POLL_INTERVAL_MS, ge=1, description="Source receipt poll interval"
    )

    # Application
    log_level: str = "INFO"
    log_file: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v: str | None) -> str | None:
        """Accept a 32-byte hex key with or without the 0x prefix."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if not v.startswith("0x"):
            v = f"0x{v}"
        if not re.fullmatch(r"0x[0-9a-fA-F]{64}", v):
            raise ValueError("PRIVATE_KEY must be 64 hex characters (optionally 0x-prefixed)")
        return v

    @field_validator("rpc_l1", "rpc_l2")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate RPC URL scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"RPC URL must start with http:// or https://: {v}")
        return v

    @field_validator("l1_standard_bridge_address")
    @classmethod
    def validate_bridge_address(cls, v: str) -> str:
        """Validate bridge contract address and normalise to checksum form."""
        if not v.startswith("0x") or len(v) != 42:
            raise ValueError(
                f"Invalid bridge address: {v}. "
                "Must start with 0x and be 42 characters long."
            )
        try:
            int(v[2:], 16)
        except ValueError as exc:
            raise ValueError(f"Invalid bridge address format: {v}") from exc
        return Web3.to_checksum_address(v)

    @model_validator(mode="after")
    def warn_on_short_deadline(self) -> "Settings":
        """Warn when the credit deadline cannot fit a single poll."""
        if self.credit_deadline_ms < self.credit_poll_interval_ms:
            logger.warning(
                f"CREDIT_DEADLINE_MS ({self.credit_deadline_ms}) is shorter than "
                f"CREDIT_POLL_INTERVAL_MS ({self.credit_poll_interval_ms}); "
                "only one poll will be made"
            )
        return self

    @property
    def source_chain(self) -> ChainSpec:
        """Expected source ledger identity."""
        return ChainSpec(chain_id=self.l1_chain_id, name=SEPOLIA.name, rpc_url=self.rpc_l1)

    @property
    def destination_chain(self) -> ChainSpec:
        """Expected destination ledger identity."""
        return ChainSpec(
            chain_id=self.l2_chain_id, name=GIWA_SEPOLIA.name, rpc_url=self.rpc_l2
        )


# Global settings instance
settings = Settings()
