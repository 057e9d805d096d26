"""Process configuration, read once at startup and injected everywhere else."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

SUPPORTED_NETWORK = "goerli"

_DEFAULT_API_BASE = "https://discord.com/api/v10"
_DEFAULT_EXPLORER_TX_URL = "https://goerli.etherscan.io/tx/"
_DEFAULT_SYMBOL = "💰"
_TRUTHY = {"1", "true", "yes", "on"}


class FaucetSettings(BaseModel):
    """Immutable configuration value object."""

    model_config = ConfigDict(frozen=True)

    public_key: str | None = None
    private_key: str | None = None
    rpc_urls: dict[str, str] = Field(default_factory=dict)
    payment_token_address: str | None = None
    collateral_token_address: str | None = None
    payment_token_symbol: str = _DEFAULT_SYMBOL
    collateral_token_symbol: str = _DEFAULT_SYMBOL
    application_id: str | None = None
    api_base: str = _DEFAULT_API_BASE
    explorer_tx_url: str = _DEFAULT_EXPLORER_TX_URL
    supported_network: str = SUPPORTED_NETWORK
    max_timestamp_age_seconds: int = Field(default=300, ge=0)
    defer_responses: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FaucetSettings:
        """Build settings from environment variables.

        Secrets that are missing are left unset; the request that needs
        them fails instead of the process.
        """
        env = os.environ if environ is None else environ
        rpc_urls: dict[str, str] = {}
        if env.get("GOERLI_RPC_URL"):
            rpc_urls["goerli"] = env["GOERLI_RPC_URL"]
        return cls(
            public_key=env.get("PUBLIC_KEY") or None,
            private_key=env.get("FAUCET_PRIVATE_KEY") or None,
            rpc_urls=rpc_urls,
            payment_token_address=env.get("MOCK_PAYMENT_TOKEN_ADDRESS") or None,
            collateral_token_address=env.get("MOCK_BIDDING_TOKEN_ADDRESS") or None,
            payment_token_symbol=env.get("PAYMENT_TOKEN_SYMBOL") or _DEFAULT_SYMBOL,
            collateral_token_symbol=env.get("COLLATERAL_TOKEN_SYMBOL") or _DEFAULT_SYMBOL,
            application_id=env.get("APPLICATION_ID") or None,
            api_base=env.get("DISCORD_API_BASE", _DEFAULT_API_BASE),
            explorer_tx_url=env.get("EXPLORER_TX_URL", _DEFAULT_EXPLORER_TX_URL),
            max_timestamp_age_seconds=int(env.get("SIGNATURE_MAX_AGE_SECONDS", "300")),
            defer_responses=env.get("FAUCET_DEFER_RESPONSES", "").lower() in _TRUTHY,
        )
