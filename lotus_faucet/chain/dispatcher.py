"""Token dispatcher: two sequential ERC-20 transfers per faucet request.

The payment transfer always runs first. A payment failure propagates
as-is. A collateral failure is raised as ``PartialDispenseError`` carrying
the payment outcome. Nothing is retried and a payment that already went
out is not reversed.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from lotus_faucet.chain.client import ChainClient, Web3ChainClient
from lotus_faucet.config import FaucetSettings
from lotus_faucet.errors import (
    ChainConfigurationError,
    MissingSignerKeyError,
    PartialDispenseError,
)
from lotus_faucet.models import FaucetRequest, TokenRole, TransferOutcome

logger = logging.getLogger(__name__)

DRIP_AMOUNT = "1000000"
PAYMENT_DECIMALS = 6
COLLATERAL_DECIMALS = 18


def parse_units(value: str, decimals: int) -> int:
    """Scale a human-readable token amount to integer base units."""
    try:
        scaled = Decimal(value).scaleb(decimals)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid token amount: {value!r}") from exc
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value} has more than {decimals} decimal places")
    return int(scaled)


class TokenDispatcher:
    """Sends the fixed payment and collateral drips for a validated request."""

    def __init__(
        self,
        settings: FaucetSettings,
        chain_client: ChainClient | None = None,
    ) -> None:
        self._settings = settings
        self._chain = chain_client or Web3ChainClient()

    def _token_plan(self) -> list[tuple[TokenRole, str, int]]:
        payment = self._settings.payment_token_address
        collateral = self._settings.collateral_token_address
        if not payment or not collateral:
            raise ChainConfigurationError("Token contract addresses are not configured")
        return [
            (TokenRole.PAYMENT, payment, parse_units(DRIP_AMOUNT, PAYMENT_DECIMALS)),
            (TokenRole.COLLATERAL, collateral, parse_units(DRIP_AMOUNT, COLLATERAL_DECIMALS)),
        ]

    async def dispense(self, request: FaucetRequest) -> tuple[TransferOutcome, TransferOutcome]:
        if not self._settings.private_key:
            raise MissingSignerKeyError()
        rpc_url = self._settings.rpc_urls.get(request.network)
        if not rpc_url:
            raise ChainConfigurationError(f"No RPC endpoint configured for {request.network}")
        plan = self._token_plan()

        provider = self._chain.provider(rpc_url)
        signer = self._chain.signer(self._settings.private_key, provider)

        outcomes: list[TransferOutcome] = []
        for role, token_address, amount in plan:
            contract = self._chain.contract(token_address, signer)
            try:
                tx_hash = await contract.transfer(request.recipient_address, amount)
            except Exception as exc:
                if not outcomes:
                    raise
                logger.warning(
                    "%s transfer to %s failed after %s",
                    role.value, request.recipient_address,
                    ", ".join(f"{o.token_role.value}={o.transaction_hash}" for o in outcomes),
                )
                raise PartialDispenseError(outcomes, exc) from exc
            logger.info(
                "Sent %s token to %s on %s for user %s: %s",
                role.value, request.recipient_address, request.network,
                request.requester_id, tx_hash,
            )
            outcomes.append(TransferOutcome(
                transaction_hash=tx_hash,
                token_role=role,
                token_address=token_address,
                amount=amount,
            ))

        payment, collateral = outcomes
        return payment, collateral
