"""Outbound payloads for every interaction lifecycle stage.

Only this module builds transport responses. Deferred interactions get
an acknowledgement first; their final content goes out-of-band by
editing the original response through the interaction webhook.
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from fastapi.responses import JSONResponse

from lotus_faucet.config import FaucetSettings
from lotus_faucet.errors import AuthError, UserFacingError
from lotus_faucet.models import (
    FaucetRequest,
    FollowUpMessage,
    InteractionResponse,
    InteractionResponseType,
    MessageData,
    TransferOutcome,
)

logger = logging.getLogger(__name__)

GENERIC_AUTH_ERROR = "Bad request signature"
GENERIC_INTERNAL_ERROR = "🍂 Something went wrong while sending your tokens."

_MAX_RETRIES = 3
_BACKOFF_CAP_SECONDS = 30


class ResponseComposer:
    """Maps pipeline outcomes to platform response payloads."""

    def __init__(self, settings: FaucetSettings) -> None:
        self._settings = settings

    @staticmethod
    def _payload(response: InteractionResponse, status_code: int = 200) -> JSONResponse:
        return JSONResponse(
            response.model_dump(mode="json", exclude_none=True), status_code=status_code,
        )

    def pong(self) -> JSONResponse:
        return self._payload(InteractionResponse(type=InteractionResponseType.PONG))

    def message(self, content: str) -> JSONResponse:
        return self._payload(InteractionResponse(
            type=InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
            data=MessageData(content=content),
        ))

    def deferred_ack(self) -> JSONResponse:
        """Acknowledge now; the final content must come via ``send_follow_up``."""
        return self._payload(InteractionResponse(
            type=InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE,
        ))

    def error(self, exc: Exception) -> JSONResponse:
        if isinstance(exc, AuthError):
            return JSONResponse({"error": GENERIC_AUTH_ERROR}, status_code=exc.status_code)
        return JSONResponse(
            {"error": self.error_text(exc)},
            status_code=exc.status_code if isinstance(exc, UserFacingError) else 500,
        )

    @staticmethod
    def error_text(exc: Exception) -> str:
        """User-visible text for a failure; internal detail is never included."""
        if isinstance(exc, UserFacingError):
            return str(exc)
        return GENERIC_INTERNAL_ERROR

    def faucet_receipt(
        self,
        request: FaucetRequest,
        payment: TransferOutcome,
        collateral: TransferOutcome,
    ) -> str:
        explorer = self._settings.explorer_tx_url
        return (
            f"🌳 GM, <@{request.requester_id}>. We've dripped some tokens into your "
            f"wallet at {request.recipient_address} on the {request.network} network. "
            "Bright growing.\n\n"
            f"Payment Token ({self._settings.payment_token_symbol}): "
            f"<{explorer}{payment.transaction_hash}>\n"
            f"Collateral Token ({self._settings.collateral_token_symbol}): "
            f"<{explorer}{collateral.transaction_hash}>"
        )

    def follow_up_url(self, token: str) -> str:
        base = self._settings.api_base.rstrip("/")
        return f"{base}/webhooks/{self._settings.application_id}/{token}/messages/@original"

    async def send_follow_up(self, message: FollowUpMessage) -> bool:
        """Replace a deferred acknowledgement with ``message.content``.

        Retries on 429/5xx with exponential backoff capped at 30s.
        Returns False when the platform never accepted the edit.
        """
        if not self._settings.application_id:
            logger.error("APPLICATION_ID is not configured; cannot deliver follow-up")
            return False

        url = self.follow_up_url(message.token)
        async with httpx.AsyncClient(verify=True) as client:
            for attempt in range(_MAX_RETRIES + 1):
                resp = await client.patch(url, json={"content": message.content}, timeout=10.0)

                if resp.status_code < 400:
                    return True
                if not self._should_retry(resp.status_code):
                    break
                if attempt < _MAX_RETRIES:
                    await asyncio.sleep(min(2 ** attempt, _BACKOFF_CAP_SECONDS))

        logger.warning("Follow-up delivery failed with status %s", resp.status_code)
        return False

    @staticmethod
    def _should_retry(status_code: int) -> bool:
        return status_code == 429 or status_code >= 500
