"""Interaction pipeline.

Stages run in a fixed order and each either hands its output to the next
stage or raises a typed failure:

1. Authenticate (signature over timestamp + raw body)
2. Route (ping or faucet command)
3. Validate (address, network, requester)
4. Dispatch (payment transfer, then collateral transfer)
5. Compose (the only stage that produces a transport response)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

import httpx
from fastapi.responses import JSONResponse

from lotus_faucet.audit.logger import AuditLogger
from lotus_faucet.chain.dispatcher import TokenDispatcher
from lotus_faucet.config import FaucetSettings
from lotus_faucet.errors import (
    AuthError,
    PartialDispenseError,
    UserFacingError,
    ValidationError,
)
from lotus_faucet.interactions.responses import ResponseComposer
from lotus_faucet.interactions.router import InteractionRouter, Route
from lotus_faucet.interactions.validator import ParameterValidator
from lotus_faucet.interactions.verifier import SignatureVerifier
from lotus_faucet.models import (
    AuditEvent,
    AuditEventType,
    FaucetRequest,
    FollowUpMessage,
    Interaction,
    RiskLevel,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Transport response plus optional work to run after it is sent."""

    response: JSONResponse
    background: Callable[[], Awaitable[None]] | None = None


class InteractionPipeline:
    """Runs one inbound interaction from raw bytes to a response."""

    def __init__(
        self,
        settings: FaucetSettings,
        verifier: SignatureVerifier | None = None,
        dispatcher: TokenDispatcher | None = None,
        composer: ResponseComposer | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._settings = settings
        self._verifier = verifier or SignatureVerifier(
            settings.public_key, settings.max_timestamp_age_seconds,
        )
        self._router = InteractionRouter()
        self._validator = ParameterValidator(settings.supported_network)
        self._dispatcher = dispatcher or TokenDispatcher(settings)
        self._composer = composer or ResponseComposer(settings)
        self._audit = audit_logger

    async def handle(
        self,
        body: bytes,
        signature: str | None,
        timestamp: str | None,
    ) -> PipelineResult:
        try:
            interaction = self._verifier.verify(body, signature, timestamp)
        except AuthError as exc:
            logger.warning("Rejected interaction: %s", exc.reason)
            self._log(
                AuditEventType.AUTH_FAILURE, "verify", "failure", RiskLevel.HIGH,
                details={"reason": exc.reason},
            )
            return PipelineResult(self._composer.error(exc))
        self._log(AuditEventType.AUTH_SUCCESS, "verify", "success", RiskLevel.INFO, interaction)

        try:
            if self._router.route(interaction) is Route.PONG:
                return PipelineResult(self._composer.pong())
            request = self._validator.validate(interaction)
        except UserFacingError as exc:
            logger.info("Interaction %s rejected: %s", interaction.id, exc)
            event_type = (
                AuditEventType.VALIDATION_FAILED
                if isinstance(exc, ValidationError)
                else AuditEventType.COMMAND_REJECTED
            )
            self._log(
                event_type, "route", "rejected", RiskLevel.LOW, interaction,
                details={"error": type(exc).__name__, "command": interaction.command_name},
            )
            return PipelineResult(self._composer.error(exc))

        if self._settings.defer_responses and interaction.token:
            return PipelineResult(
                self._composer.deferred_ack(),
                background=partial(
                    self._dispense_and_follow_up, interaction, request, interaction.token,
                ),
            )

        try:
            content = await self._dispense(interaction, request)
        except Exception as exc:
            return PipelineResult(self._composer.error(exc))
        return PipelineResult(self._composer.message(content))

    async def _dispense(self, interaction: Interaction, request: FaucetRequest) -> str:
        """Send both drips and return the receipt text; failures are re-raised."""
        try:
            payment, collateral = await self._dispatcher.dispense(request)
        except Exception as exc:
            logger.exception("Faucet dispatch failed for %s", request.recipient_address)
            details: dict[str, object] = {
                "recipient": request.recipient_address,
                "network": request.network,
                "error": type(exc).__name__,
            }
            if isinstance(exc, PartialDispenseError):
                details["error"] = type(exc.cause).__name__
                details.update(
                    {f"{o.token_role.value}_tx": o.transaction_hash for o in exc.outcomes},
                )
            self._log(
                AuditEventType.DISPENSE_FAILED, "dispense", "failure", RiskLevel.MEDIUM,
                interaction, details=details,
            )
            raise

        self._log(
            AuditEventType.TOKENS_DISPENSED, "dispense", "success", RiskLevel.INFO,
            interaction,
            details={
                "recipient": request.recipient_address,
                "network": request.network,
                "payment_tx": payment.transaction_hash,
                "collateral_tx": collateral.transaction_hash,
            },
        )
        return self._composer.faucet_receipt(request, payment, collateral)

    async def _dispense_and_follow_up(
        self, interaction: Interaction, request: FaucetRequest, token: str,
    ) -> None:
        """Deferred mode: dispense after the ack and edit it with the outcome."""
        try:
            content = await self._dispense(interaction, request)
        except Exception as exc:
            content = self._composer.error_text(exc)

        message = FollowUpMessage(token=token, content=content)
        try:
            delivered = await self._composer.send_follow_up(message)
        except httpx.HTTPError:
            logger.exception("Follow-up request for interaction %s errored", interaction.id)
            delivered = False

        if not delivered:
            self._log(
                AuditEventType.FOLLOW_UP_FAILED, "follow_up", "failure", RiskLevel.MEDIUM,
                interaction,
            )

    def _log(
        self,
        event_type: AuditEventType,
        action: str,
        result: str,
        risk_level: RiskLevel,
        interaction: Interaction | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        if not self._audit:
            return
        self._audit.log(AuditEvent(
            event_type=event_type,
            interaction_id=interaction.id if interaction else None,
            user_id=interaction.requester_id if interaction else None,
            action=action,
            result=result,
            risk_level=risk_level,
            details=details,
        ))
