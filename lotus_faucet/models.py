"""Shared Pydantic data models for lotus-faucet."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


class TokenRole(str, Enum):
    PAYMENT = "payment"
    COLLATERAL = "collateral"


class AuditEventType(str, Enum):
    AUTH_SUCCESS = "auth_success"
    AUTH_FAILURE = "auth_failure"
    COMMAND_REJECTED = "command_rejected"
    VALIDATION_FAILED = "validation_failed"
    TOKENS_DISPENSED = "tokens_dispensed"
    DISPENSE_FAILED = "dispense_failed"
    FOLLOW_UP_FAILED = "follow_up_failed"


class RiskLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Inbound interaction payload ---


class _PlatformModel(BaseModel):
    # The platform adds fields freely; only the ones below are trusted.
    model_config = ConfigDict(frozen=True, extra="ignore")


class CommandOption(_PlatformModel):
    name: str = ""
    type: int | None = None
    value: Any = None


class CommandData(_PlatformModel):
    id: str | None = None
    name: str | None = None
    options: list[CommandOption] = Field(default_factory=list)


class User(_PlatformModel):
    id: str | None = None
    username: str | None = None


class Member(_PlatformModel):
    user: User | None = None


class Interaction(_PlatformModel):
    """Authenticated, parsed webhook payload.

    ``type`` stays a plain int so that interaction kinds this service
    does not handle still parse and are rejected by the router.
    """

    id: str | None = None
    application_id: str | None = None
    type: int
    token: str | None = None
    data: CommandData | None = None
    member: Member | None = None

    @property
    def command_name(self) -> str | None:
        return self.data.name if self.data else None

    @property
    def options(self) -> list[CommandOption]:
        return list(self.data.options) if self.data else []

    @property
    def requester_id(self) -> str | None:
        if self.member and self.member.user:
            return self.member.user.id
        return None


# --- Faucet models ---


class FaucetRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipient_address: str = Field(min_length=42, max_length=42)
    network: str
    requester_id: str = Field(min_length=1)


class TransferOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction_hash: str
    token_role: TokenRole
    token_address: str
    amount: int = Field(ge=0)


# --- Outbound payloads ---


class MessageData(BaseModel):
    content: str


class InteractionResponse(BaseModel):
    """Transport payload: Pong, ChannelMessageWithSource or DeferredAck."""

    type: InteractionResponseType
    data: MessageData | None = None


class FollowUpMessage(BaseModel):
    """Out-of-band content that replaces a deferred acknowledgement."""

    model_config = ConfigDict(frozen=True)

    token: str
    content: str


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    interaction_id: str | None = None
    user_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "rejected"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
