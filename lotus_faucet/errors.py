"""Failure taxonomy for the interaction pipeline.

``UserFacingError`` messages are shown to the requester verbatim.
``InternalError`` messages stay in the server logs; callers only see a
generic string.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lotus_faucet.models import TransferOutcome


class FaucetError(Exception):
    """Base class for every typed pipeline failure."""

    status_code = 500


class AuthError(FaucetError):
    """Raised when an inbound request cannot be authenticated."""

    status_code = 401

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class UserFacingError(FaucetError):
    """A failure whose message is safe to show to the requester."""

    status_code = 400


class UnknownCommandError(UserFacingError):
    def __init__(self, command_name: str | None) -> None:
        self.command_name = command_name
        super().__init__(f"Unknown command: {command_name}")


class UnknownTypeError(UserFacingError):
    def __init__(self, interaction_type: int) -> None:
        self.interaction_type = interaction_type
        super().__init__("Unknown Type")


class ValidationError(UserFacingError):
    """Base class for faucet parameter checks."""


class InvalidAddressError(ValidationError):
    def __init__(self) -> None:
        super().__init__("🍂 I couldn't verify that address.")


class UnsupportedNetworkError(ValidationError):
    def __init__(self, network: object) -> None:
        self.network = network
        super().__init__("🍂 Only the Görli testnet is supported.")


class MissingIdentityError(ValidationError):
    def __init__(self) -> None:
        super().__init__("🍂 I couldn't tell who asked for tokens.")


class InternalError(FaucetError):
    """A failure whose detail must not reach the requester."""

    status_code = 500


class MissingSignerKeyError(InternalError):
    def __init__(self) -> None:
        super().__init__("FAUCET_PRIVATE_KEY is not configured")


class ChainConfigurationError(InternalError):
    """Raised when a network has no RPC endpoint or token address."""


class PartialDispenseError(InternalError):
    """A later transfer failed after earlier ones were already sent.

    ``outcomes`` holds the transfers that went through; ``cause`` is the
    failure of the next one.
    """

    def __init__(self, outcomes: list[TransferOutcome], cause: Exception) -> None:
        self.outcomes = list(outcomes)
        self.cause = cause
        sent = ", ".join(f"{o.token_role.value}={o.transaction_hash}" for o in self.outcomes)
        super().__init__(f"Transfer failed after {sent}: {type(cause).__name__}")
