"""Dispatch-target selection for authenticated interactions."""

from __future__ import annotations

from enum import Enum

from lotus_faucet.errors import UnknownCommandError, UnknownTypeError
from lotus_faucet.models import Interaction, InteractionType

FAUCET_COMMAND = "faucet"


class Route(str, Enum):
    PONG = "pong"
    FAUCET = "faucet"


class InteractionRouter:
    """Classifies an interaction as a liveness probe or a faucet command."""

    def route(self, interaction: Interaction) -> Route:
        if interaction.type == InteractionType.PING:
            return Route.PONG
        if interaction.type != InteractionType.APPLICATION_COMMAND:
            raise UnknownTypeError(interaction.type)

        # Command names are matched case-insensitively.
        if (interaction.command_name or "").lower() != FAUCET_COMMAND:
            raise UnknownCommandError(interaction.command_name)
        return Route.FAUCET
