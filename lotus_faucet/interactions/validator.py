"""Faucet command parameter extraction and checks."""

from __future__ import annotations

from web3 import Web3

from lotus_faucet.config import SUPPORTED_NETWORK
from lotus_faucet.errors import (
    InvalidAddressError,
    MissingIdentityError,
    UnsupportedNetworkError,
)
from lotus_faucet.models import FaucetRequest, Interaction

_ADDRESS_OPTION = 0
_NETWORK_OPTION = 1


def _is_valid_address(address: object) -> bool:
    """Hex address check; mixed case must carry a valid EIP-55 checksum."""
    if not isinstance(address, str) or not Web3.is_address(address):
        return False
    digits = address[2:] if address[:2].lower() == "0x" else address
    if digits.lower() != digits and digits.upper() != digits:
        return Web3.is_checksum_address("0x" + digits)
    return True


class ParameterValidator:
    """Builds a ``FaucetRequest`` or raises the first failed check.

    Options are read positionally: the command schema registers the
    recipient address first and the network second. Checks run in the
    order address, network, identity.
    """

    def __init__(self, supported_network: str = SUPPORTED_NETWORK) -> None:
        self._supported_network = supported_network

    def validate(self, interaction: Interaction) -> FaucetRequest:
        options = interaction.options
        address = options[_ADDRESS_OPTION].value if len(options) > _ADDRESS_OPTION else None
        network = options[_NETWORK_OPTION].value if len(options) > _NETWORK_OPTION else None
        return self.check(address, network, interaction.requester_id)

    def check(self, address: object, network: object, requester_id: str | None) -> FaucetRequest:
        if not _is_valid_address(address):
            raise InvalidAddressError()
        if network != self._supported_network:
            raise UnsupportedNetworkError(network)
        if not requester_id:
            raise MissingIdentityError()
        return FaucetRequest(
            recipient_address=Web3.to_checksum_address(address),
            network=network,
            requester_id=requester_id,
        )
