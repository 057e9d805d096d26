"""JSON-RPC wallet client used by the token dispatcher.

The dispatcher only depends on the ``ChainClient`` protocol; tests swap
in fakes and production uses ``Web3ChainClient``.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from lotus_faucet.chain.abi import ERC20_ABI

logger = logging.getLogger(__name__)


class TokenContract(Protocol):
    async def transfer(self, recipient: str, amount: int) -> str:
        """Submit ``transfer(recipient, amount)`` and return the transaction hash."""
        ...


class ChainClient(Protocol):
    def provider(self, rpc_url: str) -> Any: ...

    def signer(self, private_key: str, provider: Any) -> Any: ...

    def contract(self, address: str, signer: Any) -> TokenContract: ...


class Web3Signer:
    """A local account bound to one provider.

    Nonces are handed out locally after the first lookup so two
    back-to-back transfers never reuse a still-pending nonce.
    """

    def __init__(self, account: LocalAccount, web3: AsyncWeb3) -> None:
        self.account = account
        self.web3 = web3
        self._next_nonce: int | None = None

    @property
    def address(self) -> str:
        return self.account.address

    async def next_nonce(self) -> int:
        if self._next_nonce is None:
            self._next_nonce = await self.web3.eth.get_transaction_count(
                self.account.address, "pending",
            )
        nonce = self._next_nonce
        self._next_nonce += 1
        return nonce

    async def send(self, call: Any) -> str:
        """Build, sign and broadcast a contract function call."""
        tx = await call.build_transaction({
            "from": self.account.address,
            "nonce": await self.next_nonce(),
        })
        signed = self.account.sign_transaction(tx)
        tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        logger.debug("Broadcast transaction nonce=%s from %s", tx["nonce"], self.account.address)
        return Web3.to_hex(tx_hash)


class Erc20Contract:
    def __init__(self, address: str, signer: Web3Signer) -> None:
        self.address = Web3.to_checksum_address(address)
        self._signer = signer
        self._contract = signer.web3.eth.contract(address=self.address, abi=ERC20_ABI)

    async def transfer(self, recipient: str, amount: int) -> str:
        return await self._signer.send(self._contract.functions.transfer(recipient, amount))


class Web3ChainClient:
    """web3.py implementation of ``ChainClient``."""

    def provider(self, rpc_url: str) -> AsyncWeb3:
        return AsyncWeb3(AsyncHTTPProvider(rpc_url))

    def signer(self, private_key: str, provider: AsyncWeb3) -> Web3Signer:
        account: LocalAccount = Account.from_key(private_key)
        return Web3Signer(account, provider)

    def contract(self, address: str, signer: Web3Signer) -> Erc20Contract:
        return Erc20Contract(address, signer)
