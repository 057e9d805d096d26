"""Shared test fixtures for lotus-faucet."""

from __future__ import annotations

import json
import time
from typing import Any
from unittest.mock import MagicMock

import pytest
from nacl.signing import SigningKey

from lotus_faucet.audit.logger import AuditLogger
from lotus_faucet.config import FaucetSettings
from lotus_faucet.models import AuditEvent, AuditEventType, RiskLevel

# EIP-55 checksum test vectors
RECIPIENT = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
PAYMENT_TOKEN = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
COLLATERAL_TOKEN = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
PRIVATE_KEY = "0x" + "11" * 32
RPC_URL = "http://goerli.test:8545"
REQUESTER_ID = "80351110224678912"


class FakeChainClient:
    """Records every chain interaction; optionally fails one token's transfer."""

    def __init__(self, fail_token: str | None = None) -> None:
        self.fail_token = fail_token
        self.providers: list[str] = []
        self.signers: list[str] = []
        self.transfers: list[tuple[str, str, int]] = []

    def provider(self, rpc_url: str) -> str:
        self.providers.append(rpc_url)
        return rpc_url

    def signer(self, private_key: str, provider: Any) -> str:
        self.signers.append(private_key)
        return f"signer@{provider}"

    def contract(self, address: str, signer: Any) -> FakeTokenContract:
        return FakeTokenContract(self, address)


class FakeTokenContract:
    def __init__(self, chain: FakeChainClient, address: str) -> None:
        self._chain = chain
        self.address = address

    async def transfer(self, recipient: str, amount: int) -> str:
        if self.address == self._chain.fail_token:
            raise RuntimeError("execution reverted: insufficient balance")
        self._chain.transfers.append((self.address, recipient, amount))
        return f"0x{len(self._chain.transfers):064x}"


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
def settings(signing_key: SigningKey) -> FaucetSettings:
    return make_settings(signing_key)


@pytest.fixture
def fake_chain() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


# --- Factory functions for test data ---


def make_settings(signing_key: SigningKey | None = None, **kwargs: Any) -> FaucetSettings:
    """Factory for FaucetSettings with every secret configured."""
    defaults: dict[str, Any] = {
        "public_key": signing_key.verify_key.encode().hex() if signing_key else None,
        "private_key": PRIVATE_KEY,
        "rpc_urls": {"goerli": RPC_URL},
        "payment_token_address": PAYMENT_TOKEN,
        "collateral_token_address": COLLATERAL_TOKEN,
        "application_id": "1234567890",
    }
    defaults.update(kwargs)
    return FaucetSettings(**defaults)


def make_interaction_payload(
    address: Any = RECIPIENT,
    network: Any = "goerli",
    requester_id: str | None = REQUESTER_ID,
    command: str = "faucet",
    **kwargs: Any,
) -> dict[str, Any]:
    """Factory for a faucet slash-command payload."""
    payload: dict[str, Any] = {
        "id": "1112223334445556667",
        "application_id": "1234567890",
        "type": 2,
        "token": "interaction-token",
        "data": {
            "id": "987654321",
            "name": command,
            "options": [
                {"name": "address", "type": 3, "value": address},
                {"name": "network", "type": 3, "value": network},
            ],
        },
        "member": {"user": {"id": requester_id, "username": "seedling"}},
    }
    payload.update(kwargs)
    return payload


def sign_body(
    signing_key: SigningKey,
    body: bytes,
    timestamp: str | None = None,
) -> dict[str, str]:
    """Return the signature headers the platform would send for ``body``."""
    if timestamp is None:
        timestamp = str(int(time.time()))
    signature = signing_key.sign(timestamp.encode() + body).signature.hex()
    return {
        "x-signature-ed25519": signature,
        "x-signature-timestamp": timestamp,
    }


def encode(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload).encode()


def make_audit_event(**kwargs: Any) -> AuditEvent:
    """Factory for AuditEvent with sensible defaults."""
    defaults: dict[str, Any] = {
        "event_type": AuditEventType.AUTH_FAILURE,
        "action": "verify",
        "result": "failure",
        "risk_level": RiskLevel.HIGH,
    }
    defaults.update(kwargs)
    return AuditEvent(**defaults)
