"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from lotus_faucet.config import FaucetSettings


def test_from_env_reads_all_fields() -> None:
    settings = FaucetSettings.from_env({
        "PUBLIC_KEY": "ab" * 32,
        "FAUCET_PRIVATE_KEY": "0x" + "11" * 32,
        "GOERLI_RPC_URL": "https://rpc.goerli.test",
        "MOCK_PAYMENT_TOKEN_ADDRESS": "0xpay",
        "MOCK_BIDDING_TOKEN_ADDRESS": "0xcol",
        "PAYMENT_TOKEN_SYMBOL": "USDC",
        "COLLATERAL_TOKEN_SYMBOL": "LOT",
        "APPLICATION_ID": "555",
        "SIGNATURE_MAX_AGE_SECONDS": "60",
        "FAUCET_DEFER_RESPONSES": "true",
    })
    assert settings.public_key == "ab" * 32
    assert settings.private_key == "0x" + "11" * 32
    assert settings.rpc_urls == {"goerli": "https://rpc.goerli.test"}
    assert settings.payment_token_address == "0xpay"
    assert settings.collateral_token_address == "0xcol"
    assert settings.payment_token_symbol == "USDC"
    assert settings.collateral_token_symbol == "LOT"
    assert settings.application_id == "555"
    assert settings.max_timestamp_age_seconds == 60
    assert settings.defer_responses is True


def test_defaults_when_env_empty() -> None:
    settings = FaucetSettings.from_env({})
    assert settings.public_key is None
    assert settings.private_key is None
    assert settings.rpc_urls == {}
    assert settings.payment_token_symbol == "💰"
    assert settings.collateral_token_symbol == "💰"
    assert settings.supported_network == "goerli"
    assert settings.explorer_tx_url == "https://goerli.etherscan.io/tx/"
    assert settings.max_timestamp_age_seconds == 300
    assert settings.defer_responses is False


def test_blank_secrets_treated_as_missing() -> None:
    settings = FaucetSettings.from_env({"PUBLIC_KEY": "", "FAUCET_PRIVATE_KEY": ""})
    assert settings.public_key is None
    assert settings.private_key is None


def test_from_env_defaults_to_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APPLICATION_ID", "777")
    assert FaucetSettings.from_env().application_id == "777"


def test_settings_are_immutable() -> None:
    settings = FaucetSettings()
    with pytest.raises(ValidationError):
        settings.private_key = "0x00"  # type: ignore[misc]


def test_negative_timestamp_window_rejected() -> None:
    with pytest.raises(ValidationError):
        FaucetSettings(max_timestamp_age_seconds=-1)
