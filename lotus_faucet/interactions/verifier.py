"""Ed25519 request authentication for inbound interaction webhooks.

The platform signs ``timestamp || raw body`` with the application's key
and sends the hex signature and the timestamp as headers. Nothing in the
body, including the command name, is trusted before this check passes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import pydantic
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from lotus_faucet.errors import AuthError
from lotus_faucet.models import Interaction

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-signature-ed25519"
TIMESTAMP_HEADER = "x-signature-timestamp"


class SignatureVerifier:
    """Verifies signed interaction requests and parses the payload."""

    def __init__(
        self,
        public_key: str | None,
        max_timestamp_age_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._verify_key = self._load_key(public_key) if public_key else None
        self._max_age = max_timestamp_age_seconds
        self._clock = clock

    @staticmethod
    def _load_key(public_key: str) -> VerifyKey | None:
        try:
            return VerifyKey(bytes.fromhex(public_key))
        except ValueError:
            logger.error("PUBLIC_KEY is not a valid hex-encoded ed25519 key")
            return None

    def verify(
        self,
        body: bytes,
        signature: str | None,
        timestamp: str | None,
    ) -> Interaction:
        """Return the parsed interaction, or raise ``AuthError``."""
        if self._verify_key is None:
            raise AuthError("Public key is not configured")
        if not signature or not timestamp:
            raise AuthError("Missing signature headers")

        try:
            self._verify_key.verify(timestamp.encode() + body, bytes.fromhex(signature))
        except (BadSignatureError, ValueError) as exc:
            raise AuthError("Bad request signature") from exc

        self._check_freshness(timestamp)

        try:
            return Interaction.model_validate_json(body)
        except pydantic.ValidationError as exc:
            raise AuthError("Malformed interaction payload") from exc

    def _check_freshness(self, timestamp: str) -> None:
        """Reject signed requests captured and replayed outside the window."""
        if self._max_age <= 0:
            return
        try:
            sent_at = int(timestamp)
        except ValueError as exc:
            raise AuthError("Invalid request timestamp") from exc
        if abs(self._clock() - sent_at) > self._max_age:
            raise AuthError("Stale request timestamp")
