"""Svix-style webhook signature verification for identity-provider events."""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Callable, Mapping, Optional

from pydantic import ValidationError

from app.api.schemas.webhook import ClerkWebhookEvent
from app.core.exceptions import ConfigurationError, InvalidSignature, MissingHeaders

SECRET_PREFIX = "whsec_"
SIGNATURE_VERSION = "v1"
REQUIRED_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


class SignatureVerifier:
    """Authenticate a delivery before any business logic sees it.

    The signed content is ``{svix-id}.{svix-timestamp}.{raw body}``, HMAC-SHA256
    keyed with the base64-decoded secret. The ``svix-signature`` header holds one
    or more space separated ``v1,<base64 digest>`` entries; any match verifies.

    Deliveries are not deduplicated by id. A replay window is only enforced when
    ``tolerance_seconds`` is set.
    """

    def __init__(
        self,
        secret: Optional[str],
        tolerance_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ConfigurationError("Missing CLERK_WEBHOOK_SECRET environment variable")
        self._key = _decode_secret(secret)
        self._tolerance = tolerance_seconds
        self._clock = clock

    def verify(self, raw_body: bytes, headers: Mapping[str, str]) -> ClerkWebhookEvent:
        msg_id, timestamp, signature_header = _required_headers(headers)

        self._check_timestamp(timestamp)
        expected = self.sign(msg_id, timestamp, raw_body).encode("ascii")
        candidates = _signature_candidates(signature_header)
        if not any(hmac.compare_digest(expected, candidate.encode("utf-8")) for candidate in candidates):
            raise InvalidSignature("No matching signature found")

        try:
            return ClerkWebhookEvent.model_validate(json.loads(raw_body))
        except (ValueError, ValidationError) as exc:
            raise InvalidSignature("Verified payload is not a valid event") from exc

    def sign(self, msg_id: str, timestamp: str, raw_body: bytes) -> str:
        signed_content = f"{msg_id}.{timestamp}.".encode("utf-8") + raw_body
        digest = hmac.new(self._key, signed_content, hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def _check_timestamp(self, timestamp: str) -> None:
        try:
            sent_at = int(timestamp)
        except ValueError as exc:
            raise InvalidSignature("Invalid signature headers") from exc
        if self._tolerance is None:
            return
        if abs(self._clock() - sent_at) > self._tolerance:
            raise InvalidSignature("Message timestamp outside the replay window")


def _decode_secret(secret: str) -> bytes:
    if secret.startswith(SECRET_PREFIX):
        secret = secret[len(SECRET_PREFIX):]
    try:
        return base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError("CLERK_WEBHOOK_SECRET is not valid base64") from exc


def _required_headers(headers: Mapping[str, str]) -> tuple[str, str, str]:
    values = tuple(headers.get(name) for name in REQUIRED_HEADERS)
    if not all(values):
        raise MissingHeaders("No svix headers found")
    return values  # type: ignore[return-value]


def _signature_candidates(header: str) -> list[str]:
    candidates = []
    for entry in header.split():
        version, _, value = entry.partition(",")
        if version == SIGNATURE_VERSION and value:
            candidates.append(value)
    return candidates
