from __future__ import annotations

import base64
import hashlib
import hmac
import json

import pytest

from app.core.exceptions import ConfigurationError, InvalidSignature, MissingHeaders
from app.services.signature_verifier import SignatureVerifier

KEY = b"fitplan-webhook-test-key"
SECRET = "whsec_" + base64.b64encode(KEY).decode()
BODY = json.dumps({"type": "user.created", "data": {"id": "user_1"}}).encode()


def _sign(msg_id: str, timestamp: str, body: bytes, key: bytes = KEY) -> str:
    digest = hmac.new(key, f"{msg_id}.{timestamp}.".encode() + body, hashlib.sha256).digest()
    return "v1," + base64.b64encode(digest).decode()


def _headers(msg_id="msg_1", timestamp="1700000000", body=BODY, signature=None):
    return {
        "svix-id": msg_id,
        "svix-timestamp": timestamp,
        "svix-signature": signature if signature is not None else _sign(msg_id, timestamp, body),
    }


def test_missing_secret_is_configuration_error():
    with pytest.raises(ConfigurationError):
        SignatureVerifier(None)
    with pytest.raises(ConfigurationError):
        SignatureVerifier("")


def test_non_base64_secret_is_configuration_error():
    with pytest.raises(ConfigurationError):
        SignatureVerifier("whsec_not base64!")


def test_valid_delivery_returns_typed_event():
    event = SignatureVerifier(SECRET).verify(BODY, _headers())
    assert event.type == "user.created"
    assert event.data == {"id": "user_1"}


def test_secret_without_prefix_is_accepted():
    verifier = SignatureVerifier(base64.b64encode(KEY).decode())
    assert verifier.verify(BODY, _headers()).type == "user.created"


@pytest.mark.parametrize("missing", ["svix-id", "svix-timestamp", "svix-signature"])
def test_each_header_is_required(missing):
    headers = _headers()
    headers.pop(missing)
    with pytest.raises(MissingHeaders):
        SignatureVerifier(SECRET).verify(BODY, headers)


def test_empty_header_counts_as_missing():
    with pytest.raises(MissingHeaders):
        SignatureVerifier(SECRET).verify(BODY, _headers(signature=""))


def test_single_byte_body_mutation_is_rejected():
    headers = _headers()
    tampered = bytearray(BODY)
    tampered[-2] ^= 0x01
    with pytest.raises(InvalidSignature):
        SignatureVerifier(SECRET).verify(bytes(tampered), headers)


def test_changed_timestamp_is_rejected():
    headers = _headers()
    headers["svix-timestamp"] = "1700000001"
    with pytest.raises(InvalidSignature):
        SignatureVerifier(SECRET).verify(BODY, headers)


def test_changed_id_is_rejected():
    headers = _headers()
    headers["svix-id"] = "msg_2"
    with pytest.raises(InvalidSignature):
        SignatureVerifier(SECRET).verify(BODY, headers)


def test_wrong_key_is_rejected():
    headers = _headers(signature=_sign("msg_1", "1700000000", BODY, key=b"other-key"))
    with pytest.raises(InvalidSignature):
        SignatureVerifier(SECRET).verify(BODY, headers)


def test_any_matching_signature_in_header_verifies():
    good = _sign("msg_1", "1700000000", BODY)
    header = f"v1,AAAA v2,{good[3:]} {good}"
    event = SignatureVerifier(SECRET).verify(BODY, _headers(signature=header))
    assert event.type == "user.created"


def test_malformed_signature_header_is_rejected_like_a_mismatch():
    with pytest.raises(InvalidSignature):
        SignatureVerifier(SECRET).verify(BODY, _headers(signature="garbage"))


def test_non_numeric_timestamp_is_rejected():
    headers = _headers(timestamp="yesterday")
    with pytest.raises(InvalidSignature):
        SignatureVerifier(SECRET).verify(BODY, headers)


def test_old_timestamps_accepted_without_replay_window():
    verifier = SignatureVerifier(SECRET, clock=lambda: 1700000000 + 86400)
    assert verifier.verify(BODY, _headers()).type == "user.created"


def test_replay_window_rejects_stale_delivery():
    verifier = SignatureVerifier(SECRET, tolerance_seconds=300, clock=lambda: 1700000000 + 301)
    with pytest.raises(InvalidSignature):
        verifier.verify(BODY, _headers())


def test_replay_window_accepts_fresh_delivery():
    verifier = SignatureVerifier(SECRET, tolerance_seconds=300, clock=lambda: 1700000000 + 299)
    assert verifier.verify(BODY, _headers()).type == "user.created"


def test_signed_non_event_payload_is_rejected():
    body = b"[1, 2, 3]"
    with pytest.raises(InvalidSignature):
        SignatureVerifier(SECRET).verify(body, _headers(body=body))


def test_sign_matches_reference_digest():
    verifier = SignatureVerifier(SECRET)
    assert "v1," + verifier.sign("msg_1", "1700000000", BODY) == _sign("msg_1", "1700000000", BODY)
