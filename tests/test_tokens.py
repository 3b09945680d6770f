from datetime import datetime, timedelta, UTC

import pytest
from jose import jwt

from tasktrack.errors import BadSignature, MalformedToken, TokenExpired
from tasktrack.utils.tokens import TokenService

NOW = datetime(2026, 1, 15, 12, 0, 0, 500000, tzinfo=UTC)


@pytest.fixture
def tokens():
    return TokenService(secret_key="unit-test-key", ttl=timedelta(minutes=30))


def test_fresh_token_resolves_to_subject(tokens):
    token = tokens.issue("user-1", now=NOW)
    claims = tokens.verify(token, now=NOW)
    assert claims.subject == "user-1"
    assert claims.expires_at - claims.issued_at == timedelta(minutes=30)
    # verifying twice is stable
    assert tokens.verify(token, now=NOW) == claims


def test_token_expires_after_ttl(tokens):
    token = tokens.issue("user-1", now=NOW)
    assert tokens.verify(token, now=NOW + timedelta(minutes=29)).subject == "user-1"
    with pytest.raises(TokenExpired):
        tokens.verify(token, now=NOW + timedelta(minutes=30))


def test_tokens_issued_at_different_instants_differ(tokens):
    first = tokens.issue("user-1", now=NOW)
    second = tokens.issue("user-1", now=NOW + timedelta(seconds=5))
    assert first != second
    assert tokens.verify(first, now=NOW + timedelta(seconds=5)).subject == "user-1"
    assert tokens.verify(second, now=NOW + timedelta(seconds=5)).subject == "user-1"


def test_token_signed_with_other_key_is_rejected(tokens):
    forged = TokenService(secret_key="someone-else").issue("user-1", now=NOW)
    with pytest.raises(BadSignature):
        tokens.verify(forged, now=NOW)


def test_altered_signature_is_rejected(tokens):
    token = tokens.issue("user-1", now=NOW)
    head, payload, signature = token.split(".")
    swapped = "B" if signature[3] != "B" else "C"
    tampered = ".".join([head, payload, signature[:3] + swapped + signature[4:]])
    with pytest.raises(BadSignature):
        tokens.verify(tampered, now=NOW)


def test_altered_payload_is_rejected(tokens):
    token = tokens.issue("user-1", now=NOW)
    other = tokens.issue("user-2", now=NOW)
    head, _, signature = token.split(".")
    spliced = ".".join([head, other.split(".")[1], signature])
    with pytest.raises(BadSignature):
        tokens.verify(spliced, now=NOW)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "only.two"])
def test_garbage_is_malformed(tokens, garbage):
    with pytest.raises(MalformedToken):
        tokens.verify(garbage, now=NOW)


def test_missing_claims_are_malformed(tokens):
    token = jwt.encode({"sub": "user-1"}, "unit-test-key", algorithm="HS256")
    with pytest.raises(MalformedToken):
        tokens.verify(token, now=NOW)
