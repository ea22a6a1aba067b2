from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from task_tracker.core import config as app_config
from task_tracker.core.tokens import (
    TokenCodec,
    TokenExpiredError,
    TokenFailure,
    TokenInvalidError,
    TokenKind,
    TokenPayload,
    compute_refresh_expiry,
    issue_access_token,
    issue_refresh_token,
    reset_token_codecs,
    verify_token,
)

PAYLOAD = TokenPayload(user_id="user-1", email="a@example.com")


def test_access_token_verifies_to_same_payload():
    token = issue_access_token(PAYLOAD)
    assert verify_token(token, TokenKind.ACCESS) == PAYLOAD


def test_access_token_is_rejected_by_refresh_verifier():
    token = issue_access_token(PAYLOAD)
    with pytest.raises(TokenInvalidError) as exc:
        verify_token(token, TokenKind.REFRESH)
    assert exc.value.reason == TokenFailure.INVALID


def test_refresh_token_is_rejected_by_access_verifier():
    token = issue_refresh_token(PAYLOAD)
    with pytest.raises(TokenInvalidError):
        verify_token(token, TokenKind.ACCESS)


def test_purpose_claim_is_checked_even_with_shared_secret():
    codec_a = TokenCodec(TokenKind.ACCESS, "same", timedelta(minutes=5))
    codec_r = TokenCodec(TokenKind.REFRESH, "same", timedelta(minutes=5))
    with pytest.raises(TokenInvalidError):
        codec_a.verify(codec_r.issue(PAYLOAD))


def test_expired_token_reports_expired_not_invalid():
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = issue_access_token(PAYLOAD, now=past)
    with pytest.raises(TokenExpiredError) as exc:
        verify_token(token, TokenKind.ACCESS)
    assert exc.value.reason == TokenFailure.EXPIRED


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens_are_invalid(token):
    with pytest.raises(TokenInvalidError):
        verify_token(token, TokenKind.ACCESS)


def test_tampered_signature_is_invalid():
    token = issue_access_token(PAYLOAD)
    head, body, sig = token.split(".")
    tampered = ".".join([head, body, ("A" if sig[0] != "A" else "B") + sig[1:]])
    with pytest.raises(TokenInvalidError):
        verify_token(tampered, TokenKind.ACCESS)


def test_missing_email_claim_is_invalid():
    token = jwt.encode(
        {"sub": "user-1", "purpose": "access", "exp": int(datetime.now(timezone.utc).timestamp()) + 60},
        app_config.settings.JWT_ACCESS_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError):
        verify_token(token, TokenKind.ACCESS)


def test_two_tokens_issued_in_same_second_differ():
    now = datetime.now(timezone.utc)
    assert issue_refresh_token(PAYLOAD, now=now) != issue_refresh_token(PAYLOAD, now=now)


def test_lifetime_follows_configured_expiry():
    app_config.settings.JWT_ACCESS_EXPIRY = "2h"
    reset_token_codecs()

    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    token = issue_access_token(PAYLOAD, now=now)
    claims = jwt.get_unverified_claims(token)
    assert claims["exp"] - claims["iat"] == 2 * 60 * 60


def test_refresh_expiry_matches_refresh_lifetime():
    app_config.settings.JWT_REFRESH_EXPIRY = "7d"
    reset_token_codecs()

    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert compute_refresh_expiry(now) == now + timedelta(days=7)


def test_codec_requires_secret():
    with pytest.raises(RuntimeError):
        TokenCodec(TokenKind.ACCESS, "", timedelta(minutes=1))
