"""Tests for password hashing and access tokens."""

from datetime import UTC, datetime, timedelta

import jwt

from schoolhub.core.security import (
    ACCESS_TOKEN_TYPE,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("pw1")

        assert hashed != "pw1"
        assert verify_password("pw1", hashed)
        assert not verify_password("pw2", hashed)

    def test_hashes_are_salted(self):
        assert hash_password("pw1") != hash_password("pw1")

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("pw1", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    def test_round_trip(self, test_settings):
        token = create_access_token("user-123", settings=test_settings)

        payload = decode_token(token, settings=test_settings)

        assert payload["sub"] == "user-123"
        assert payload["type"] == ACCESS_TOKEN_TYPE

    def test_expires_after_configured_days(self, test_settings):
        token = create_access_token("user-123", settings=test_settings)
        payload = decode_token(token, settings=test_settings)

        assert payload["exp"] - payload["iat"] == int(timedelta(days=1).total_seconds())

    def test_expired_token_is_rejected(self, test_settings):
        issued = datetime.now(UTC) - timedelta(days=2)
        token = jwt.encode(
            {"sub": "user-123", "iat": issued, "exp": issued + timedelta(days=1)},
            test_settings.jwt_secret,
            algorithm="HS256",
        )

        assert decode_token(token, settings=test_settings) is None

    def test_wrong_secret_is_rejected(self, test_settings):
        token = jwt.encode(
            {"sub": "user-123", "exp": datetime.now(UTC) + timedelta(hours=1)},
            "another-secret-entirely",
            algorithm="HS256",
        )

        assert decode_token(token, settings=test_settings) is None

    def test_subject_is_required(self, test_settings):
        token = jwt.encode(
            {"exp": datetime.now(UTC) + timedelta(hours=1)},
            test_settings.jwt_secret,
            algorithm="HS256",
        )

        assert decode_token(token, settings=test_settings) is None
