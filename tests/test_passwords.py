"""Password hashing tests."""

import pytest

from bizcards.security.passwords import (
    BCRYPT_MAX_BYTES,
    hash_password,
    password_fits,
    verify_password,
)

# 37 two-byte characters: short in characters, over the bcrypt limit in bytes
LONG_PASSWORD = "é" * 37


def test_hash_and_verify():
    password_hash = hash_password("correct horse")
    assert verify_password("correct horse", password_hash)
    assert not verify_password("wrong horse", password_hash)


def test_limit_is_measured_in_bytes():
    assert password_fits("a" * BCRYPT_MAX_BYTES)
    assert not password_fits("a" * (BCRYPT_MAX_BYTES + 1))
    assert not password_fits(LONG_PASSWORD)


def test_oversized_password_is_not_hashed():
    with pytest.raises(ValueError):
        hash_password(LONG_PASSWORD)


def test_shared_prefix_beyond_limit_does_not_match():
    prefix = "a" * BCRYPT_MAX_BYTES
    password_hash = hash_password(prefix)
    assert not verify_password(prefix + "anything", password_hash)


def test_register_rejects_oversized_password(client):
    response = client.post(
        "/api/v1/users", json={"email": "long@example.com", "password": LONG_PASSWORD}
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["path"] == "password"
