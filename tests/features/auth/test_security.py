from datetime import datetime, timedelta

import jwt
import pytest

from hdnotes.features.auth.utils.security import (
    create_access_token,
    decode_access_token,
    generate_otp,
    hash_otp,
    normalize_email,
    verify_otp_hash,
)
from hdnotes.platform.exceptions import TokenExpired, TokenInvalid

SECRET = "unit-test-secret"


def test_normalize_email():
    assert normalize_email("  Foo@Bar.COM\n") == "foo@bar.com"


def test_generate_otp_is_numeric_and_sized():
    for length in (4, 6, 8):
        otp = generate_otp(length)
        assert len(otp) == length
        assert otp.isdigit()


def test_generate_otp_varies():
    codes = [generate_otp(6) for _ in range(200)]
    assert all(len(c) == 6 for c in codes)
    assert len(set(codes)) > 1


def test_hash_and_verify():
    otp_hash = hash_otp("123456", rounds=4)

    assert otp_hash != "123456"
    assert otp_hash.startswith("$2")
    assert verify_otp_hash("123456", otp_hash)
    assert verify_otp_hash(" 123456 ", otp_hash)
    assert not verify_otp_hash("654321", otp_hash)


def test_same_code_hashes_differently():
    assert hash_otp("123456", rounds=4) != hash_otp("123456", rounds=4)


def test_malformed_hash_is_a_mismatch():
    assert verify_otp_hash("123456", "not-a-bcrypt-hash") is False


def test_access_token_claims():
    now = datetime(2030, 1, 1, 12, 0, 0)
    token = create_access_token({"id": "u1", "email": "a@x.com"}, SECRET, now=now)

    claims = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
    assert claims["id"] == "u1"
    assert claims["email"] == "a@x.com"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_decode_round_trip():
    token = create_access_token({"id": "u1", "email": "a@x.com"}, SECRET)
    assert decode_access_token(token, SECRET)["email"] == "a@x.com"


def test_decode_expired_token():
    token = create_access_token(
        {"id": "u1", "email": "a@x.com"}, SECRET, now=datetime(2000, 1, 1), expires_delta=timedelta(days=1)
    )
    with pytest.raises(TokenExpired):
        decode_access_token(token, SECRET)


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_decode_garbage(token):
    with pytest.raises(TokenInvalid):
        decode_access_token(token, SECRET)


def test_decode_wrong_key():
    token = create_access_token({"id": "u1", "email": "a@x.com"}, SECRET)
    with pytest.raises(TokenInvalid):
        decode_access_token(token, "another-secret")


def test_expired_is_a_kind_of_invalid():
    # the gate only needs to catch TokenInvalid
    assert issubclass(TokenExpired, TokenInvalid)
