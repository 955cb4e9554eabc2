import random
import string
from datetime import timedelta

import pytest

from workforce_api.auth.security import (
    TokenExpired,
    TokenInvalidSignature,
    TokenMalformed,
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)


SECRET = "unit-test-secret"


def _token(**kw):
    args = {"secret": SECRET, "user_id": 7, "role": "admin", "expires_delta": timedelta(minutes=5)}
    args.update(kw)
    return create_access_token(**args)


def test_token_round_trip():
    claims = verify_access_token(token=_token(), secret=SECRET)
    assert claims["sub"] == 7
    assert claims["role"] == "admin"
    assert claims["exp"] > claims["iat"]


def test_expired_token():
    token = _token(expires_delta=timedelta(seconds=-1))
    with pytest.raises(TokenExpired) as ei:
        verify_access_token(token=token, secret=SECRET)
    assert ei.value.reason == "Token expired"


def test_wrong_secret_is_invalid_signature():
    with pytest.raises(TokenInvalidSignature):
        verify_access_token(token=_token(), secret="another-secret")


def test_tampered_signature():
    header, payload, sig = _token().split(".")
    i = len(sig) // 2
    flipped = "B" if sig[i] == "A" else "A"
    tampered = ".".join([header, payload, sig[:i] + flipped + sig[i + 1 :]])
    with pytest.raises(TokenInvalidSignature) as ei:
        verify_access_token(token=tampered, secret=SECRET)
    assert ei.value.reason == "Invalid token signature"


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a..c", "a.b.c.d"])
def test_malformed_tokens(token):
    with pytest.raises(TokenMalformed) as ei:
        verify_access_token(token=token, secret=SECRET)
    assert ei.value.reason == "Malformed token"


def test_token_without_subject_is_malformed():
    import jwt

    token = jwt.encode({"exp": 4102444800, "role": "user"}, SECRET, algorithm="HS256")
    with pytest.raises(TokenMalformed):
        verify_access_token(token=token, secret=SECRET)


def test_password_hash_and_verify():
    for pw in ("admin", "correct horse battery staple", "pässwörd"):
        h = hash_password(pw)
        assert h != pw
        assert verify_password(pw, h)
        assert not verify_password(pw + "x", h)


def test_verify_password_rejects_blank_and_garbage():
    h = hash_password("secret")
    assert not verify_password("", h)
    assert not verify_password("secret", "")
    assert not verify_password("secret", "not-a-known-hash")


def test_hash_password_rejects_blank():
    with pytest.raises(ValueError):
        hash_password("")


def test_no_false_positives_across_random_pairs():
    # Cheap rounds keep 1000 verifications fast; verify_password reads the cost from the hash.
    from passlib.hash import pbkdf2_sha256

    rng = random.Random(20240101)
    alphabet = string.ascii_letters + string.digits + string.punctuation + " "

    def random_password():
        return "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 24)))

    cheap = pbkdf2_sha256.using(rounds=1000)
    checked = 0
    for _ in range(20):
        pw = random_password()
        h = cheap.hash(pw)
        assert verify_password(pw, h)
        for _ in range(50):
            other = random_password()
            if other == pw:
                continue
            assert not verify_password(other, h)
            checked += 1
    assert checked >= 990
