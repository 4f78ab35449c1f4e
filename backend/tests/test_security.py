from noticeboard.core.security import hash_password, pwd_context, verify_password


def test_hash_is_pbkdf2_sha256_with_100k_rounds():
    hashed = hash_password("secret1")
    assert hashed != "secret1"
    assert pwd_context.identify(hashed) == "pbkdf2_sha256"

    _, scheme, rounds, salt, checksum = hashed.split("$")
    assert scheme == "pbkdf2-sha256"
    assert int(rounds) >= 100_000
    # adapted base64: 16 salt bytes -> 22 chars, 32 key bytes -> 43 chars
    assert len(salt) >= 22
    assert len(checksum) == 43


def test_same_password_gets_distinct_salts():
    assert hash_password("secret1") != hash_password("secret1")


def test_verify_password():
    hashed = hash_password("secret1")
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)
    assert not verify_password("", hashed)
