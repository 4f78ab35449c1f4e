from passlib.context import CryptContext

from noticeboard.config import settings

# PBKDF2-HMAC-SHA256, 256-bit derived key, 16-byte random salt per hash.
# passlib compares digests in constant time.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=settings.PASSWORD_HASH_ROUNDS,
    pbkdf2_sha256__salt_size=16,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify() -> None:
    """Burn the same time as a real verification when no account matched."""
    pwd_context.dummy_verify()
