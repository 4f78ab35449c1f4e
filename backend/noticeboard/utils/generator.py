import secrets
import string


def generate_session_id() -> str:
    # 32 random bytes, url-safe: 43 characters
    return secrets.token_urlsafe(32)


def generate_temp_password(length: int = 10) -> str:
    chars = string.ascii_letters + string.digits + "@$#"
    return "".join(secrets.choice(chars) for _ in range(length))
