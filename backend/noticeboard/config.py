from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./noticeboard.db"
    SESSION_COOKIE_NAME: str = "sid"
    SESSION_TTL_DAYS: int = 7
    PASSWORD_HASH_ROUNDS: int = 100_000
    MIN_PASSWORD_LENGTH: int = 6
    CORS_ORIGINS: list[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://127.0.0.1:8000",
        "http://localhost:8000",
    ]
    LOG_LEVEL: str = "INFO"
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 8000
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    ADMIN_EMAIL: str = "admin@noticeboard.edu"
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str | None = None

    class Config:
        env_file = ".env"

settings = Settings()
