from noticeboard.core.logging_config import configure_logging
from noticeboard.config import settings
from noticeboard.database.session import SessionLocal
from noticeboard.services.session_service import purge_expired_sessions


def purge_sessions():
    db = SessionLocal()
    try:
        count = purge_expired_sessions(db)
    finally:
        db.close()
    print(f"Removed {count} expired session(s)")


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    purge_sessions()
