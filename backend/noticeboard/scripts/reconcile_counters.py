from noticeboard.core.logging_config import configure_logging
from noticeboard.config import settings
from noticeboard.database.session import SessionLocal
from noticeboard.services.notice_service import reconcile_counters


def reconcile():
    db = SessionLocal()
    try:
        repaired = reconcile_counters(db)
    finally:
        db.close()
    print(f"Repaired counters on {repaired} notice(s)")


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    reconcile()
