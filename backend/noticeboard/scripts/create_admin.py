from noticeboard import models  # noqa: F401
from noticeboard.config import settings
from noticeboard.database.base import Base
from noticeboard.database.session import SessionLocal, engine
from noticeboard.models.user import User, UserRole
from noticeboard.services.admin_service import create_user
from noticeboard.utils.generator import generate_temp_password


def create_admin():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing_admin = db.query(User).filter(
            User.role == UserRole.ADMIN.value,
            User.is_deleted == False,  # noqa: E712
        ).first()
        if existing_admin:
            print("Admin already exists")
            return

        password = settings.ADMIN_PASSWORD or generate_temp_password()
        create_user(
            db,
            email=settings.ADMIN_EMAIL.strip().lower(),
            username=settings.ADMIN_USERNAME.strip().lower(),
            password=password,
            full_name="System Admin",
            role=UserRole.ADMIN.value,
            is_verified=True,
        )
    finally:
        db.close()

    print(f"Admin created successfully: {settings.ADMIN_EMAIL}")
    if not settings.ADMIN_PASSWORD:
        print(f"Temporary password: {password}")


if __name__ == "__main__":
    create_admin()
