# scripts/seed_admin.py
# Создаёт администратора из ADMIN_EMAIL / ADMIN_PASSWORD (.env), если его ещё нет
import os

from storefront.core.security import get_password_hash
from storefront.db.session import SessionLocal
from storefront.models.user import RoleEnum, User


def seed_admin_user() -> None:
    email = os.getenv("ADMIN_EMAIL")
    raw_password = os.getenv("ADMIN_PASSWORD")

    if not email or not raw_password:
        print("❌ ADMIN_EMAIL or ADMIN_PASSWORD is missing in .env")
        return

    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            print("⚠️ Admin user already exists, skipping.")
            return
        db.add(User(email=email, hashed_password=get_password_hash(raw_password), role=RoleEnum.admin))
        db.commit()
        print(f"✅ Admin user created: {email}")
    finally:
        db.close()


if __name__ == "__main__":
    seed_admin_user()
