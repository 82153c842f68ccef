# create_tables.py
"""
Create all tables and, when ADMIN_EMAIL and ADMIN_PASSWORD are set,
a first Admin account to bootstrap the user directory.
"""

import os

from taskflow.database import Base, engine, SessionLocal
from taskflow.models import User, Role
from taskflow.services.user_directory import UserDirectory
from taskflow.utils.errors import ConflictError

def create_tables():
    """Create all tables"""
    Base.metadata.create_all(bind=engine)
    print("✅ All tables created successfully!")

def create_default_admin():
    """Create the bootstrap admin user from the environment"""
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        print("ℹ️ ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin creation")
        return

    db = SessionLocal()
    try:
        user_id = UserDirectory(db).register(
            name=os.getenv("ADMIN_NAME", "Administrator"),
            email=email,
            password=password,
            role=Role.ADMIN,
        )
        print(f"✅ Admin user created (id {user_id}): {email}")
    except ConflictError:
        existing = db.query(User).filter(User.email == email).first()
        print(f"ℹ️ User {email} already exists with role {existing.role.value}")
    finally:
        db.close()

if __name__ == "__main__":
    create_tables()
    create_default_admin()
