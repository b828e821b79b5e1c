"""
Create the initial admin account.
Run this script once after configuring the database in .env.
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from inbox.db.session import get_db_session, test_db_connection, init_db
from inbox.core.security import create_user, hash_password
from inbox.core.config import ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD
from inbox.models.user import User


def main() -> int:
    print("=" * 60)
    print("Creating Admin User")
    print("=" * 60)

    print("\n1) Testing database connection...")
    if not test_db_connection():
        print("[ERROR] Database connection failed!")
        print("   Please check:")
        print("   - PostgreSQL is running")
        print("   - Database exists")
        print("   - .env configuration is correct")
        return 1
    print("[OK] Database connected")

    print("\n2) Initializing database tables...")
    try:
        init_db()
    except Exception as e:
        print(f"[ERROR] Failed to initialize tables: {e}")
        return 1
    print("[OK] Tables initialized")

    email = ADMIN_EMAIL.strip().lower()
    print(f"\n3) Creating admin user '{email}'...")
    try:
        with get_db_session() as db:
            existing = db.query(User).filter(User.email == email).first()
            if existing:
                print(f"[WARN] User '{email}' already exists. Updating password and role...")
                existing.password_hash = hash_password(ADMIN_PASSWORD)
                existing.role = "admin"
            else:
                create_user(db, name=ADMIN_NAME, email=email, password=ADMIN_PASSWORD, role="admin")
    except Exception as e:
        print(f"[ERROR] Error: {e}")
        return 1

    print("\n" + "=" * 60)
    print("ADMIN USER READY!")
    print("=" * 60)
    print(f"\n   Email:    {email}")
    print(f"   Password: {ADMIN_PASSWORD}")
    print("\nIMPORTANT: Change password after first login!")
    print("\nStart the application with:")
    print("   python -m uvicorn inbox.main:app --reload --host 0.0.0.0 --port 3000")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
