"""
Tests for the admin bootstrap script (runs against the default engine).
"""
from scripts import create_admin

from inbox.core.config import ADMIN_EMAIL, ADMIN_PASSWORD
from inbox.core.security import authenticate_user
from inbox.db.session import get_db_session
from inbox.models.user import User


def test_creates_then_updates_admin():
    assert create_admin.main() == 0
    # A second run resets the existing account instead of duplicating it
    assert create_admin.main() == 0

    with get_db_session() as db:
        users = db.query(User).filter(User.email == ADMIN_EMAIL.lower()).all()
        assert len(users) == 1
        assert users[0].role == "admin"
        assert authenticate_user(db, ADMIN_EMAIL, ADMIN_PASSWORD) is not None
