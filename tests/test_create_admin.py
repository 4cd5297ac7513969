import pytest

from skillsync.core.security import verify_password
from skillsync.create_admin import create_admin


def test_create_admin_stores_hashed_admin(db):
    user = create_admin(db, "root@example.com", "Root", "hunter2")

    assert user["role"] == "admin"
    assert user["full_name"] == "Root"
    assert verify_password("hunter2", db.get_user_by_email("root@example.com")["password"])


def test_create_admin_rejects_existing_email(db):
    create_admin(db, "root@example.com", "Root", "hunter2")

    with pytest.raises(ValueError, match="already exists"):
        create_admin(db, "root@example.com", "Root Again", "other")
