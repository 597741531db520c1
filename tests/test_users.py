# User directory tests.
import pytest

from quiz_studio.errors import Conflict, NotFound
from quiz_studio.models import UserRole


def test_create_user_hashes_password(users):
    user = users.create("a@x.com", "alice", "Password123")

    assert user.id
    assert user.email == "a@x.com"
    assert user.username == "alice"
    assert user.role == UserRole.USER
    assert user.is_active is True
    assert user.password_hash != "Password123"
    assert users.validate_password("Password123", user.password_hash)
    assert user.created_at == user.updated_at


def test_create_admin_when_role_is_given(users):
    user = users.create("root@x.com", "root", "Password123", role=UserRole.ADMIN)

    assert user.role == UserRole.ADMIN


def test_create_rejects_duplicate_email(users):
    users.create("a@x.com", "alice", "Password123")

    with pytest.raises(Conflict) as exc_info:
        users.create("a@x.com", "alice2", "Password123")

    assert exc_info.value.status_code == 409
    assert "email" in exc_info.value.detail


def test_create_rejects_duplicate_username(users):
    users.create("a@x.com", "alice", "Password123")

    with pytest.raises(Conflict) as exc_info:
        users.create("b@x.com", "alice", "Password123")

    assert "username" in exc_info.value.detail


# Email is checked before username.
def test_duplicate_email_reported_before_username(users):
    users.create("a@x.com", "alice", "Password123")

    with pytest.raises(Conflict) as exc_info:
        users.create("a@x.com", "alice", "Password123")

    assert "email" in exc_info.value.detail


def test_lookups_are_case_sensitive(users):
    users.create("a@x.com", "alice", "Password123")

    assert users.find_by_email("A@x.com") is None
    assert users.find_by_username("Alice") is None
    assert users.create("A@x.com", "Alice", "Password123").email == "A@x.com"


def test_find_helpers_return_none_on_miss(users):
    user = users.create("a@x.com", "alice", "Password123")

    assert users.find_by_email("a@x.com") is user
    assert users.find_by_username("alice") is user
    assert users.find_by_id(user.id) is user
    assert users.find_by_email("nobody@x.com") is None
    assert users.find_by_username("nobody") is None
    assert users.find_by_id("missing") is None


def test_find_by_id_or_fail_raises_not_found(users):
    with pytest.raises(NotFound):
        users.find_by_id_or_fail("missing")


def test_validate_password_rejects_wrong_password(users):
    user = users.create("a@x.com", "alice", "Password123")

    assert users.validate_password("Wrong123", user.password_hash) is False


def test_touch_updates_timestamp(users):
    user = users.create("a@x.com", "alice", "Password123")
    before = user.updated_at

    users.touch(user.id)

    assert user.updated_at >= before
    assert user.created_at == before


def test_set_active_flips_flag(users):
    user = users.create("a@x.com", "alice", "Password123")

    users.set_active(user.id, False)

    assert users.find_by_id(user.id).is_active is False


def test_find_all_preserves_insertion_order(users):
    users.create("a@x.com", "alice", "Password123")
    users.create("b@x.com", "bob", "Password123")

    assert [user.username for user in users.find_all()] == ["alice", "bob"]
