"""Tests for users repository."""

import sqlite3

import pytest

from staarkids.db.users_repository import (
    generate_user_id,
    get_user,
    get_user_by_email,
    list_users,
    update_user_profile,
    upsert_user,
)


class TestUpsertUser:
    def test_insert(self, db_path):
        user = upsert_user("usr1", email="kid@example.com", first_name="Ana")

        assert user.user_id == "usr1"
        assert user.current_grade == 4
        assert user.role == "student"
        assert user.created_at == user.updated_at

    def test_update_keeps_created_at(self, db_path):
        first = upsert_user("usr1", first_name="Ana")
        second = upsert_user("usr1", first_name="Anita", current_grade=5)

        assert second.first_name == "Anita"
        assert second.current_grade == 5
        assert second.created_at == first.created_at

    def test_grade_constraint(self, db_path):
        with pytest.raises(sqlite3.IntegrityError):
            upsert_user("usr1", current_grade=7)

    def test_duplicate_email(self, db_path):
        upsert_user("usr1", email="same@example.com")

        with pytest.raises(sqlite3.IntegrityError):
            upsert_user("usr2", email="same@example.com")


class TestLookups:
    def test_get_user_missing(self, db_path):
        assert get_user("nobody") is None

    def test_get_by_email(self, db_path):
        upsert_user("usr1", email="kid@example.com")

        assert get_user_by_email("kid@example.com").user_id == "usr1"
        assert get_user_by_email("other@example.com") is None

    def test_list_by_role(self, db_path):
        upsert_user("s1")
        upsert_user("t1", role="teacher")

        assert [u.user_id for u in list_users(role="teacher")] == ["t1"]
        assert len(list_users()) == 2


class TestUpdateUserProfile:
    def test_partial_update(self, db_path):
        upsert_user("usr1", first_name="Ana", current_grade=3)

        user = update_user_profile("usr1", current_grade=4)

        assert user.current_grade == 4
        assert user.first_name == "Ana"

    def test_missing_user(self, db_path):
        assert update_user_profile("ghost", role="teacher") is None


def test_generate_user_id():
    user_id = generate_user_id()

    assert user_id.startswith("usr")
    assert len(user_id) == 11
