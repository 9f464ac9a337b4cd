"""Tests for classrooms repository."""

from unittest.mock import patch

import pytest

from staarkids.db.classrooms_repository import (
    CODE_ALPHABET,
    CODE_LENGTH,
    AlreadyEnrolledError,
    ClassroomCodeExhaustedError,
    ClassroomFullError,
    ClassroomNotFoundError,
    create_classroom,
    generate_classroom_code,
    get_classroom_by_code,
    join_classroom,
    list_classroom_students,
    list_classrooms_by_teacher,
    list_student_classrooms,
    list_students_by_teacher,
)
from staarkids.db.database import get_db
from staarkids.db.users_repository import upsert_user


@pytest.fixture
def teacher(db_path):
    return upsert_user("tch1", role="teacher", first_name="Ms. Garcia")


@pytest.fixture
def classroom(teacher):
    return create_classroom("tch1", "Room 12", grade=4, max_students=2)


def test_generate_code_alphabet():
    code = generate_classroom_code()

    assert len(code) == CODE_LENGTH
    assert all(ch in CODE_ALPHABET for ch in code)


class TestCreateClassroom:
    def test_defaults(self, teacher):
        classroom = create_classroom("tch1", "Room 12", grade=4)

        assert classroom.subject == "both"
        assert classroom.max_students == 30
        assert classroom.is_active is True
        assert len(classroom.code) == CODE_LENGTH

    def test_regenerates_taken_code(self, teacher):
        with patch(
            "staarkids.db.classrooms_repository.generate_classroom_code",
            side_effect=["AAAAAAAA", "AAAAAAAA", "BBBBBBBB"],
        ):
            first = create_classroom("tch1", "First", grade=3)
            second = create_classroom("tch1", "Second", grade=3)

        assert first.code == "AAAAAAAA"
        assert second.code == "BBBBBBBB"

    def test_gives_up_after_max_attempts(self, teacher):
        with patch(
            "staarkids.db.classrooms_repository.generate_classroom_code",
            return_value="AAAAAAAA",
        ):
            create_classroom("tch1", "First", grade=3)
            with pytest.raises(ClassroomCodeExhaustedError):
                create_classroom("tch1", "Second", grade=3)

    def test_list_by_teacher_skips_inactive(self, teacher):
        active = create_classroom("tch1", "Active", grade=4)
        inactive = create_classroom("tch1", "Old", grade=4)
        with get_db() as conn:
            conn.execute(
                "UPDATE classrooms SET is_active = 0 WHERE classroom_id = ?",
                (inactive.classroom_id,),
            )

        assert [c.classroom_id for c in list_classrooms_by_teacher("tch1")] == [
            active.classroom_id
        ]
        assert get_classroom_by_code(inactive.code) is None


class TestJoinClassroom:
    def test_join(self, classroom):
        upsert_user("stu1")

        enrollment = join_classroom("stu1", classroom.code.lower())

        assert enrollment.classroom_id == classroom.classroom_id
        assert [c.classroom_id for c in list_student_classrooms("stu1")] == [
            classroom.classroom_id
        ]
        assert [u.user_id for u in list_classroom_students(classroom.classroom_id)] == ["stu1"]

    def test_unknown_code(self, classroom):
        upsert_user("stu1")

        with pytest.raises(ClassroomNotFoundError, match="Classroom code not found"):
            join_classroom("stu1", "ZZZZZZZZ")

    def test_already_enrolled(self, classroom):
        upsert_user("stu1")
        join_classroom("stu1", classroom.code)

        with pytest.raises(AlreadyEnrolledError):
            join_classroom("stu1", classroom.code)

    def test_full(self, classroom):
        for student_id in ("stu1", "stu2", "stu3"):
            upsert_user(student_id)
        join_classroom("stu1", classroom.code)
        join_classroom("stu2", classroom.code)

        with pytest.raises(ClassroomFullError):
            join_classroom("stu3", classroom.code)


class TestStudentsByTeacher:
    def test_distinct_students_across_classrooms(self, teacher):
        first = create_classroom("tch1", "Room 12", grade=4)
        second = create_classroom("tch1", "Room 14", grade=4)
        upsert_user("stu1", first_name="Ana", last_name="Rios")
        upsert_user("stu2", first_name="Ben", last_name="Cole")
        join_classroom("stu1", first.code)
        join_classroom("stu1", second.code)
        join_classroom("stu2", second.code)

        assert [u.user_id for u in list_students_by_teacher("tch1")] == ["stu2", "stu1"]

    def test_skips_inactive_classrooms(self, teacher):
        classroom = create_classroom("tch1", "Old", grade=4)
        upsert_user("stu1")
        join_classroom("stu1", classroom.code)
        with get_db() as conn:
            conn.execute(
                "UPDATE classrooms SET is_active = 0 WHERE classroom_id = ?",
                (classroom.classroom_id,),
            )

        assert list_students_by_teacher("tch1") == []

    def test_other_teachers_students_hidden(self, classroom):
        upsert_user("tch2", role="teacher")
        upsert_user("stu1")
        join_classroom("stu1", classroom.code)

        assert list_students_by_teacher("tch2") == []
