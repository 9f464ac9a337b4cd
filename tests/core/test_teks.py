"""Tests for the TEKS standards catalogue."""

import random

import pytest

from staarkids.core.teks import (
    default_category,
    get_teks_standards,
    is_valid_teks,
    random_teks_standard,
    validate_grade_subject,
)


class TestGetTeksStandards:
    def test_math_codes(self):
        """Math covers strands 1-5, strand 1 has four expectations."""
        standards = get_teks_standards(4, "math")

        assert len(standards) == 16
        assert standards[:4] == ["4.1A", "4.1B", "4.1C", "4.1D"]
        assert standards[-1] == "4.5C"

    def test_reading_codes(self):
        standards = get_teks_standards(3, "reading")

        assert len(standards) == 15
        assert standards[0] == "3.6A"
        assert standards[-1] == "3.10C"

    def test_all_codes_are_valid(self):
        for grade in (3, 4, 5):
            for subject in ("math", "reading"):
                assert all(is_valid_teks(code) for code in get_teks_standards(grade, subject))


class TestRandomTeksStandard:
    def test_seeded_choice_in_catalogue(self):
        code = random_teks_standard(5, "math", random.Random(7))

        assert code in get_teks_standards(5, "math")


class TestIsValidTeks:
    @pytest.mark.parametrize("code", ["4.2A", "3.10", "5.10C"])
    def test_valid(self, code):
        assert is_valid_teks(code)

    @pytest.mark.parametrize("code", ["", None, "4.2a", "A.2", "4-2A", "4.2AB"])
    def test_invalid(self, code):
        assert not is_valid_teks(code)


class TestValidateGradeSubject:
    def test_supported(self):
        validate_grade_subject(3, "reading")

    def test_bad_grade(self):
        with pytest.raises(ValueError, match="Grade"):
            validate_grade_subject(6, "math")

    def test_bad_subject(self):
        with pytest.raises(ValueError, match="Subject"):
            validate_grade_subject(4, "science")


def test_default_category():
    assert default_category("math") == "Problem Solving"
    assert default_category("reading") == "Comprehension"
