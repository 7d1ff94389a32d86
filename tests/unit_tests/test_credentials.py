"""Tests for temporary password generation."""

import string

from app.services.credentials import generate_temporary_password


def test_default_length_is_twelve():
    assert len(generate_temporary_password()) == 12


def test_case_alternates_by_position():
    for _ in range(100):
        password = generate_temporary_password()
        for i, ch in enumerate(password):
            pool = string.ascii_lowercase if i % 2 == 0 else string.ascii_uppercase
            assert ch in pool, f"{password!r} position {i}"


def test_letters_only():
    password = generate_temporary_password(40)
    assert password.isalpha()
    assert password.isascii()
