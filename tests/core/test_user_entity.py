"""User Entity - name/email rules, checked in order, after trimming."""

import pytest

from shopmesh.core.errors import ValidationError
from shopmesh.core.user import User


def _message(name, email) -> str:
    with pytest.raises(ValidationError) as exc:
        User.new(name, email)
    return exc.value.message


@pytest.mark.parametrize("email", [
    "a@b.co", "john.doe+tag@example.com", "x_y%z@sub.domain.org",
])
def test_valid_emails_accepted(email):
    assert User.new("Jo", email).email == email


@pytest.mark.parametrize("email", [
    "plain", "a@b", "a@b.c", "@example.com", "a b@example.com", "a@example.c0m",
])
def test_invalid_emails_rejected(email):
    assert _message("John", email) == "email format is invalid"


def test_name_is_trimmed_before_validation():
    user = User.new("  Ann  ", " ann@example.com ")
    assert user.name == "Ann"
    assert user.email == "ann@example.com"


@pytest.mark.parametrize("name, message", [
    ("", "name is required"),
    ("   ", "name is required"),
    ("A", "name must be between 2 and 100 characters"),
    ("x" * 101, "name must be between 2 and 100 characters"),
])
def test_name_rules(name, message):
    assert _message(name, "a@example.com") == message


def test_name_bounds_inclusive():
    assert User.new("ab", "a@example.com")
    assert User.new("x" * 100, "a@example.com")


def test_first_failure_wins():
    assert _message("", "") == "name is required"
    assert _message("Ann", "") == "email is required"
