# tests/test_input_validator.py
import pytest

from classvote.errors import ValidationError
from classvote.security.input_validator import InputValidator


@pytest.fixture
def validator():
    return InputValidator()


def test_sanitize_string_basic(validator):
    assert validator.sanitize_string("Hello World") == "Hello World"
    assert validator.sanitize_string(" extra spaces  ") == "extra spaces"

    # HTML tag stripping
    assert validator.sanitize_string("<p>text</p>") == "text"
    assert validator.sanitize_string('<b>bold</b>') == "bold"

    # Plain text survives unescaped
    assert validator.sanitize_string("Tom & Jerry") == "Tom & Jerry"
    assert validator.sanitize_string("O'Brien") == "O'Brien"

    # Max length
    assert len(validator.sanitize_string("a" * 300)) == 255

    # XSS prevention
    assert validator.sanitize_string('<script>alert("xss")</script>') == ""


def test_sanitize_string_invalid_input(validator):
    with pytest.raises(ValidationError, match="Input must be a string"):
        validator.sanitize_string(123)
    with pytest.raises(ValidationError, match="Input must be a string"):
        validator.sanitize_string(None)


def test_validate_email(validator):
    assert validator.validate_email("user@example.com")
    assert validator.validate_email("user.name+tag@example.co.uk")

    assert not validator.validate_email("not-an-email")
    assert not validator.validate_email("@example.com")
    assert not validator.validate_email("user@")
    assert not validator.validate_email("")
    assert not validator.validate_email(None)


def test_validate_class_label(validator):
    assert validator.validate_class_label("10A")
    assert validator.validate_class_label("Year 9 - B")
    assert not validator.validate_class_label("")
    assert not validator.validate_class_label("<b>10A</b>")
    assert not validator.validate_class_label("x" * 40)
    assert not validator.validate_class_label(None)


def test_require_email(validator):
    assert validator.require_email(" alice@x.edu ") == "alice@x.edu"
    with pytest.raises(ValidationError, match="Email is required"):
        validator.require_email(None)
    with pytest.raises(ValidationError, match="Invalid email address"):
        validator.require_email("alice")


def test_normalize_registration(validator):
    assert validator.normalize_registration(" <i>Alice</i> ", " 10A ") == ("Alice", "10A")
    with pytest.raises(ValidationError, match="Missing required fields"):
        validator.normalize_registration("", "10A")
    with pytest.raises(ValidationError, match="Invalid full name"):
        validator.normalize_registration("<script>x</script>", "10A")


def test_normalize_ballot_valid(validator):
    assert validator.normalize_ballot("bob", "leadership", "carol", " reliability ") == \
        ("bob", "leadership", "carol", " reliability ")


def test_normalize_ballot_keeps_reason_codes_verbatim(validator):
    reason = "a<b>c</b> & " + "R" * 50
    assert validator.normalize_ballot("bob", reason, "carol", "x")[1] == reason


def test_normalize_ballot_rejects_long_reason_codes(validator):
    assert validator.normalize_ballot("bob", "R" * 64, "carol", "x")[1] == "R" * 64
    with pytest.raises(ValidationError, match="Reason code too long: secondReason"):
        validator.normalize_ballot("bob", "leadership", "carol", "R" * 65)


@pytest.mark.parametrize("ballot,message", [
    ((None, "leadership", "carol", "experience"), "firstChoice"),
    (("bob", "", "carol", "experience"), "firstReason"),
    (("bob", "leadership", "  ", "experience"), "secondChoice"),
    (("bob", "leadership", "carol", None), "secondReason"),
    (("bob", "leadership", "bob", "experience"), "must be different"),
])
def test_normalize_ballot_invalid(validator, ballot, message):
    with pytest.raises(ValidationError, match=message):
        validator.normalize_ballot(*ballot)
