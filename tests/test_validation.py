"""
Tests for the form validation rules and FormValidator.
"""
import pytest
from fastapi import HTTPException

from jobportal.core.validation import (
    FormValidator,
    Rule,
    confirm_password,
    create_job_application_validator,
    create_job_posting_validator,
    create_login_validator,
    create_profile_validator,
    create_signup_validator,
    file,
    raise_for_errors,
    validation_rules,
)


# ============================================================
# RULES
# ============================================================

@pytest.mark.parametrize("value", [None, "", "   ", [], False])
def test_required_rejects_empty_values(value):
    assert validation_rules.required(value) == "This field is required"


def test_required_uses_field_name_and_accepts_zero():
    assert validation_rules.required("", "Email") == "Email is required"
    assert validation_rules.required(0) is None


@pytest.mark.parametrize("value,missing", [
    ("Ab1!", "at least 8 characters"),
    ("abcdefg1!", "one uppercase letter"),
    ("ABCDEFG1!", "one lowercase letter"),
    ("Abcdefgh!", "one number"),
    ("Abcdefgh1", "one special character"),
])
def test_password_reports_missing_requirement(value, missing):
    error = validation_rules.password(value)
    assert error.startswith("Password must contain")
    assert missing in error


def test_password_lists_every_missing_requirement():
    error = validation_rules.password("abc")
    for missing in ("at least 8 characters", "one uppercase letter", "one number", "one special character"):
        assert missing in error
    assert "lowercase" not in error


def test_password_accepts_strong_password():
    assert validation_rules.password("Str0ng!Pass") is None


def test_rules_other_than_required_pass_empty_values():
    for rule in (validation_rules.email, validation_rules.password, validation_rules.phone,
                 validation_rules.name, validation_rules.url,
                 validation_rules.min_length(3), validation_rules.max_length(3)):
        assert rule("") is None
        assert rule(None) is None


def test_email_phone_name_url():
    assert validation_rules.email("user@example.com") is None
    assert validation_rules.email("not-an-email") == "Please enter a valid email address"
    assert validation_rules.phone("+91 98765-43210") is None
    assert validation_rules.phone("call me") == "Please enter a valid phone number"
    assert validation_rules.name("Mary-Jane O'Neil") is None
    assert validation_rules.name("A") == "Name must be at least 2 characters long"
    assert validation_rules.name("R2D2").startswith("Name can only contain")
    assert validation_rules.url("https://jobportal.com") is None
    assert validation_rules.url("not a url") == "Please enter a valid URL"


def test_confirm_password():
    assert confirm_password("Secret1!", "Secret1!") is None
    assert confirm_password("Secret1?", "Secret1!") == "Passwords do not match"


def test_length_rules():
    assert validation_rules.min_length(3)("ab") == "Must be at least 3 characters long"
    assert validation_rules.max_length(3)("abcd") == "Must be no more than 3 characters long"
    assert validation_rules.max_length(3)("abc") is None


def test_file_rule_size_and_type():
    assert file({"size": 1024, "type": "application/pdf"}, allowed_types=["application/pdf"]) is None
    assert file({"size": 6 * 1024 * 1024, "type": "application/pdf"}) == "File size must be less than 5MB"
    assert file({"size": 10, "type": "image/png"}, allowed_types=["application/pdf"]) == \
        "File type must be one of: application/pdf"


# ============================================================
# FormValidator
# ============================================================

def test_validate_returns_false_iff_some_field_has_an_error():
    validator = create_login_validator()

    assert validator.validate({"email": "user@example.com", "password": "anything"}) is True
    assert validator.get_errors() == {}

    assert validator.validate({"email": "bad", "password": ""}) is False
    assert validator.get_errors() == {
        "email": "Please enter a valid email address",
        "password": "This field is required",
    }


def test_chain_stops_at_first_error():
    validator = FormValidator().field("email", validation_rules.required, validation_rules.email)
    validator.validate({})
    assert validator.get_field_error("email") == "This field is required"


def test_rule_with_bound_params():
    validator = FormValidator().field("confirm", Rule(confirm_password, ("Secret1!",)))
    assert validator.validate({"confirm": "Secret1!"}) is True
    assert validator.validate({"confirm": "other"}) is False
    assert validator.get_field_error("confirm") == "Passwords do not match"


def test_validate_field_and_clearing():
    validator = create_signup_validator(require_terms=False)
    validator.validate({})
    assert validator.get_field_error("first_name") == "First name is required"

    assert validator.validate_field("first_name", "Asha") is True
    assert validator.get_field_error("first_name") is None

    validator.clear_field_error("email")
    assert validator.get_field_error("email") is None

    validator.clear_errors()
    assert validator.is_valid()


def test_signup_requires_terms_by_default():
    data = {
        "first_name": "Asha", "last_name": "Rao", "email": "asha@example.com",
        "password": "Str0ng!Pass", "phone": "+919876543210",
    }
    validator = create_signup_validator()
    assert validator.validate(data) is False
    assert list(validator.get_errors()) == ["terms_accepted"]
    assert validator.validate({**data, "terms_accepted": True}) is True


def test_job_application_validator():
    validator = create_job_application_validator()
    ok = validator.validate({
        "full_name": "Asha Rao", "email": "asha@example.com",
        "resume": {"file": {"size": 1000, "type": "application/pdf"}},
    })
    assert ok is True

    assert validator.validate({"full_name": "Asha Rao", "email": "asha@example.com",
                               "cover_letter": "x" * 1001}) is False
    assert validator.get_field_error("resume") == "Resume is required"
    assert validator.get_field_error("cover_letter") == "Must be no more than 1000 characters long"


def test_profile_validator():
    validator = create_profile_validator()
    assert validator.validate({"name": "Asha Rao", "email": "asha@example.com", "title": "Engineer",
                               "website": "https://asha.dev"}) is True
    assert validator.validate({"name": "Asha Rao", "email": "asha@example.com", "title": "E"}) is False
    assert validator.get_field_error("title") == "Must be at least 2 characters long"


def test_job_posting_validator_salary_bound_and_skills():
    data = {
        "title": "Backend Engineer",
        "description": "Build and operate the APIs that power job search for thousands of users.",
        "employment_type": "full-time",
        "remote_type": "hybrid",
        "currency": "INR",
        "salary_max": 1000,
        "skills": ["Python"],
    }
    assert create_job_posting_validator(salary_min=500).validate(data) is True

    validator = create_job_posting_validator(salary_min=2000)
    assert validator.validate({**data, "skills": []}) is False
    assert set(validator.get_errors()) == {"salary_max", "skills"}


def test_raise_for_errors_builds_400():
    with pytest.raises(HTTPException) as exc:
        raise_for_errors(create_login_validator(), {"email": "", "password": ""})

    assert exc.value.status_code == 400
    assert exc.value.detail["message"] == "Validation failed"
    assert set(exc.value.detail["errors"]) == {"email", "password"}
