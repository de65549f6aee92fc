"""
Form validation - rule chains per field.

A rule is a function value -> error message (str) or None. Rules that need
extra arguments (confirm-password needs the original password) are bound
either with a closure (min_length(8)) or with Rule(validator, params).

    validator = (
        FormValidator()
        .field("email", validation_rules.required, validation_rules.email)
        .field("password", validation_rules.required, validation_rules.password)
    )
    if not validator.validate(form_data):
        errors = validator.get_errors()   # {"email": "Please enter a valid email address"}

Each field's rules run in order and stop at the first error, so a field has
at most one message. Every rule except `required` accepts empty values; put
`required` first in the chain when the field is mandatory.
"""

import re
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple
from urllib.parse import urlparse

from fastapi import HTTPException

RuleFunc = Callable[..., Optional[str]]

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_REGEX = re.compile(r"^\+?[1-9][0-9]{0,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")
NAME_REGEX = re.compile(r"^[a-zA-Z\s\-'.]+$")
SPECIAL_CHARACTER_REGEX = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")

DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024


class Rule(NamedTuple):
    """A validator plus the extra positional arguments it is called with."""
    validator: RuleFunc
    params: Tuple = ()


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


# ============================================================
# RULES
# ============================================================

def required(value: Any, field_name: str = "This field") -> Optional[str]:
    if _is_empty(value):
        return f"{field_name} is required"
    return None


def email(value: Any) -> Optional[str]:
    if not value:
        return None
    if not EMAIL_REGEX.match(str(value)):
        return "Please enter a valid email address"
    return None


def password(value: Any) -> Optional[str]:
    """At least 8 characters with an uppercase, a lowercase, a digit and a special character."""
    if not value:
        return None
    missing = []

    if len(value) < 8:
        missing.append("at least 8 characters")
    if not re.search(r"[A-Z]", value):
        missing.append("one uppercase letter")
    if not re.search(r"[a-z]", value):
        missing.append("one lowercase letter")
    if not re.search(r"[0-9]", value):
        missing.append("one number")
    if not SPECIAL_CHARACTER_REGEX.search(value):
        missing.append("one special character")

    if missing:
        return f"Password must contain {', '.join(missing)}"
    return None


def confirm_password(value: Any, original_password: Any) -> Optional[str]:
    if not value:
        return None
    if value != original_password:
        return "Passwords do not match"
    return None


def phone(value: Any) -> Optional[str]:
    if not value:
        return None
    if not PHONE_REGEX.match(PHONE_SEPARATORS.sub("", str(value))):
        return "Please enter a valid phone number"
    return None


def name(value: Any) -> Optional[str]:
    if not value:
        return None
    if len(value) < 2:
        return "Name must be at least 2 characters long"
    if not NAME_REGEX.match(value):
        return "Name can only contain letters, spaces, hyphens, apostrophes, and periods"
    return None


def url(value: Any) -> Optional[str]:
    if not value:
        return None
    parsed = urlparse(str(value))
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        return "Please enter a valid URL"
    return None


def min_length(length: int) -> RuleFunc:
    def rule(value: Any) -> Optional[str]:
        if not value:
            return None
        if len(value) < length:
            return f"Must be at least {length} characters long"
        return None
    return rule


def max_length(length: int) -> RuleFunc:
    def rule(value: Any) -> Optional[str]:
        if not value:
            return None
        if len(value) > length:
            return f"Must be no more than {length} characters long"
        return None
    return rule


def one_of(choices: Iterable[str], label: str = "Value") -> RuleFunc:
    allowed = list(choices)

    def rule(value: Any) -> Optional[str]:
        if not value:
            return None
        if value not in allowed:
            return f"{label} must be one of: {', '.join(allowed)}"
        return None
    return rule


def file(value: Any, max_size: int = DEFAULT_MAX_FILE_SIZE, allowed_types: Iterable[str] = ()) -> Optional[str]:
    """
    Size / MIME type check for an uploaded file.

    Accepts a dict with "size" and "type" keys or an object with `size` and
    `content_type` attributes (FastAPI UploadFile).
    """
    if not value:
        return None

    if isinstance(value, dict):
        size, content_type = value.get("size"), value.get("type")
    else:
        size, content_type = getattr(value, "size", None), getattr(value, "content_type", None)

    if size is not None and size > max_size:
        return f"File size must be less than {round(max_size / 1024 / 1024)}MB"

    allowed_types = list(allowed_types)
    if allowed_types and content_type not in allowed_types:
        return f"File type must be one of: {', '.join(allowed_types)}"

    return None


class _ValidationRules:
    """Namespace mirroring the rule functions above."""
    required = staticmethod(required)
    email = staticmethod(email)
    password = staticmethod(password)
    confirm_password = staticmethod(confirm_password)
    phone = staticmethod(phone)
    name = staticmethod(name)
    url = staticmethod(url)
    min_length = staticmethod(min_length)
    max_length = staticmethod(max_length)
    one_of = staticmethod(one_of)
    file = staticmethod(file)


validation_rules = _ValidationRules()


# ============================================================
# ENGINE
# ============================================================

class FormValidator:
    """Ordered rule chains keyed by field name."""

    def __init__(self):
        self.fields: Dict[str, List[Any]] = {}
        self.errors: Dict[str, str] = {}

    def field(self, field_name: str, *rules) -> "FormValidator":
        """Register the rule chain for a field (replaces any previous chain)."""
        self.fields[field_name] = list(rules)
        return self

    @staticmethod
    def _run_chain(rules: Iterable[Any], value: Any) -> Optional[str]:
        for rule in rules:
            if isinstance(rule, Rule):
                error = rule.validator(value, *rule.params)
            else:
                error = rule(value)
            if error:
                return error
        return None

    def validate(self, data: Dict[str, Any]) -> bool:
        """Run every chain against data; True when no field has an error."""
        self.errors = {}

        for field_name, rules in self.fields.items():
            error = self._run_chain(rules, data.get(field_name))
            if error:
                self.errors[field_name] = error

        return self.is_valid()

    def validate_field(self, field_name: str, value: Any) -> bool:
        """Re-check a single field and update its entry in the error map."""
        error = self._run_chain(self.fields.get(field_name, []), value)
        if error:
            self.errors[field_name] = error
        else:
            self.errors.pop(field_name, None)
        return error is None

    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def get_errors(self) -> Dict[str, str]:
        return self.errors

    def get_field_error(self, field_name: str) -> Optional[str]:
        return self.errors.get(field_name)

    def clear_errors(self):
        self.errors = {}

    def clear_field_error(self, field_name: str):
        self.errors.pop(field_name, None)


def raise_for_errors(validator: FormValidator, data: Dict[str, Any], fields: Iterable[str] = None):
    """
    Validate and turn failures into a 400 with the field -> message map.

    With `fields`, only those chains run (partial updates re-check just the
    values they change).
    """
    if fields is None:
        valid = validator.validate(data)
    else:
        validator.clear_errors()
        for field_name in fields:
            if field_name in validator.fields:
                validator.validate_field(field_name, data.get(field_name))
        valid = validator.is_valid()

    if not valid:
        raise HTTPException(
            status_code=400,
            detail={"message": "Validation failed", "errors": validator.get_errors()}
        )


# ============================================================
# PRE-DEFINED VALIDATORS
# ============================================================

EMPLOYMENT_TYPES = ["full-time", "part-time", "contract", "internship", "freelance"]
REMOTE_TYPES = ["fully-remote", "hybrid", "on-site"]
CURRENCIES = ["INR", "USD", "EUR", "GBP"]


def _terms_accepted(value: Any) -> Optional[str]:
    if not value:
        return "You must accept the terms and conditions"
    return None


def _salary_range(value: Any, salary_min: Any) -> Optional[str]:
    if value is None or salary_min is None:
        return None
    if value < salary_min:
        return "Maximum salary must be greater than or equal to minimum salary"
    return None


def _at_least_one_skill(value: Any) -> Optional[str]:
    if not value or not any(str(skill).strip() for skill in value):
        return "At least one skill is required"
    return None


def _resume_attachment(value: Any) -> Optional[str]:
    if not value:
        return "Resume is required"
    if isinstance(value, dict) and value.get("file"):
        return file(value["file"], max_size=DEFAULT_MAX_FILE_SIZE, allowed_types=["application/pdf"])
    return None


def create_login_validator() -> FormValidator:
    return (
        FormValidator()
        .field("email", required, email)
        .field("password", required)
    )


def create_signup_validator(require_terms: bool = True) -> FormValidator:
    validator = (
        FormValidator()
        .field("first_name", Rule(required, ("First name",)), name)
        .field("last_name", Rule(required, ("Last name",)), name)
        .field("email", Rule(required, ("Email",)), email)
        .field("password", Rule(required, ("Password",)), password)
        .field("phone", phone)
    )
    if require_terms:
        validator.field("terms_accepted", _terms_accepted)
    return validator


def create_password_change_validator(new_password: str) -> FormValidator:
    return (
        FormValidator()
        .field("new_password", required, password)
        .field("confirm_password", required, Rule(confirm_password, (new_password,)))
    )


def create_job_application_validator() -> FormValidator:
    return (
        FormValidator()
        .field("full_name", required, name)
        .field("email", required, email)
        .field("phone", phone)
        .field("resume", _resume_attachment)
        .field("cover_letter", max_length(1000))
    )


def create_profile_validator() -> FormValidator:
    return (
        FormValidator()
        .field("name", required, name)
        .field("email", required, email)
        .field("phone", phone)
        .field("title", required, min_length(2))
        .field("bio", max_length(500))
        .field("website", url)
    )


def create_job_posting_validator(salary_min: Any = None) -> FormValidator:
    """Server-side rules for creating a job; salary_min bounds salary_max."""
    return (
        FormValidator()
        .field("title", Rule(required, ("Job title",)), min_length(3), max_length(100))
        .field("description", Rule(required, ("Job description",)), min_length(50), max_length(2000))
        .field("employment_type", Rule(required, ("Employment type",)), one_of(EMPLOYMENT_TYPES, "Employment type"))
        .field("remote_type", one_of(REMOTE_TYPES, "Remote type"))
        .field("currency", one_of(CURRENCIES, "Currency"))
        .field("salary_max", Rule(_salary_range, (salary_min,)))
        .field("skills", _at_least_one_skill)
    )
