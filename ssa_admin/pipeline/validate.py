import re
from dataclasses import dataclass, field
from urllib.parse import urlparse

from ssa_admin import config

EMAIL_RE = re.compile(
    r"[a-zA-Z0-9]([a-zA-Z0-9._-]*[a-zA-Z0-9])?@[a-zA-Z0-9]([a-zA-Z0-9.-]*[a-zA-Z0-9])?\.[a-zA-Z]{2,}"
)


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: list = field(default_factory=list)

    def merge(self, other):
        """Fold another result into this one."""
        if not other.is_valid:
            self.is_valid = False
        self.errors.extend(other.errors)
        return self


def _ok():
    return ValidationResult(True, [])


def _fail(message):
    return ValidationResult(False, [message])


def validate_email(email):
    if not email or not email.strip():
        return _fail("Email address is required")
    if not EMAIL_RE.fullmatch(email) or ".." in email:
        return _fail("Please enter a valid email address")
    return _ok()


def validate_url(url):
    """URLs are optional; when present they need an http(s) scheme and a host."""
    if not url or not url.strip():
        return _ok()
    try:
        parsed = urlparse(url)
    except ValueError:
        return _fail("Please enter a valid URL")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return _fail("Please enter a valid URL")
    return _ok()


def validate_required(value, field_name):
    if value is None or (isinstance(value, str) and not value.strip()):
        return _fail(f"{field_name} is required")
    if not isinstance(value, (str, int, float)) and not value:
        return _fail(f"{field_name} is required")
    return _ok()


def validate_date_range(start_date, end_date):
    """Both dates are optional; when both are set the end may not precede the start."""
    if start_date and end_date and start_date > end_date:
        return _fail("End date must be after start date")
    return _ok()


def validate_status(status):
    if status not in config.STATUSES:
        return _fail(f"Status must be one of: {', '.join(config.STATUSES)}")
    return _ok()


def validate_difficulty(difficulty):
    if difficulty not in config.DIFFICULTIES:
        return _fail(f"Difficulty must be one of: {', '.join(config.DIFFICULTIES)}")
    return _ok()


def validate_number(value, field_name, minimum=None, maximum=None):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return _fail(f"{field_name} must be a valid number")
    if number != number:
        return _fail(f"{field_name} must be a valid number")

    errors = []
    if minimum is not None and number < minimum:
        errors.append(f"{field_name} must be at least {minimum}")
    if maximum is not None and number > maximum:
        errors.append(f"{field_name} must be at most {maximum}")
    return ValidationResult(not errors, errors)


def _label(field_name):
    return field_name.replace("_", " ").capitalize()


def validate_record(module, record):
    """Run every rule that applies to a record of the given module."""
    result = _ok()

    for field_name in module.required_fields:
        result.merge(validate_required(record.get(field_name), _label(field_name)))

    for field_name in module.url_fields:
        result.merge(validate_url(record.get(field_name) or ""))

    if record.get("status") is not None:
        result.merge(validate_status(record["status"]))

    if module.name == "events":
        result.merge(validate_date_range(record.get("start_date"), record.get("end_date")))

    if module.name == "routes":
        if record.get("difficulty"):
            result.merge(validate_difficulty(record["difficulty"]))
        if record.get("duration_minutes") is not None:
            result.merge(validate_number(record["duration_minutes"], "Duration minutes", minimum=0))

    return result
