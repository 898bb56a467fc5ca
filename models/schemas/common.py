import re

from marshmallow import ValidationError

PASSWORD_MIN_LENGTH = 8
NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 50

_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def validate_password_strength(value: str) -> None:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValidationError("Password must be at least 8 characters long")
    if not _PASSWORD_RE.match(value):
        raise ValidationError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character"
        )


def validate_name(value: str) -> None:
    if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
        raise ValidationError("Name must be between 1 and 50 characters")
    if not _NAME_RE.match(value):
        raise ValidationError("Name can only contain letters, spaces, hyphens, and apostrophes")
