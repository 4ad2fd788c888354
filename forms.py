# Input validation helpers
import re

from errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6


def clean(value):
    """Return value stripped of surrounding whitespace, or '' for None."""
    if value is None:
        return ''
    return str(value).strip()


def validate_email(email):
    return bool(EMAIL_PATTERN.match(email or ''))


def validate_password(password):
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def require_fields(data, *fields, message="Missing required fields"):
    """Raise ValidationError unless every field is present and non-blank."""
    if not all(clean(data.get(field)) for field in fields):
        raise ValidationError(message)


def get_payload(request):
    """Request body as a dict, from JSON or form fields."""
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data
    return request.form.to_dict()
