"""
Request payload validators.

Each helper either returns the cleaned value or raises ValidationError,
so route handlers never write anything for a rejected payload.
"""

import re
from decimal import Decimal, InvalidOperation

from campus_exchange.errors import ValidationError

EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$')
# ASCII digits only: str.isdigit() also accepts "²", which int() rejects
ASCII_INT_REGEX = re.compile(r'-?[0-9]+')

MIN_RATING = 1
MAX_RATING = 5

# Numeric(10, 2)
MAX_AMOUNT = Decimal('99999999.99')


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data, fields):
    """Raise ValidationError naming every field that is absent or blank."""
    missing = [f for f in fields if _is_blank(data.get(f))]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")


def optional_text(value, default=None):
    if _is_blank(value):
        return default
    return str(value).strip()


def parse_id(value, field):
    """Coerce a JSON id (number or numeric string) to a positive int."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive integer")
    if isinstance(value, str):
        value = value.strip()
        if not ASCII_INT_REGEX.fullmatch(value) or value.startswith("-"):
            raise ValidationError(f"{field} must be a positive integer")
        value = int(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{field} must be a positive integer")
    return value


def parse_amount(value, field):
    """Parse a positive monetary amount with at most two decimal places."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a positive number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field} must be a positive number")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} is too large")
    if amount != amount.quantize(Decimal('0.01')):
        raise ValidationError(f"{field} must have at most two decimal places")
    return amount


def parse_rating(value):
    """Ratings are whole numbers from 1 to 5."""
    if isinstance(value, bool):
        raise ValidationError("rating must be a whole number between 1 and 5")
    if isinstance(value, str):
        value = value.strip()
        if not ASCII_INT_REGEX.fullmatch(value):
            raise ValidationError("rating must be a whole number between 1 and 5")
        value = int(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError("rating must be a whole number between 1 and 5")
    return value


def normalize_email(value):
    email = str(value).strip().lower()
    if not EMAIL_REGEX.match(email):
        raise ValidationError('Invalid email format')
    return email


def json_body(req):
    """The request's JSON object, or {} when there is no body."""
    data = req.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data
