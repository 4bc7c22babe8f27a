# budgly/utils/text_utils.py
import math
import re
from datetime import datetime
from typing import Optional

from budgly.core.exceptions import ValidationError
from budgly.core.models import TRANSACTION_TYPES

MIN_PASSWORD_LENGTH = 6

_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def parse_number(text: Optional[str]) -> float:
    """Reads a number typed by the user, accepting a comma as decimal separator."""
    if text is None or not str(text).strip():
        raise ValidationError("Please enter an amount")
    cleaned = str(text).strip().replace(",", ".")
    try:
        value = float(cleaned)
    except ValueError:
        raise ValidationError("Please enter a valid amount")
    if math.isnan(value) or math.isinf(value):
        raise ValidationError("Please enter a valid amount")
    return value


def parse_amount(text: Optional[str], allow_zero: bool = False) -> float:
    """Reads a money amount typed by the user.

    Ex: "50" -> 50.0, "12,50" -> 12.5, "R$ 7.25" and "-3" are rejected.
    """
    value = parse_number(text)
    if value < 0 or (value == 0 and not allow_zero):
        raise ValidationError("Please enter a valid amount")
    return value


def parse_month(text: Optional[str]) -> str:
    """Validates a "YYYY-MM" month key."""
    candidate = (text or "").strip()
    if not _MONTH_RE.match(candidate):
        raise ValidationError("Month must be YYYY-MM")
    try:
        datetime.strptime(candidate, "%Y-%m")
    except ValueError:
        raise ValidationError("Month must be YYYY-MM")
    return candidate


def parse_transaction_type(text: Optional[str]) -> str:
    value = (text or "").strip().lower()
    if value not in TRANSACTION_TYPES:
        raise ValidationError("Type must be 'income' or 'expense'")
    return value


def validate_login(email: Optional[str], password: Optional[str]) -> None:
    if not email or not password:
        raise ValidationError("Please fill in all fields")


def validate_registration(email: Optional[str], password: Optional[str], confirm_password: Optional[str]) -> None:
    if not email or not password or not confirm_password:
        raise ValidationError("Please fill in all fields")
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
