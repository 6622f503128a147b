# backend/helpers.py
import re
from datetime import date, datetime

from flask import request

from .errors import ValidationError
from .models import TRANSACTION_TYPES

DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d", "%d/%m/%Y"]
MAX_AMOUNT = 10000000
MAX_DESCRIPTION_LENGTH = 1000
AMOUNT_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def get_json_body():
    """Request body as a dict; an absent or non-object body counts as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_fields(data, *fields, message=None):
    missing = [f for f in fields if not data.get(f)]
    if missing:
        raise ValidationError(message or f"Missing required fields: {', '.join(missing)}")


def parse_date(s):
    """Try multiple date formats, then ISO 8601 (date or datetime).

    Returns a ``date`` or None when the value is empty or unparseable.
    """
    if not s:
        return None
    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s
    s = str(s).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        return None


def require_date(value, field="date"):
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f"Invalid {field}: {value!r}")
    return parsed


def parse_amount(value):
    """Amount as a positive float; strings must be plain decimals such as "12.50".

    Amounts are stored as magnitudes; the sign comes from the transaction type,
    so zero and negative values are rejected here.
    """
    if isinstance(value, bool):
        raise ValidationError("Invalid amount format")
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        # currency symbol and thousands separators only; anything else is an error
        amount_str = re.sub(r'[$,\s]', '', str(value))
        if not AMOUNT_RE.match(amount_str):
            raise ValidationError(f"Invalid amount format: {value!r}")
        amount = float(amount_str)
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise ValidationError("Invalid amount format")
    if amount < 0:
        raise ValidationError("Amount must be positive; the sign is given by the type")
    if amount == 0:
        raise ValidationError("Amount cannot be zero")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Amount too large: {amount}")
    return amount


def parse_type(value):
    tx_type = str(value).strip().lower()
    if tx_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Invalid type: {value}. Expected income or expense")
    return tx_type


def parse_description(value):
    description = str(value).strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description too long: at most {MAX_DESCRIPTION_LENGTH} characters")
    return description
