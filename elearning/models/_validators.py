"""
Shared helpers for declarative column validation
"""
import re

from elearning.exceptions import BadRequestError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


def require(value, required_msg: str, empty_msg: str):
    """Reject missing and blank values with the column's own messages"""
    if value is None:
        raise BadRequestError(required_msg)
    if isinstance(value, str) and not value.strip():
        raise BadRequestError(empty_msg)
    return value


def require_int(value, required_msg: str, empty_msg: str, type_msg: str) -> int:
    require(value, required_msg, empty_msg)
    if isinstance(value, bool):
        raise BadRequestError(type_msg)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequestError(type_msg)


def require_float(value, required_msg: str, empty_msg: str, type_msg: str) -> float:
    require(value, required_msg, empty_msg)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise BadRequestError(type_msg)
