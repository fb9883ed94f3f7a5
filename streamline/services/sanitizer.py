import re
from typing import Any, Mapping

from streamline.core.errors import FormValidationError
from streamline.models.contact_message import CONTACT_FIELD_LIMITS, ContactMessage
from streamline.models.quote_request import QUOTE_FIELD_LIMITS, QuoteRequest

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

QUOTE_FIELDS_MISSING = "Fill all quote fields."
CONTACT_FIELDS_MISSING = "Fill all contact fields."
INVALID_EMAIL = "Enter a valid email."


def clean(value: Any, max_length: int = 2000) -> str:
    """Trim an untrusted value and cap its length. Non-strings become ''."""
    if not isinstance(value, str):
        return ""
    # strip again: the cut can land right after whitespace
    return value.strip()[:max_length].strip()


def is_valid_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def _clean_fields(payload: Mapping[str, Any], limits: Mapping[str, int]) -> dict:
    if not isinstance(payload, Mapping):
        payload = {}
    return {field: clean(payload.get(field), cap) for field, cap in limits.items()}


def sanitize_quote(payload: Mapping[str, Any]) -> QuoteRequest:
    fields = _clean_fields(payload, QUOTE_FIELD_LIMITS)
    if not all(fields.values()):
        raise FormValidationError(QUOTE_FIELDS_MISSING)
    return QuoteRequest(**fields)


def sanitize_contact(payload: Mapping[str, Any]) -> ContactMessage:
    fields = _clean_fields(payload, CONTACT_FIELD_LIMITS)
    if not all(fields.values()):
        raise FormValidationError(CONTACT_FIELDS_MISSING)
    if not is_valid_email(fields["email"]):
        raise FormValidationError(INVALID_EMAIL)
    return ContactMessage(**fields)
