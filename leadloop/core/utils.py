"""Shared utility functions for LeadLoop"""
import re
from datetime import datetime, timezone


def serialize_doc(doc: dict) -> dict:
    """Serialize a single MongoDB document for JSON response"""
    if doc is None:
        return None
    result = {k: v for k, v in doc.items() if k != '_id'}
    for key, value in result.items():
        if isinstance(value, datetime):
            result[key] = value.isoformat()
    return result


def serialize_docs(docs: list) -> list:
    """Serialize a list of MongoDB documents"""
    return [serialize_doc(doc) for doc in docs]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


_NON_DIGITS = re.compile(r'\D')


def normalize_phone(raw: str) -> str:
    """
    Normalize a user-entered phone number to E.164 (North America default).

    Accepts "2896819206", "1-289-681-9206", "(289) 681-9206". Input that
    already starts with "+" is trusted and only trimmed. Digit counts other
    than 10, or 11 with a leading 1, come back trimmed but otherwise
    untouched so the SMS provider can reject them.
    """
    if not raw:
        return raw

    trimmed = raw.strip()
    if trimmed.startswith('+'):
        return trimmed

    digits = _NON_DIGITS.sub('', trimmed)
    if len(digits) == 10:
        return '+1' + digits
    if len(digits) == 11 and digits.startswith('1'):
        return '+' + digits
    return trimmed


def phone_variants(raw: str) -> list[str]:
    """All stored spellings a phone number may have been saved under"""
    if not raw:
        return []
    trimmed = raw.strip()
    digits = _NON_DIGITS.sub('', trimmed)
    variants = [raw, trimmed, normalize_phone(trimmed)]
    if digits:
        variants += ['+' + digits, digits]
    if len(digits) >= 10:
        variants += ['+1' + digits[-10:], digits[-10:]]
    # Preserve order, drop duplicates
    return list(dict.fromkeys(v for v in variants if v))
