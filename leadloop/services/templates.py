"""
Message templates for client-facing SMS.

Placeholders use double braces: {{name}}, {{business_name}}, {{booking_link}},
{{review_link}}. Older client templates written with single braces
({name}, {business}, {booking}) still render.
"""
import logging
import re
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Fields that always resolve, to "" when no value is supplied
COMMON_FIELDS = frozenset({
    "name",
    "business", "business_name",
    "booking", "booking_link",
    "review_link",
})

_ALIASES = {
    "business": "business_name",
    "booking": "booking_link",
}

# Double-brace alternative first so "{{name}}" is never read as "{" + "{name}" + "}"
_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}|\{(\w+)\}")


DEFAULT_LEAD_REPLY_WITH_BOOKING = (
    "Hey {{name}}, thanks for reaching out to {{business_name}}! "
    "You can book a time here: {{booking_link}}"
)
DEFAULT_LEAD_REPLY = (
    "Hey {{name}}, thanks for reaching out to {{business_name}}! "
    "We'll get back to you shortly."
)
DEFAULT_MISSED_CALL_WITH_BOOKING = (
    "Sorry we missed your call at {{business_name}}. "
    "You can book a time here: {{booking_link}}"
)
DEFAULT_MISSED_CALL = (
    "Sorry we missed your call at {{business_name}}. "
    "Reply to this text and we'll get back to you soon."
)
DEFAULT_REVIEW_REQUEST = (
    "Hi {{name}}, thanks for choosing {{business_name}}! "
    "It would mean a lot if you could leave us a quick review here: {{review_link}}"
)


def _lookup(fields: Mapping[str, Optional[str]], key: str):
    if key in fields:
        return fields[key]
    canonical = _ALIASES.get(key)
    if canonical and canonical in fields:
        return fields[canonical]
    # Reverse alias: template says business_name, caller passed business
    for alias, target in _ALIASES.items():
        if target == key and alias in fields:
            return fields[alias]
    return None


def render(template: str, fields: Mapping[str, Optional[str]]) -> str:
    """Substitute placeholders in template. Unknown placeholders are kept verbatim."""
    if not template:
        return ""

    def _substitute(match: re.Match) -> str:
        key = match.group(1) or match.group(2)
        value = _lookup(fields, key)
        if value is not None:
            return str(value)
        if key in COMMON_FIELDS:
            return ""
        return match.group(0)

    return _PLACEHOLDER.sub(_substitute, template)


def choose_template(custom: Optional[str], default: str) -> str:
    """Client template wins when present and non-blank"""
    if custom and custom.strip():
        return custom
    return default
