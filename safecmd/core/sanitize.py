"""Deep-clean decoded object literals.

Keys that look like runtime internals ("__...") or inline event handlers
("on...") are dropped, and angle brackets are stripped from string values so
markup can't ride along inside an object literal.
"""

import re

_DANGEROUS_PREFIXES = ("__", "on")
_ANGLE_BRACKETS = re.compile(r"[<>]")


def is_dangerous_key(key):
    return str(key).startswith(_DANGEROUS_PREFIXES)


def sanitize_string(value):
    return _ANGLE_BRACKETS.sub("", value)


def sanitize_object(value):
    """Return a cleaned copy of a dict; anything else is returned unchanged."""
    if not isinstance(value, dict):
        return value

    cleaned = {}
    for key, item in value.items():
        if is_dangerous_key(key):
            continue
        if isinstance(item, str):
            cleaned[key] = sanitize_string(item)
        elif isinstance(item, dict):
            cleaned[key] = sanitize_object(item)
        else:
            cleaned[key] = item
    return cleaned
