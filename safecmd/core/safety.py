"""Denylist screening of raw command text.

Runs before any parsing. A command that contains one of these shapes is
rejected outright, even when it would otherwise be a valid command.
"""

import re

from safecmd.core.errors import SecurityViolation

_DENY_PATTERNS = [
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"function\s*\(", re.IGNORECASE),
    re.compile(r"new\s+Function", re.IGNORECASE),
    re.compile(r"setTimeout", re.IGNORECASE),
    re.compile(r"setInterval", re.IGNORECASE),
    re.compile(r"document\.", re.IGNORECASE),
    re.compile(r"window\.", re.IGNORECASE),
    re.compile(r"localStorage", re.IGNORECASE),
    re.compile(r"sessionStorage", re.IGNORECASE),
    re.compile(r"fetch\s*\(", re.IGNORECASE),
    re.compile(r"XMLHttpRequest", re.IGNORECASE),
    re.compile(r"import\s*\(", re.IGNORECASE),
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),   # inline event handlers
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"\$\{"),                       # template interpolation
]


def normalize(text):
    """Trim whitespace and a single trailing semicolon."""
    text = text.strip()
    if text.endswith(";"):
        text = text[:-1]
    return text


def find_violation(text):
    """Return the first deny pattern that matches text, or None."""
    for pattern in _DENY_PATTERNS:
        if pattern.search(text):
            return pattern
    return None


def validate(text):
    """Raise SecurityViolation if text contains a denied pattern."""
    pattern = find_violation(normalize(text))
    if pattern is not None:
        raise SecurityViolation(pattern.pattern)


if __name__ == "__main__":
    tests = [
        'calendar.get_events()',
        'eval("1+1")',
        'calendar.add_event({title: "x", onclick = 1})',
        'calendar.add_event({title: "<script>alert(1)</script>"})',
        'window.location',
        'calendar.set_view(`${x}`)',
    ]
    for t in tests:
        p = find_violation(normalize(t))
        if p:
            print(f"  {t!r:60s} => blocked by {p.pattern}")
        else:
            print(f"  {t!r:60s} => ok")
