"""Literal value coercion for command arguments.

Converts one raw argument string into a Python value:

    null / undefined          -> None / UNDEFINED
    true / false              -> bool
    "text" / 'text'           -> str
    42 / -1.5                 -> int / float
    new Date(...)             -> datetime
    {key: value, ...}         -> dict (sanitized)
    [1, 2, 3]                 -> list
    anything else             -> the raw text, as str
"""

import json
import re
from datetime import datetime, timedelta

from safecmd.core.errors import DecodeFailure
from safecmd.core.lexer import split_args
from safecmd.core.sanitize import sanitize_object


class _Undefined:
    """Singleton for an explicit `undefined` literal (distinct from null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "undefined"


UNDEFINED = _Undefined()

_NUMBER = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")
_NOW_OFFSET = re.compile(r"Date\.now\(\)\s*([+-])\s*([0-9]+)")
_BARE_KEY = re.compile(r"(\w+):", re.ASCII)
_WORD = re.compile(r"\w+", re.ASCII)

_DATE_FORMATS = [
    "%Y/%m/%d", "%m/%d/%Y",
    "%b %d %Y", "%B %d %Y", "%b %d, %Y", "%B %d, %Y",
    "%d %b %Y", "%d %B %Y",
]
_TIME_SUFFIXES = ["", " %H:%M", " %H:%M:%S"]

_KEYWORDS = {
    "null": None,
    "undefined": UNDEFINED,
    "true": True,
    "false": False,
}


def coerce(raw):
    """Convert a raw argument string into a value."""
    if raw in _KEYWORDS:
        return _KEYWORDS[raw]

    if _is_quoted(raw):
        return _unquote(raw)

    if _NUMBER.fullmatch(raw):
        return float(raw) if "." in raw else int(raw)

    if raw.startswith("new Date(") and raw.endswith(")"):
        return parse_date_expr(raw[len("new Date("):-1].strip())

    if raw.startswith("{"):
        return sanitize_object(_parse_object(raw))

    if raw.startswith("["):
        return _parse_array(raw)

    return raw


def coerce_args(text):
    """Split an argument list and coerce each argument."""
    return [coerce(arg) for arg in split_args(text)]


# --- Strings ---

def _is_quoted(s):
    return len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"')


def _unquote(s):
    return s[1:-1].replace('\\"', '"').replace("\\'", "'")


# --- Dates ---

def parse_date_expr(arg):
    """Evaluate the inside of a `new Date(...)` literal.

    Handles an empty argument (now), a quoted date string, epoch
    milliseconds, and `Date.now() + N` / `Date.now() - N` offsets in ms.
    """
    if arg == "":
        return datetime.now()
    if _is_quoted(arg):
        return parse_date_string(arg[1:-1])
    if _NUMBER.fullmatch(arg):
        try:
            return datetime.fromtimestamp(float(arg) / 1000)
        except (OverflowError, OSError, ValueError) as e:
            raise DecodeFailure(f"Invalid date: {arg} ({e})") from e
    m = _NOW_OFFSET.fullmatch(arg)
    if m:
        offset = timedelta(milliseconds=int(m.group(2)))
        if m.group(1) == "+":
            return datetime.now() + offset
        return datetime.now() - offset
    return parse_date_string(arg)


def parse_date_string(text):
    """Best-effort parse of a date string. Raises DecodeFailure if hopeless."""
    t = text.strip()
    iso = t[:-1] + "+00:00" if t.endswith("Z") else t
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        for suffix in _TIME_SUFFIXES:
            try:
                return datetime.strptime(t, fmt + suffix)
            except ValueError:
                continue

    raise DecodeFailure(f"Invalid date: {text!r}")


# --- Objects and arrays ---

def _parse_object(raw):
    try:
        value = json.loads(_BARE_KEY.sub(r'"\1":', raw).replace("'", '"'))
    except ValueError:
        value = None
    if isinstance(value, dict):
        return value
    return _parse_object_loose(raw)


def _parse_object_loose(raw):
    """Permissive single-level `key: value` parse for what JSON rejects."""
    content = raw[1:-1] if raw.endswith("}") else raw[1:]
    obj = {}
    for part in split_args(content):
        key, sep, val = part.partition(":")
        if not sep:
            continue
        key = key.strip().strip("\"'")
        if not _WORD.fullmatch(key):
            continue
        obj[key] = coerce(val.strip())
    return obj


def _parse_array(raw):
    try:
        value = json.loads(raw.replace("'", '"'))
    except ValueError:
        return []
    return value if isinstance(value, list) else []
