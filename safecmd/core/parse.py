"""Command shapes and the classifier that produces them.

A command is exactly one of:

    MethodCall       calendar.event_store.add({...})
    PropertyAccess   calendar.view
    ConstructorCall  new Event({...})

parse_command(text) returns one of these, or None when the text has no
recognized shape (deeper paths, indexing, chained calls, operators, ...).
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from safecmd.core.lexer import is_well_nested
from safecmd.core.values import coerce_args

_METHOD_RE = re.compile(r"^(\w+)(?:\.(\w+))?(?:\.(\w+))?\((.*)\)$", re.DOTALL | re.ASCII)
_PROPERTY_RE = re.compile(r"^(\w+)(?:\.(\w+))?(?:\.(\w+))?$", re.ASCII)
_CONSTRUCTOR_RE = re.compile(r"^new\s+(\w+)\((.*)\)$", re.DOTALL | re.ASCII)


@dataclass(frozen=True)
class MethodCall:
    object: str
    property: Optional[str] = None
    sub_property: Optional[str] = None
    args: tuple = field(default_factory=tuple)

    def path(self):
        """Dotted segments that are present, root first."""
        return tuple(p for p in (self.object, self.property, self.sub_property) if p)


@dataclass(frozen=True)
class PropertyAccess:
    object: str
    property: Optional[str] = None
    sub_property: Optional[str] = None

    def path(self):
        """Dotted segments that are present, root first."""
        return tuple(p for p in (self.object, self.property, self.sub_property) if p)


@dataclass(frozen=True)
class ConstructorCall:
    cls: str
    args: tuple = field(default_factory=tuple)


def parse_command(text):
    """Classify normalized command text. Returns a parsed command or None."""
    m = _METHOD_RE.match(text)
    if m and is_well_nested(m.group(4)):
        obj, prop, sub, args = m.groups()
        return MethodCall(obj, prop, sub, tuple(coerce_args(args)))

    m = _PROPERTY_RE.match(text)
    if m:
        obj, prop, sub = m.groups()
        return PropertyAccess(obj, prop, sub)

    m = _CONSTRUCTOR_RE.match(text)
    if m and is_well_nested(m.group(2)):
        cls, args = m.groups()
        return ConstructorCall(cls, tuple(coerce_args(args)))

    return None
