"""Error reporting: keeps recent failures and turns them into user messages."""

import time
from collections import Counter, deque

from safecmd.core.errors import (
    DecodeFailure, ExecutionFailed, Forbidden, InvalidFormat, NotCallable,
    NotFound, SecurityViolation,
)

_MAX_ERRORS = 100


class CommandTimeout(Exception):
    """A command ran past the console's deadline."""


# Friendly prefixes, by failure kind
_MESSAGES = [
    (SecurityViolation, "This operation is not allowed for security reasons."),
    (InvalidFormat, "Invalid command syntax. Check parentheses and quotes."),
    (NotFound, "Command or object not found."),
    (Forbidden, "Security: not on the allow-list."),
    (NotCallable, "Type error. That is not something you can call."),
    (DecodeFailure, "Could not read a value. Check the literal you typed."),
    (CommandTimeout, "Operation timed out. Try a simpler command."),
    (TypeError, "Type error. Check that you're using the correct data types."),
    (ValueError, "Invalid input. Check the required parameters."),
]


def _log(msg):
    print(msg, flush=True)


def unwrap(error):
    """The underlying failure of an ExecutionFailed, else error itself."""
    if isinstance(error, ExecutionFailed):
        return error.cause
    return error


def user_message(error):
    """Return a message suitable for showing the person who typed the command."""
    cause = unwrap(error)
    for kind, text in _MESSAGES:
        if isinstance(cause, kind):
            return f"{text} ({cause})"
    return str(cause) or "An unexpected error occurred"


class ErrorReporter:
    """Bounded log of recent failures, with listeners."""

    def __init__(self, max_errors=_MAX_ERRORS):
        self._errors = deque(maxlen=max_errors)
        self._listeners = []

    @property
    def errors(self):
        return list(self._errors)

    def record(self, error, **context):
        """Store a record for error and notify listeners. Returns the record."""
        cause = unwrap(error)
        record = {
            "timestamp": time.time(),
            "message": str(error),
            "type": type(cause).__name__,
            "context": context,
        }
        self._errors.append(record)
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as e:
                _log(f"Error in error listener: {e}")
        return record

    def add_listener(self, callback):
        """Register callback(record). Returns a function that unregisters it."""
        self._listeners.append(callback)

        def remove():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return remove

    def clear(self):
        self._errors.clear()

    def stats(self):
        """Count of recorded errors per failure type."""
        return dict(Counter(r["type"] for r in self._errors))
