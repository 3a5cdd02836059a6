"""Exceptions raised by the command interpreter.

Every stage raises a CommandError subclass. SafeCommandInterpreter.execute()
wraps whatever escaped into a single ExecutionFailed.
"""


class CommandError(Exception):
    """Base class for interpreter failures."""


class SecurityViolation(CommandError):
    """Raw text matched a denylist pattern."""

    def __init__(self, pattern):
        super().__init__(f"Unsafe pattern detected: {pattern}")
        self.pattern = pattern


class InvalidFormat(CommandError):
    """Text matched none of the recognized command shapes."""


class NotFound(CommandError):
    """A root, property or sub-property has nothing behind it."""


class Forbidden(CommandError):
    """Name resolved but is not permitted by an allow-list."""


class NotCallable(CommandError):
    """A method call resolved to something that can't be called."""


class DecodeFailure(CommandError):
    """A literal could not be decoded into a value."""


class ExecutionFailed(CommandError):
    """Outer wrapper for any failure during execute()."""

    def __init__(self, cause):
        super().__init__(f"Command execution failed: {cause}")
        self.cause = cause
