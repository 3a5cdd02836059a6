from safecmd.core.errors import (
    CommandError, DecodeFailure, ExecutionFailed, Forbidden, InvalidFormat,
    NotCallable, NotFound, SecurityViolation,
)
from safecmd.core.interpreter import SafeCommandInterpreter
from safecmd.core.parse import ConstructorCall, MethodCall, PropertyAccess, parse_command
from safecmd.core.values import UNDEFINED
