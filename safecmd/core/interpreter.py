"""Safe command interpreter: eval-like ergonomics without eval.

    interp = SafeCommandInterpreter(
        context={"calendar": cal, "Event": Event},
        constructors={"Event"},
        allowed_methods={"calendar": ["add_event", "get_events"]},
    )
    interp.execute('calendar.add_event({title: "Standup"})')

Only names reachable from the context can be addressed, only allow-listed
methods can be called on a scope that has an allow-list, and only listed
classes can be constructed. Nothing is ever passed to eval/exec.
"""

from collections.abc import Mapping
from types import MappingProxyType

from safecmd.core import safety
from safecmd.core.errors import ExecutionFailed, Forbidden, InvalidFormat, NotCallable, NotFound
from safecmd.core.parse import ConstructorCall, MethodCall, PropertyAccess, parse_command

_MISSING = object()


def _member(target, name):
    """Look up name on target (key for mappings, attribute otherwise).

    Returns _MISSING if absent. Private names are never resolved.
    """
    if name.startswith("_"):
        raise Forbidden(f"Access to '{name}' is not allowed")
    if isinstance(target, Mapping):
        return target.get(name, _MISSING)
    return getattr(target, name, _MISSING)


class SafeCommandInterpreter:
    """Executes one textual command at a time against a fixed context."""

    def __init__(self, context, constructors=(), allowed_methods=None):
        self.context = MappingProxyType(dict(context))
        self.constructors = frozenset(constructors)
        self.allowed_methods = MappingProxyType({
            scope: frozenset(names)
            for scope, names in (allowed_methods or {}).items()
        })

    def execute(self, text):
        """Validate, parse and dispatch text. Returns the command's result.

        Raises ExecutionFailed (with .cause set) on any failure.
        """
        try:
            command = safety.normalize(text)
            safety.validate(command)

            parsed = parse_command(command)
            if parsed is None:
                raise InvalidFormat("Invalid command format")

            if isinstance(parsed, MethodCall):
                return self.call_method(parsed)
            if isinstance(parsed, PropertyAccess):
                return self.get_property(parsed)
            if isinstance(parsed, ConstructorCall):
                return self.construct(parsed)
            raise InvalidFormat(f"Unsupported command type: {type(parsed).__name__}")
        except Exception as e:
            raise ExecutionFailed(e) from e

    def parse(self, text):
        """Classify text without executing it (safety screening still applies)."""
        command = safety.normalize(text)
        safety.validate(command)
        return parse_command(command)

    def is_allowed(self, scope, name):
        """True unless scope has an allow-list that doesn't include name."""
        allowed = self.allowed_methods.get(scope)
        return allowed is None or name in allowed

    # --- Dispatch ---

    def _root(self, name):
        target = self.context.get(name)
        if target is None:
            raise NotFound(f"Object '{name}' not found")
        return target

    def call_method(self, cmd):
        root = self._root(cmd.object)
        target = root
        if cmd.property:
            target = _member(root, cmd.property)
            if target is _MISSING:
                raise NotFound(f"Property '{cmd.property}' not found on {cmd.object}")
        if cmd.sub_property:
            target = _member(target, cmd.sub_property)
            if target is _MISSING:
                raise NotFound(f"Property '{cmd.sub_property}' not found on {cmd.property}")

        path = cmd.path()
        name = path[-1]
        if not callable(target):
            raise NotCallable(f"'{name}' is not a function")
        if isinstance(target, type):
            # classes are only built through `new`, which checks the constructor list
            raise Forbidden(f"Use 'new {name}(...)' to construct '{name}'")

        scope = path[-2] if len(path) > 1 else path[0]
        if not self.is_allowed(scope, name):
            raise Forbidden(f"Method '{name}' is not allowed")

        # getattr already bound methods to their owner
        return target(*cmd.args)

    def get_property(self, cmd):
        value = self._root(cmd.object)
        owner = cmd.object
        for name in (cmd.property, cmd.sub_property):
            if not name:
                break
            value = _member(value, name)
            if value is _MISSING:
                raise NotFound(f"Property '{name}' not found on {owner}")
            owner = name
        return value

    def construct(self, cmd):
        if cmd.cls not in self.constructors:
            raise Forbidden(f"Constructor '{cmd.cls}' is not allowed")
        cls = self.context.get(cmd.cls)
        if cls is None:
            raise NotFound(f"Class '{cmd.cls}' not found")
        if not callable(cls):
            raise NotCallable(f"'{cmd.cls}' is not a constructor")
        return cls(*cmd.args)

