"""Interactive console around a SafeCommandInterpreter.

Adds what a person typing commands needs: history, completion, a deadline on
each command, readable results and friendly error messages. Every command is
appended to a compact request log, and history persists across sessions.
"""

import json
import threading
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path

from safecmd.core.values import UNDEFINED
from safecmd.report import CommandTimeout, ErrorReporter, user_message

_MAX_HISTORY = 100
_DEFAULT_TIMEOUT = 5.0  # seconds

# Request log and saved state live next to the safecmd package directory
_ROOT = Path(__file__).resolve().parent.parent
_LOG_PATH = _ROOT / "safecmd.log"
_DATA_DIR = _ROOT / "data"

DEFAULT_STATE_PATH = _DATA_DIR / "console_state.json"


class Console:
    def __init__(self, interpreter, history_size=_MAX_HISTORY, timeout=_DEFAULT_TIMEOUT,
                 state_path=None, reporter=None, log_path=_LOG_PATH):
        self.interpreter = interpreter
        self.history_size = history_size
        self.timeout = timeout
        self.state_path = Path(state_path) if state_path else None
        self.reporter = reporter or ErrorReporter()
        self.log_path = Path(log_path) if log_path else None

        self.history = []
        self._cursor = 0
        # shared by the stdin loop and the Telegram thread
        self._lock = threading.RLock()
        self._load()

    # --- Execution ---

    def execute(self, text, source="[console]"):
        """Run one command.

        Returns:
            (ok, output): ok is False on failure, output is the formatted
            result or the user-facing error message. Blank input returns
            (True, None) and is not recorded.
        """
        if not text or not text.strip():
            return True, None

        self.add_to_history(text)
        try:
            result = self.run_with_timeout(text)
        except Exception as e:
            self.reporter.record(e, command=text, source=source)
            message = user_message(e)
            self._log_request(text, f"error: {message}", source)
            self._save()
            return False, message

        output = format_result(result)
        self._log_request(text, output.splitlines()[0] if output else "", source)
        self._save()
        return True, output

    def run_with_timeout(self, text, timeout=None):
        """Execute text on a worker thread, giving up after timeout seconds.

        A command that overruns keeps running in the background; there is
        no way to stop a thread from the outside.
        """
        timeout = self.timeout if timeout is None else timeout
        outcome = {}

        def _run():
            try:
                outcome["result"] = self.interpreter.execute(text)
            except Exception as e:
                outcome["error"] = e

        t = threading.Thread(target=_run, daemon=True)
        t.start()
        t.join(timeout)
        if t.is_alive():
            raise CommandTimeout(f"Command timed out after {timeout:g}s")
        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("result")

    # --- History ---

    def add_to_history(self, text):
        text = text.strip()
        with self._lock:
            if not self.history or self.history[-1] != text:
                self.history.append(text)
                del self.history[:-self.history_size]
            self._cursor = len(self.history)

    def previous(self):
        """Step back through history. Returns the entry, or None at the start."""
        with self._lock:
            if not self.history:
                return None
            self._cursor = max(0, self._cursor - 1)
            return self.history[self._cursor]

    def next(self):
        """Step forward through history. Returns "" past the newest entry."""
        with self._lock:
            if self._cursor >= len(self.history) - 1:
                self._cursor = len(self.history)
                return ""
            self._cursor += 1
            return self.history[self._cursor]

    # --- Completion ---

    def completions(self):
        """Every command stem the interpreter would accept, sorted."""
        interp = self.interpreter
        options = set()
        for root in interp.context:
            if root in interp.constructors:
                options.add(f"new {root}(")
                continue
            target = interp.context[root]
            if isinstance(target, type):
                continue
            options.add(f"{root}(" if callable(target) else root)
            for name in interp.allowed_methods.get(root, ()):
                if _has_member(target, name):
                    options.add(f"{root}.{name}(")
            for scope, names in interp.allowed_methods.items():
                if scope == root or not _has_member(target, scope):
                    continue
                for name in names:
                    options.add(f"{root}.{scope}.{name}(")
        return sorted(options)

    def complete(self, prefix):
        """Completions starting with prefix."""
        return [c for c in self.completions() if c.startswith(prefix)]

    # --- Persistence ---

    def _save(self):
        if self.state_path is None:
            return
        with self._lock:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            data = {"history": list(self.history), "saved": datetime.now().isoformat()}
            tmp = self.state_path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data, indent=2) + "\n")
            tmp.replace(self.state_path)

    def _load(self):
        if self.state_path is None or not self.state_path.exists():
            return
        try:
            data = json.loads(self.state_path.read_text())
        except (json.JSONDecodeError, OSError):
            return
        history = data.get("history") if isinstance(data, dict) else None
        if isinstance(history, list):
            self.history = [h for h in history if isinstance(h, str)][-self.history_size:]
            self._cursor = len(self.history)

    def _log_request(self, text, outcome, source):
        """Append a compact 2-line entry to the request log."""
        if self.log_path is None:
            return
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            with self._lock, open(self.log_path, "a") as f:
                f.write(f"{ts} {source}  {text}\n  -> {outcome}\n")
        except OSError:
            pass


def _has_member(target, name):
    if name.startswith("_"):
        return False
    if isinstance(target, Mapping):
        return name in target
    return hasattr(target, name)


# --- Result formatting ---

def format_result(value):
    """Render a command result as text."""
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return json.dumps(_plain(value, set()), indent=2)


def _plain(value, seen):
    """Convert value to JSON-compatible data, marking cycles."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if value is UNDEFINED:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if callable(value) and not isinstance(value, type):
        return f"[Function: {getattr(value, '__name__', type(value).__name__)}]"
    if isinstance(value, type):
        return f"[Class: {value.__name__}]"

    if id(value) in seen:
        return "[Circular Reference]"
    seen = seen | {id(value)}

    if isinstance(value, dict):
        return {str(k): _plain(v, seen) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v, seen) for v in value]
    if hasattr(value, "to_dict"):
        return _plain(value.to_dict(), seen)
    if hasattr(value, "__dict__"):
        return {k: _plain(v, seen) for k, v in vars(value).items()
                if not k.startswith("_")}
    return str(value)
