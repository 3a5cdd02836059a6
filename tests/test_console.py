import json
import threading
import time
from datetime import datetime

import pytest

from safecmd.console import Console, format_result
from safecmd.core import SafeCommandInterpreter, UNDEFINED
from safecmd.demo import ALLOWED_METHODS, CONSTRUCTORS, Event, build_context


def _slow():
    time.sleep(1)
    return "late"


@pytest.fixture
def interp():
    context = build_context()
    context["slow"] = _slow
    return SafeCommandInterpreter(context, CONSTRUCTORS, ALLOWED_METHODS)


@pytest.fixture
def console(interp, tmp_path):
    return Console(interp, log_path=tmp_path / "safecmd.log")


def test_execute_formats_result(console):
    assert console.execute("calendar.get_view()") == (True, "month")
    assert console.execute("calendar.state.can_undo()") == (True, "false")


def test_blank_input_ignored(console):
    assert console.execute("   ") == (True, None)
    assert console.history == []


def test_failure_returns_user_message(console):
    ok, message = console.execute("calendar.event_store.__dict__")
    assert not ok
    assert message.startswith("Security: not on the allow-list.")
    [record] = console.reporter.errors
    assert record["type"] == "Forbidden"
    assert record["context"]["command"] == "calendar.event_store.__dict__"


def test_security_violation_message(console):
    ok, message = console.execute("window.location")
    assert not ok
    assert "security reasons" in message


def test_timeout(interp, tmp_path):
    console = Console(interp, timeout=0.05, log_path=None)
    ok, message = console.execute("slow()")
    assert not ok
    assert "timed out" in message
    assert console.reporter.errors[0]["type"] == "CommandTimeout"


def test_history_collapses_repeats_and_is_bounded(interp):
    console = Console(interp, history_size=3, log_path=None)
    for text in ["calendar.view", "calendar.view", "calendar.timezone", "version", "calendar"]:
        console.add_to_history(text)
    assert console.history == ["calendar.timezone", "version", "calendar"]


def test_history_navigation(interp):
    console = Console(interp, log_path=None)
    assert console.previous() is None
    console.add_to_history("a")
    console.add_to_history("b")
    assert console.previous() == "b"
    assert console.previous() == "a"
    assert console.previous() == "a"
    assert console.next() == "b"
    assert console.next() == ""


def test_history_persists(interp, tmp_path):
    state = tmp_path / "data" / "console_state.json"
    first = Console(interp, state_path=state, log_path=None)
    first.execute("calendar.get_view()")
    assert json.loads(state.read_text())["history"] == ["calendar.get_view()"]

    second = Console(interp, state_path=state, log_path=None)
    assert second.history == ["calendar.get_view()"]
    assert second.previous() == "calendar.get_view()"


def test_corrupt_state_ignored(interp, tmp_path):
    state = tmp_path / "console_state.json"
    state.write_text("{not json")
    console = Console(interp, state_path=state, log_path=None)
    assert console.history == []


def test_request_log(console, tmp_path):
    console.execute("calendar.get_view()")
    console.execute("calendar.nope()", source="[test]")
    lines = (tmp_path / "safecmd.log").read_text().splitlines()
    assert len(lines) == 4
    assert lines[0].endswith("[console]  calendar.get_view()")
    assert lines[1] == "  -> month"
    assert "[test]  calendar.nope()" in lines[2]
    assert lines[3].startswith("  -> error: ")


def test_completions(console):
    options = console.complete("calendar.")
    assert "calendar.add_event(" in options
    assert "calendar.event_store.get_stats(" in options
    assert "calendar.state.undo(" in options
    assert all(o.startswith("calendar.") for o in options)
    assert console.complete("new ") == ["new Event("]
    assert "help(" in console.complete("he")


# --- Result formatting ---

def test_format_scalars():
    assert format_result(None) == "null"
    assert format_result(UNDEFINED) == "undefined"
    assert format_result(True) == "true"
    assert format_result(3) == "3"
    assert format_result("text") == "text"
    assert format_result(datetime(2024, 1, 2, 3, 4)) == "2024-01-02T03:04:00"


def test_format_structures():
    data = json.loads(format_result({"when": datetime(2024, 1, 1), "tags": ("a",), "f": _slow}))
    assert data == {"when": "2024-01-01T00:00:00", "tags": ["a"], "f": "[Function: _slow]"}


def test_format_circular():
    loop = []
    loop.append(loop)
    assert json.loads(format_result(loop)) == ["[Circular Reference]"]


def test_format_objects():
    event = Event({"id": "e1", "title": "Lunch", "start": datetime(2024, 1, 1, 12)})
    data = json.loads(format_result([event]))
    assert data[0]["id"] == "e1"
    assert data[0]["end"] == "2024-01-01T13:00:00"

    class Plain:
        def __init__(self):
            self.a = 1
            self._hidden = 2

    assert json.loads(format_result(Plain())) == {"a": 1}
    assert json.loads(format_result([Event])) == ["[Class: Event]"]


def test_failed_command_is_saved_to_history(interp, tmp_path):
    state = tmp_path / "console_state.json"
    console = Console(interp, state_path=state, log_path=None)
    ok, _ = console.execute("calendar.nope()")
    assert not ok
    assert json.loads(state.read_text())["history"] == ["calendar.nope()"]


def test_concurrent_execute_keeps_history_consistent(interp, tmp_path):
    state = tmp_path / "console_state.json"
    console = Console(interp, history_size=500, state_path=state,
                      log_path=tmp_path / "safecmd.log")
    errors = []

    def worker(tag):
        try:
            for i in range(25):
                console.execute(f'calendar.set_timezone("{tag}-{i}")', source=f"[{tag}]")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(tag,)) for tag in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(console.history) == 50
    assert sorted(console.history) == sorted(
        f'calendar.set_timezone("{tag}-{i}")' for tag in ("a", "b") for i in range(25))
    assert json.loads(state.read_text())["history"] == console.history
    log_lines = (tmp_path / "safecmd.log").read_text().splitlines()
    assert len(log_lines) == 100
    assert all(line.startswith("  -> ") for line in log_lines[1::2])


def test_unlisted_classes_are_not_offered(tmp_path):
    class Hidden:
        pass

    interp = SafeCommandInterpreter({"Hidden": Hidden, "ping": lambda: 1}, set(), {})
    console = Console(interp, log_path=None)
    assert console.completions() == ["ping("]
