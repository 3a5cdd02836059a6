from safecmd.core import (
    DecodeFailure, ExecutionFailed, Forbidden, InvalidFormat, NotCallable, NotFound,
    SecurityViolation,
)
from safecmd.report import CommandTimeout, ErrorReporter, unwrap, user_message


def test_user_messages_by_kind():
    assert user_message(ExecutionFailed(SecurityViolation("eval"))).startswith(
        "This operation is not allowed for security reasons.")
    assert user_message(ExecutionFailed(InvalidFormat("bad"))).startswith("Invalid command syntax.")
    assert user_message(ExecutionFailed(NotFound("Object 'x' not found"))) == (
        "Command or object not found. (Object 'x' not found)")
    assert user_message(Forbidden("no")).startswith("Security:")
    assert user_message(NotCallable("no")).startswith("Type error.")
    assert user_message(DecodeFailure("no")).startswith("Could not read a value.")
    assert user_message(CommandTimeout("slow")).startswith("Operation timed out.")
    assert user_message(ExecutionFailed(TypeError("args"))).startswith("Type error.")
    assert user_message(ExecutionFailed(ValueError("bad view"))).startswith("Invalid input.")


def test_unknown_errors_use_their_message():
    assert user_message(ExecutionFailed(KeyError("x"))) == "'x'"
    assert user_message(RuntimeError()) == "An unexpected error occurred"


def test_unwrap():
    inner = NotFound("x")
    assert unwrap(ExecutionFailed(inner)) is inner
    assert unwrap(inner) is inner


def test_record_and_stats():
    reporter = ErrorReporter()
    record = reporter.record(ExecutionFailed(Forbidden("no")), command="calendar.x()")
    assert record["type"] == "Forbidden"
    assert record["message"] == "Command execution failed: no"
    assert record["context"] == {"command": "calendar.x()"}
    reporter.record(NotFound("a"))
    reporter.record(NotFound("b"))
    assert reporter.stats() == {"Forbidden": 1, "NotFound": 2}
    reporter.clear()
    assert reporter.errors == []


def test_bounded():
    reporter = ErrorReporter(max_errors=2)
    for i in range(5):
        reporter.record(NotFound(str(i)))
    assert [r["message"] for r in reporter.errors] == ["3", "4"]


def test_listeners(capsys):
    reporter = ErrorReporter()
    seen = []

    def broken(record):
        raise RuntimeError("listener broke")

    remove = reporter.add_listener(seen.append)
    reporter.add_listener(broken)
    reporter.record(NotFound("a"))
    assert len(seen) == 1
    assert "listener broke" in capsys.readouterr().out

    remove()
    reporter.record(NotFound("b"))
    assert len(seen) == 1
