"""Entry point for `python -m safecmd`.

    python -m safecmd                 interactive console over the demo calendar
    python -m safecmd -parse TEXT     show how TEXT is classified, without running it
"""

import sys


def log(msg):
    print(msg, flush=True)


def _parse_cmd(text):
    """Classify a single input and print the result."""
    from safecmd.core import ConstructorCall, MethodCall, SafeCommandInterpreter
    from safecmd.demo import ALLOWED_METHODS, CONSTRUCTORS, build_context

    interp = SafeCommandInterpreter(build_context(), CONSTRUCTORS, ALLOWED_METHODS)
    print(f"> {text}")
    try:
        parsed = interp.parse(text)
    except Exception as e:
        print(f"error: {e}")
        return

    if parsed is None:
        print("shape: none")
        return

    print(f"shape: {type(parsed).__name__}")
    if isinstance(parsed, ConstructorCall):
        print(f"class: {parsed.cls}")
    else:
        print(f"path: {'.'.join(parsed.path())}")
    if isinstance(parsed, (MethodCall, ConstructorCall)):
        for i, arg in enumerate(parsed.args):
            print(f"arg{i}: {arg!r}")


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) >= 2 and argv[0] == "-parse":
        _parse_cmd(" ".join(argv[1:]))
        return

    from safecmd.console import DEFAULT_STATE_PATH, Console
    from safecmd.core import SafeCommandInterpreter
    from safecmd.demo import ALLOWED_METHODS, CONSTRUCTORS, build_context

    interp = SafeCommandInterpreter(build_context(), CONSTRUCTORS, ALLOWED_METHODS)
    console = Console(interp, state_path=DEFAULT_STATE_PATH)

    # Start Telegram bot (if a token is configured)
    try:
        from safecmd.telegram_bot import start_telegram
        start_telegram(console)
    except ImportError as e:
        log(f"Telegram bot unavailable: {e}")

    log('Console ready. Type "help()" for available commands, "?prefix" to complete.')
    while True:
        try:
            text = input("> ")
        except (EOFError, KeyboardInterrupt):
            log("\nShutting down.")
            break

        if text.startswith("?"):
            for option in console.complete(text[1:].strip()):
                log(f"  {option}")
            continue

        ok, output = console.execute(text)
        if output is not None:
            log(output if ok else f"! {output}")


if __name__ == "__main__" or not sys.argv[0]:
    main()
