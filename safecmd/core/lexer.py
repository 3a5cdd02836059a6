"""Split an argument list into its top-level arguments.

    >>> split_args("{a:1,b:2}, 'x,y', [1,2,3]")
    ['{a:1,b:2}', "'x,y'", '[1,2,3]']

Commas inside quotes or inside nested {}, [] or () never split.
"""

_OPENERS = "{[("
_CLOSERS = "}])"
_QUOTES = "\"'"


def is_well_nested(text):
    """False if a closing bracket appears with nothing open, ignoring quotes.

    Unclosed openers are allowed; they are the coercer's problem.
    """
    depth = 0
    quote = None
    for i, ch in enumerate(text):
        if quote is not None:
            if ch == quote and (i == 0 or text[i - 1] != "\\"):
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth < 0:
                return False
    return True


def split_args(text):
    """Return the raw (stripped) argument strings in text."""
    if not text.strip():
        return []

    args = []
    current = []
    depth = 0
    quote = None  # the quote char while inside a string

    for i, ch in enumerate(text):
        if quote is not None:
            if ch == quote and (i == 0 or text[i - 1] != "\\"):
                quote = None
            current.append(ch)
        elif ch in _QUOTES:
            quote = ch
            current.append(ch)
        elif ch in _OPENERS:
            depth += 1
            current.append(ch)
        elif ch in _CLOSERS:
            depth -= 1
            current.append(ch)
        elif ch == "," and depth == 0:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(ch)

    tail = "".join(current).strip()
    if tail:
        args.append(tail)
    return args
