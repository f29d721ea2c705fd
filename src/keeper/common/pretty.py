"""Routines for pretty printing numbers and long strings."""

_PREFIXES = ["", "k", "M", "G", "T", "P", "E"]


def human_readable(value: int, unit: str = "B") -> str:
    """
    Format a quantity using binary (1024-based) prefixes.

    Args:
        value: Non-negative quantity, e.g. a byte count
        unit: Unit appended after the prefix

    Returns:
        String such as ``"1.500 kB"``; prefixes past exa are rendered as ``?``
    """
    divisor = 1024.0
    divs = 0
    scaled = float(value)
    while scaled >= divisor:
        scaled /= divisor
        divs += 1

    prefix = _PREFIXES[divs] if divs < len(_PREFIXES) else "?"
    return f"{scaled:.3f} {prefix}{unit}"


def collapse_middle(text: str, max_width: int) -> str:
    """
    Shorten ``text`` to at most ``max_width`` characters.

    Excess characters in the middle are replaced with an ellipsis, keeping
    both ends of e.g. a long path readable.

    Raises:
        ValueError: If max_width cannot hold the ellipsis
    """
    if len(text) <= max_width:
        return text
    if max_width < 3:
        raise ValueError(f"max_width must be at least 3, got {max_width}")

    keep = max_width - 3
    head = (keep + 1) // 2
    tail = keep - head
    return text[:head] + "..." + (text[-tail:] if tail else "")
