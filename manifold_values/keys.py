"""Integer keys and the character+index symbol encoding.

A symbol packs an ASCII character in the top 8 bits of a 64-bit key and an
index in the remaining 56 bits, so ``symbol('x', 3)`` and GTSAM's
``gtsam.symbol('x', 3)`` produce the same integer.
"""
from typing import Callable, Union
import operator
import string

CHR_BITS = 8
INDEX_BITS = 64 - CHR_BITS
_INDEX_MASK = (1 << INDEX_BITS) - 1
_MAX_KEY = (1 << 64) - 1

KeyFormatter = Callable[[int], str]


def check_key(key) -> int:
    """Validate ``key`` and return it as a plain ``int`` (numpy integers accepted)."""
    if isinstance(key, bool):
        raise TypeError("Values keys must be integers, got bool")
    try:
        key = operator.index(key)
    except TypeError:
        raise TypeError(f"Values keys must be integers, got {type(key).__name__}") from None
    if key < 0 or key > _MAX_KEY:
        raise ValueError(f"Key {key} out of range for a 64-bit unsigned key")
    return key


def symbol(c: str, index: int) -> int:
    if not isinstance(c, str) or len(c) != 1 or ord(c) > 0xFF:
        raise ValueError(f"Symbol character must be a single 8-bit character, got {c!r}")
    if index < 0 or index > _INDEX_MASK:
        raise ValueError(f"Symbol index {index} does not fit in {INDEX_BITS} bits")
    return (ord(c) << INDEX_BITS) | int(index)


def symbol_chr(key: int) -> str:
    return chr((check_key(key) >> INDEX_BITS) & 0xFF)


def symbol_index(key: int) -> int:
    return check_key(key) & _INDEX_MASK


def is_symbol(key: int) -> bool:
    """True when the top byte holds a printable letter (heuristic used for display)."""
    c = symbol_chr(key)
    return c in string.ascii_letters


def format_key(key: int) -> str:
    if is_symbol(key):
        return f"{symbol_chr(key)}{symbol_index(key)}"
    return str(key)


def format_int(key: int) -> str:
    return str(key)


def normalize_key(key: Union[str, int]) -> int:
    """Map an int, a digit string or an ``"x12"``-style label to an integer key."""
    if isinstance(key, str):
        kid = key.strip()
        if kid.isdigit():
            return check_key(int(kid))
        if len(kid) >= 2 and kid[0] in string.ascii_letters and kid[1:].isdigit():
            return symbol(kid[0], int(kid[1:]))
        raise ValueError(f"Cannot interpret {key!r} as a key")
    return check_key(key)


def chr_filter(c: str) -> Callable[[int], bool]:
    """Key predicate selecting symbols whose character is ``c``."""
    code = ord(c)

    def _test(key: int) -> bool:
        return (key >> INDEX_BITS) & 0xFF == code

    return _test
