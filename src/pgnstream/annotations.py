"""Numeric Annotation Glyph (NAG) decoding."""

from __future__ import annotations

from types import MappingProxyType

NAG_PREFIX = "$"

NAG_SYMBOLS = MappingProxyType(
    {
        "0": "",
        "1": "!",
        "2": "?",
        "3": "!!",
        "4": "??",
        "5": "!?",
        "6": "?!",
        "7": "(forced move)",
        "8": "(singular move)",
        "9": "(worst move)",
    }
)


def decode_nag(code: str) -> str:
    """Return the symbolic suffix for a NAG *code* (digits, without ``$``).

    Codes outside the table come back in their raw ``$<code>`` form.
    """
    key = code.strip()
    symbol = NAG_SYMBOLS.get(key)
    if symbol is None:
        return f"{NAG_PREFIX}{key}"
    return symbol
