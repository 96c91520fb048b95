"""Digit substitution codec for the expiry field of a nonce."""

from __future__ import annotations

from .errors import FormatError, LengthError

SYMBOLS = ("a", "b", "c", "d", "$", "f", "g", "h", ".", "j")

_ENCODE = {str(digit): symbol for digit, symbol in enumerate(SYMBOLS)}
_DECODE = {symbol: digit for digit, symbol in _ENCODE.items()}


def encode(digits: str) -> str:
    """Map each decimal digit of ``digits`` to its substitution symbol."""
    try:
        return "".join(_ENCODE[char] for char in digits)
    except KeyError as exc:
        raise FormatError(f"Cannot encode non-digit character {exc.args[0]!r}.") from None


def decode(symbols: str) -> str:
    """Map substitution symbols back to decimal digits."""
    try:
        return "".join(_DECODE[char] for char in symbols)
    except KeyError as exc:
        raise FormatError(f"Cannot decode unknown symbol {exc.args[0]!r}.") from None


def encode_time(timestamp: int, width: int) -> str:
    """Encode an epoch timestamp into a field of exactly ``width`` symbols.

    The timestamp is zero-padded to ``width`` decimal digits before
    substitution, so the field can be located by length alone.
    """
    if timestamp < 0:
        raise FormatError(f"Cannot encode negative timestamp {timestamp}.")
    digits = str(int(timestamp)).zfill(width)
    if len(digits) > width:
        raise FormatError(f"Timestamp {timestamp} does not fit a {width}-symbol time field.")
    return encode(digits)


def decode_time(field: str, width: int) -> int:
    """Decode a time field produced by :func:`encode_time`."""
    if len(field) != width:
        raise LengthError(f"Time field must be {width} symbols, got {len(field)}.")
    return int(decode(field))
