"""Base58 codec over arbitrary-precision integers.

Bytes are read as one big-endian unsigned integer and rendered in base 58
using the Bitcoin alphabet (no ``0``, ``O``, ``I`` or ``l``).  Leading zero
bytes carry no magnitude, so each one is written as a leading ``"1"``.
"""

from __future__ import annotations

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

_INDEX: dict[str, int] = {char: value for value, char in enumerate(ALPHABET)}


class InvalidCharacterError(ValueError):
    """Raised when decoding text containing a non-alphabet character."""

    def __init__(self, char: str, position: int) -> None:
        super().__init__(f"Invalid Base58 character {char!r} at position {position}")
        self.char = char
        self.position = position


def encode(data: bytes) -> str:
    """Encode *data* as Base58 text.  ``b""`` encodes to ``""``."""
    stripped = data.lstrip(b"\x00")
    leading_zeros = len(data) - len(stripped)

    number = int.from_bytes(stripped, "big")
    digits: list[str] = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(ALPHABET[remainder])

    return ALPHABET[0] * leading_zeros + "".join(reversed(digits))


def decode(text: str) -> bytes:
    """Decode Base58 *text* back to bytes.

    Raises
    ------
    InvalidCharacterError
        If any character is outside the Base58 alphabet.
    """
    number = 0
    for position, char in enumerate(text):
        try:
            value = _INDEX[char]
        except KeyError:
            raise InvalidCharacterError(char, position) from None
        number = number * 58 + value

    leading_ones = len(text) - len(text.lstrip(ALPHABET[0]))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\x00" * leading_ones + body
