"""Case-insensitive, unpadded base-32 codec for OTP secrets.

This differs slightly from RFC 4648. Encoding never adds ``=`` padding, and
decoding drops the last incomplete chunk instead of rejecting it. As a result
several strings decode to the same bytes: sixteen ``7`` characters and
seventeen ``7`` characters both yield ten ``0xFF`` bytes. Secrets provisioned
against that behaviour must keep decoding the same way, so the trailing bits
are ignored on purpose.
"""

from otp_provider.exceptions import DecodingError


ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"  # RFC 4648/3548
SEPARATOR = "-"

SHIFT = 5
MASK = len(ALPHABET) - 1

_CHAR_MAP = {char: index for index, char in enumerate(ALPHABET)}
_CHAR_MAP.update({char.lower(): index for char, index in list(_CHAR_MAP.items())})


def _normalize(encoded: str) -> str:
    encoded = encoded.strip().replace(SEPARATOR, "").replace(" ", "")
    return encoded.rstrip("=")


def decode(encoded: str) -> bytes:
    """
    Decode base-32 text into raw key bytes.

    Args:
        encoded: Base-32 text. Case, surrounding whitespace, ``-`` and space
            separators and trailing ``=`` padding are ignored.

    Returns:
        ``len(normalized) * 5 // 8`` bytes. Leftover bits that do not fill a
        whole byte are discarded.

    Raises:
        DecodingError: If a character is outside ``A-Z2-7``.
    """
    encoded = _normalize(encoded)
    if not encoded:
        return b""

    result = bytearray()
    buffer = 0
    bits_left = 0
    for char in encoded:
        try:
            value = _CHAR_MAP[char]
        except KeyError:
            raise DecodingError(f"Illegal character: {char}") from None
        buffer = (buffer << SHIFT) | (value & MASK)
        bits_left += SHIFT
        if bits_left >= 8:
            result.append((buffer >> (bits_left - 8)) & 0xFF)
            bits_left -= 8
            buffer &= (1 << bits_left) - 1

    # Leftover bits are ignored, see module docstring.
    return bytes(result)


def encode(data: bytes) -> str:
    """Encode bytes as upper-case base-32 without padding."""
    if not data:
        return ""

    chars = []
    buffer = 0
    bits_left = 0
    for byte in data:
        buffer = (buffer << 8) | byte
        bits_left += 8
        while bits_left >= SHIFT:
            chars.append(ALPHABET[(buffer >> (bits_left - SHIFT)) & MASK])
            bits_left -= SHIFT
        buffer &= (1 << bits_left) - 1

    if bits_left:
        chars.append(ALPHABET[(buffer << (SHIFT - bits_left)) & MASK])
    return "".join(chars)
