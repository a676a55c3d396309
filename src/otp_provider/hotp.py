"""RFC 4226 HOTP (HMAC-based One-Time Password) implementation."""

import hmac
from typing import Callable, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.hmac import HMAC

from otp_provider import base32
from otp_provider.exceptions import CryptoInitError, InvalidSecretError


DEFAULT_DIGITS = 6
MAX_DIGITS = 9

# Takes a message, returns its MAC under a fixed key.
Signer = Callable[[bytes], bytes]


def get_signing_oracle(secret: Union[str, bytes, None]) -> Signer:
    """
    Build an HMAC-SHA1 signer keyed with the given secret.

    Args:
        secret: Base32 text, or the raw key bytes.

    Returns:
        A function mapping data to its 20-byte HMAC-SHA1 digest.

    Raises:
        InvalidSecretError: If the secret is missing or empty.
        DecodingError: If the secret is not valid base-32 text.
        CryptoInitError: If HMAC-SHA1 is unavailable, or the key is rejected
            (including text such as "====" that decodes to no key bytes).
    """
    if not secret:
        raise InvalidSecretError("Null or empty secret")

    key = base32.decode(secret) if isinstance(secret, str) else secret
    if not key:
        raise CryptoInitError("Cryptography failure: empty key")

    try:
        template = HMAC(key, hashes.SHA1())
    except (UnsupportedAlgorithm, TypeError, ValueError) as e:
        raise CryptoInitError(f"Cryptography failure: {e}") from e

    def sign(data: bytes) -> bytes:
        # An HMAC context can only be finalized once, so sign on a copy.
        mac = template.copy()
        mac.update(data)
        return mac.finalize()

    return sign


def _check_arguments(moving_factor: int, digits: int) -> None:
    if not 0 <= moving_factor < 1 << 64:
        raise ValueError(f"Moving factor out of range: {moving_factor}")
    if not 1 <= digits <= MAX_DIGITS:
        raise ValueError(f"Unsupported passcode length: {digits}")


def truncate(digest: bytes) -> int:
    """Dynamic truncation (RFC 4226, Section 5.3) of an HMAC-SHA1 digest."""
    offset = digest[-1] & 0x0F
    return int.from_bytes(digest[offset : offset + 4], byteorder="big") & 0x7FFFFFFF


def generate_response_code(
    signer: Signer, moving_factor: int, digits: int = DEFAULT_DIGITS
) -> str:
    """
    Generate a passcode for a counter or time-step value.

    Args:
        signer: HMAC signer from get_signing_oracle().
        moving_factor: Unsigned 64-bit counter or time-step index.
        digits: Number of digits in the output code (default: 6).

    Returns:
        A zero-padded passcode string of exactly ``digits`` characters.

    Raises:
        ValueError: If the moving factor or digit count is out of range.
    """
    _check_arguments(moving_factor, digits)

    digest = signer(moving_factor.to_bytes(8, byteorder="big"))
    code = truncate(digest) % (10**digits)
    return f"{code:0{digits}d}"


def verify_response_code(
    signer: Signer, moving_factor: int, response: str, digits: int = DEFAULT_DIGITS
) -> bool:
    """Check a submitted passcode against the expected one in constant time."""
    expected = generate_response_code(signer, moving_factor, digits)
    return hmac.compare_digest(expected.encode("ascii"), response.strip().encode("utf-8"))


def generate_hotp(
    secret: Union[str, bytes], counter: int, digits: int = DEFAULT_DIGITS
) -> str:
    """
    Generate an HOTP code using RFC 4226.

    Args:
        secret: The HOTP secret as a Base32 string or raw bytes.
        counter: The moving counter value.
        digits: Number of digits in the output code (default: 6).

    Returns:
        A zero-padded HOTP code string.
    """
    return generate_response_code(get_signing_oracle(secret), counter, digits)
