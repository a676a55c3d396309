"""Exceptions raised while computing one-time passcodes."""


class OtpError(Exception):
    """Base class for every passcode generation failure."""


class DecodingError(OtpError, ValueError):
    """The secret is not valid base-32 text."""


class CryptoInitError(OtpError):
    """The HMAC primitive could not be initialized with the given key."""


class InvalidSecretError(OtpError):
    """The account secret is missing or empty."""


class NoAccountError(OtpError):
    """No account is registered under the requested name."""
