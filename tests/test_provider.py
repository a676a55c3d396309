"""Tests for OTP code generation per account."""

from unittest.mock import Mock

import pytest

from otp_provider.accounts import Account, AccountDb, OtpType
from otp_provider.exceptions import DecodingError, InvalidSecretError, NoAccountError
from otp_provider.provider import OtpProvider
from otp_provider.totp import TotpClock


# Base32 of "12345678901234567890", the RFC 4226 / RFC 6238 SHA1 key
SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

# RFC 6238 Appendix B SHA1 vectors, truncated to 6 digits
RFC6238_TEST_VECTORS = [
    # (unix_time, expected_code)
    (59, "287082"),
    (1111111109, "081804"),
    (1111111111, "050471"),
    (1234567890, "005924"),
    (2000000000, "279037"),
    (20000000000, "353130"),
]


def fixed_clock(millis: int) -> Mock:
    clock = Mock(spec=TotpClock)
    clock.current_time_millis.return_value = millis
    return clock


def make_provider(otp_type, secret=SECRET, counter=0, millis=0):
    db = AccountDb()
    db.add(Account(name="alice", secret=secret, type=otp_type, counter=counter))
    return OtpProvider(db, fixed_clock(millis)), db


def test_hotp_first_code_uses_counter_one():
    """Test that the counter is advanced before the first code is computed."""
    provider, db = make_provider(OtpType.HOTP)

    assert provider.next_code("alice") == "287082"
    assert db.get_counter("alice") == 1


def test_hotp_rejects_out_of_range_counter():
    """Test that stored counters must fit 64 unsigned bits."""
    with pytest.raises(ValueError, match="Counter out of range"):
        make_provider(OtpType.HOTP, counter=-5)


def test_hotp_counter_exhausted():
    """Test that the counter cannot be advanced past 2**64 - 1."""
    provider, db = make_provider(OtpType.HOTP, counter=2**64 - 1)

    with pytest.raises(ValueError, match="Counter exhausted"):
        provider.next_code("alice")
    assert db.get_counter("alice") == 2**64 - 1


def test_hotp_counter_monotonic():
    """Test that successive codes advance the counter by one each call."""
    provider, db = make_provider(OtpType.HOTP)

    codes = []
    for expected_counter in range(1, 6):
        codes.append(provider.next_code("alice"))
        assert db.get_counter("alice") == expected_counter

    assert codes == ["287082", "359152", "969429", "338314", "254676"]


@pytest.mark.parametrize("unix_time,expected_code", RFC6238_TEST_VECTORS)
def test_totp_rfc6238_vectors(unix_time, expected_code):
    """Test TOTP generation against RFC 6238 test vectors."""
    provider, _ = make_provider(OtpType.TOTP, millis=unix_time * 1000)
    assert provider.next_code("alice") == expected_code


def test_totp_repeats_within_interval():
    """Test that TOTP codes are stable inside one step and change at its end."""
    clock = fixed_clock(0)
    db = AccountDb()
    db.add(Account(name="alice", secret=SECRET, type=OtpType.TOTP))
    provider = OtpProvider(db, clock)

    clock.current_time_millis.return_value = 0
    first = provider.next_code("alice")
    clock.current_time_millis.return_value = 29_999
    assert provider.next_code("alice") == first
    clock.current_time_millis.return_value = 30_000
    assert provider.next_code("alice") != first

    # TOTP never touches the stored counter
    assert db.get_counter("alice") == 0


def test_totp_custom_interval():
    """Test a provider built with a non-default interval."""
    db = AccountDb()
    db.add(Account(name="alice", secret=SECRET, type=OtpType.TOTP))
    provider = OtpProvider(db, fixed_clock(60_000), interval=60)

    assert provider.next_code("alice") == "287082"


def test_next_code_no_account():
    """Test that missing or unknown account names raise NoAccountError."""
    provider, _ = make_provider(OtpType.TOTP)

    with pytest.raises(NoAccountError, match="No account name"):
        provider.next_code(None)
    with pytest.raises(NoAccountError, match="bob"):
        provider.next_code("bob")


@pytest.mark.parametrize("otp_type", [OtpType.TOTP, OtpType.HOTP])
def test_next_code_empty_secret(otp_type):
    """Test that an empty secret raises InvalidSecretError."""
    provider, _ = make_provider(otp_type, secret="")

    with pytest.raises(InvalidSecretError, match="Null or empty secret"):
        provider.next_code("alice")


def test_next_code_bad_secret_still_advances_counter():
    """Test that the HOTP counter is advanced before the secret is decoded."""
    provider, db = make_provider(OtpType.HOTP, secret="1NVALID!")

    with pytest.raises(DecodingError):
        provider.next_code("alice")
    assert db.get_counter("alice") == 1


def test_verify_totp_code_within_window():
    """Test accepting codes from adjacent time steps."""
    provider, _ = make_provider(OtpType.TOTP, millis=59_000)

    assert provider.verify_code("alice", "287082")  # current step
    assert provider.verify_code("alice", "755224")  # previous step
    assert provider.verify_code("alice", "359152")  # next step
    assert not provider.verify_code("alice", "969429")
    assert not provider.verify_code("alice", "755224", window=0)


def test_verify_hotp_code_does_not_advance():
    """Test verifying the last issued HOTP code."""
    provider, db = make_provider(OtpType.HOTP)
    code = provider.next_code("alice")

    assert provider.verify_code("alice", code)
    assert not provider.verify_code("alice", "755224")
    assert db.get_counter("alice") == 1


def test_default_clock():
    """Test that a provider without a clock uses the wall clock."""
    db = AccountDb()
    db.add(Account(name="alice", secret=SECRET, type=OtpType.TOTP))
    provider = OtpProvider(db)

    assert isinstance(provider.totp_clock, TotpClock)
    assert len(provider.next_code("alice")) == 6
