"""Generates OTP codes for the accounts of an AccountDb."""

import logging
from typing import Optional

from otp_provider.accounts import AccountDb, OtpType
from otp_provider.exceptions import NoAccountError
from otp_provider.hotp import (
    get_signing_oracle,
    generate_response_code,
    verify_response_code,
)
from otp_provider.totp import (
    DEFAULT_INTERVAL,
    TotpClock,
    TotpCounter,
    millis_to_seconds,
)


logger = logging.getLogger(__name__)

PIN_LENGTH = 6  # HOTP or TOTP


class OtpProvider:
    """
    HOTP/TOTP passcode source for one or more accounts.

    The registry is expected to make the HOTP increment-then-read atomic per
    account (AccountDb does). The provider itself keeps no state between
    calls.
    """

    def __init__(
        self,
        account_db: AccountDb,
        totp_clock: Optional[TotpClock] = None,
        interval: int = DEFAULT_INTERVAL,
    ):
        self.account_db = account_db
        self.totp_clock = totp_clock or TotpClock()
        self.totp_counter = TotpCounter(interval)

    def next_code(self, account_name: Optional[str]) -> str:
        """
        Return the next OTP code for an account.

        For HOTP accounts this advances the stored counter before the code is
        computed, so every call yields a code for a fresh counter value. TOTP
        codes repeat within one time step.

        Args:
            account_name: Name of a registered account.

        Returns:
            A 6-digit passcode.

        Raises:
            NoAccountError: If the name is None or unknown.
            InvalidSecretError: If the account secret is empty.
            DecodingError: If the secret is not valid base-32.
            CryptoInitError: If HMAC-SHA1 cannot be initialized.
        """
        otp_type = self._get_type(account_name)
        secret = self.account_db.get_secret(account_name)

        if otp_type is OtpType.TOTP:
            otp_state = self._current_time_step()
            logger.debug("TOTP time step for %s: %d", account_name, otp_state)
        else:
            otp_state = self.account_db.increment_and_get_counter(account_name)

        # The HOTP counter stays advanced even if the secret turns out to be bad.
        signer = get_signing_oracle(secret)
        return generate_response_code(signer, otp_state, PIN_LENGTH)

    def verify_code(self, account_name: Optional[str], code: str, window: int = 1) -> bool:
        """
        Check a submitted code without advancing any counter.

        TOTP codes are accepted for the current time step and ``window``
        steps on either side. HOTP codes are checked against the stored
        counter value, i.e. the last code returned by next_code().
        """
        otp_type = self._get_type(account_name)
        signer = get_signing_oracle(self.account_db.get_secret(account_name))

        if otp_type is OtpType.HOTP:
            counter = self.account_db.get_counter(account_name)
            return verify_response_code(signer, counter, code, PIN_LENGTH)

        current = self._current_time_step()
        for otp_state in range(max(current - window, 0), current + window + 1):
            if verify_response_code(signer, otp_state, code, PIN_LENGTH):
                logger.debug("Code for %s matched time step %d", account_name, otp_state)
                return True
        return False

    def _get_type(self, account_name: Optional[str]) -> OtpType:
        if account_name is None:
            raise NoAccountError("No account name")
        otp_type = self.account_db.get_type(account_name)
        if otp_type is None:
            raise NoAccountError(f"No account named {account_name!r}")
        return otp_type

    def _current_time_step(self) -> int:
        now = millis_to_seconds(self.totp_clock.current_time_millis())
        return self.totp_counter.value_at_time(now)
