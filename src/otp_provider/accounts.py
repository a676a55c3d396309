"""In-memory registry of OTP accounts."""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from otp_provider.exceptions import NoAccountError


logger = logging.getLogger(__name__)

MAX_COUNTER = (1 << 64) - 1


def check_counter(counter: int) -> None:
    """Reject counters that do not fit an unsigned 64-bit moving factor."""
    if not 0 <= counter <= MAX_COUNTER:
        raise ValueError(f"Counter out of range: {counter}")


class OtpType(Enum):
    """Types of secret keys."""

    TOTP = 0  # time based
    HOTP = 1  # counter based


@dataclass
class Account:
    name: str
    secret: str
    type: OtpType = OtpType.TOTP
    counter: int = 0
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def __post_init__(self):
        check_counter(self.counter)


class AccountDb:
    """
    A database of account names and their OTP secrets.

    Each account carries its own lock; counter updates for one account are
    atomic with respect to each other, while the registry lock only guards
    the name-to-account map.
    """

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()

    def add(self, account: Account) -> None:
        with self._lock:
            self._accounts[account.name] = account

    def update(
        self,
        name: str,
        secret: str,
        otp_type: OtpType,
        counter: int = 0,
        old_name: Optional[str] = None,
    ) -> Account:
        """
        Save a key, creating the account entry if necessary.

        Args:
            name: Account name. When editing, the new name.
            secret: The base-32 secret key.
            otp_type: HOTP or TOTP.
            counter: Counter value, only meaningful for HOTP.
            old_name: When editing, the original account name.

        Returns:
            The stored account.

        Raises:
            ValueError: If the counter does not fit in 64 unsigned bits.
        """
        check_counter(counter)
        with self._lock:
            account = self._accounts.pop(old_name, None) if old_name else None
            if account is None:
                account = self._accounts.get(name)
            if account is None:
                account = Account(name=name, secret=secret)

            with account.lock:
                account.name = name
                account.secret = secret
                account.type = otp_type
                account.counter = counter
            self._accounts[name] = account
            return account

    def delete(self, name: str) -> None:
        with self._lock:
            self._accounts.pop(name, None)

    def delete_all_data(self) -> None:
        with self._lock:
            self._accounts.clear()

    def name_exists(self, name: str) -> bool:
        with self._lock:
            return name in self._accounts

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._accounts)

    def _get_account(self, name: Optional[str]) -> Account:
        with self._lock:
            account = self._accounts.get(name) if name is not None else None
        if account is None:
            raise NoAccountError(f"No account named {name!r}")
        return account

    def get_secret(self, name: str) -> str:
        return self._get_account(name).secret

    def get_type(self, name: Optional[str]) -> Optional[OtpType]:
        """Return the account's OTP type, or None if there is no such account."""
        with self._lock:
            account = self._accounts.get(name) if name is not None else None
        return account.type if account is not None else None

    def get_counter(self, name: str) -> int:
        account = self._get_account(name)
        with account.lock:
            return account.counter

    def increment_counter(self, name: str) -> None:
        self.increment_and_get_counter(name)

    def increment_and_get_counter(self, name: str) -> int:
        """
        Advance the account's counter by one and return the new value.

        The increment and the read happen under the account lock, so two
        concurrent callers never see the same value.
        """
        account = self._get_account(name)
        with account.lock:
            if account.counter >= MAX_COUNTER:
                raise ValueError(f"Counter exhausted for {name!r}")
            account.counter += 1
            counter = account.counter
        logger.debug("Advanced counter for %s to %d", name, counter)
        return counter
