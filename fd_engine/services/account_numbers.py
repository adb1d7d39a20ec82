"""Account numbers and transaction references."""

import logging
import random
import uuid

from fd_engine.exceptions import InvalidStateError, ValidationError
from fd_engine.store.base import AccountStore

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 100


def luhn_check_digit(payload: str) -> int:
    """Luhn-style check digit for ``payload``.

    Digits are weighted from the right starting with the last payload digit
    undoubled, then every other digit doubled (digit sums for results above 9).
    """
    if not payload.isdigit():
        raise ValidationError(f"Luhn payload must be numeric, got {payload!r}")
    total = 0
    double = False
    for ch in reversed(payload):
        n = int(ch)
        if double:
            n *= 2
            if n > 9:
                n = n % 10 + 1
        total += n
        double = not double
    return (total * 9) % 10


def is_valid_luhn(number: str) -> bool:
    if not number.isdigit() or len(number) < 2:
        return False
    return luhn_check_digit(number[:-1]) == int(number[-1])


class AccountNumberGenerator:
    """Produce 10-digit numbers: branch code, 6 random digits, Luhn digit.

    Candidates already present in the store are discarded and redrawn.
    """

    def __init__(
        self,
        store: AccountStore,
        branch_code: str = "101",
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.branch_code = branch_code
        self.rng = rng or random.Random()

    def candidate(self) -> str:
        payload = f"{self.branch_code}{self.rng.randint(100000, 999999)}"
        return f"{payload}{luhn_check_digit(payload)}"

    def generate(self) -> str:
        for attempt in range(1, MAX_ATTEMPTS + 1):
            number = self.candidate()
            if not self.store.exists(number):
                return number
            logger.debug("Account number %s already taken (attempt %d)", number, attempt)
        raise InvalidStateError(
            f"Could not find a free account number for branch {self.branch_code} "
            f"after {MAX_ATTEMPTS} attempts"
        )


def new_transaction_reference() -> str:
    return str(uuid.uuid4())
