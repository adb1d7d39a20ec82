"""Account store interface."""

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Protocol

from fd_engine.models import Account, AccountStatus, BalanceEntry, Transaction


class AccountStore(Protocol):
    """Persistence boundary for the account aggregate and its ledgers.

    Mutating operations run inside :meth:`unit_of_work`; if the block
    raises, nothing written inside it is kept. Loaded accounts are detached
    copies: changes become visible to other readers only through
    :meth:`save`.
    """

    def unit_of_work(self) -> AbstractContextManager[None]: ...

    def exists(self, account_number: str) -> bool: ...

    def get(self, account_number: str) -> Account | None: ...

    def get_for_update(self, account_number: str) -> Account | None: ...

    def find_by_customer_id(self, customer_id: str) -> list[Account]: ...

    def find_by_name(self, fragment: str) -> list[Account]: ...

    def find_by_status(self, status: AccountStatus) -> list[Account]: ...

    def all(self) -> list[Account]: ...

    def save(self, account: Account) -> Account: ...

    def transactions_between(
        self, account_number: str, start: datetime, end: datetime
    ) -> list[Transaction]: ...

    def balances(self, account_number: str) -> list[BalanceEntry]: ...

    def balance(self, account_number: str, balance_type: str) -> BalanceEntry | None: ...

    def save_balance(self, entry: BalanceEntry) -> None: ...


def newest_first(transactions: list[Transaction]) -> list[Transaction]:
    """Order by transaction date descending; same-instant postings latest-posted first."""
    indexed = sorted(enumerate(transactions), key=lambda p: (p[1].transaction_date, p[0]))
    return [t for _, t in reversed(indexed)]
