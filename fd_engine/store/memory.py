"""In-memory account store with unit-of-work rollback."""

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator

from fd_engine.exceptions import ConcurrentModificationError, ValidationError
from fd_engine.models import Account, AccountStatus, BalanceEntry, Transaction
from fd_engine.store.base import newest_first


@dataclass
class _UndoJournal:
    """Prior state of everything a unit of work has written; None means absent."""

    next_id: int
    accounts: dict[str, Account | None] = field(default_factory=dict)
    balances: dict[str, dict[str, BalanceEntry] | None] = field(default_factory=dict)
    customers: dict[str, list[str] | None] = field(default_factory=dict)


@dataclass
class InMemoryAccountStore:
    """In-memory store for accounts, holders, transactions and balances.

    Units of work are serialized by a re-entrant lock. The first write to an
    account inside a unit of work journals its prior entry and balances; an
    exception inside the block restores only the journaled entries.
    Accounts are stored and returned as deep copies.
    """

    accounts: dict[str, Account] = field(default_factory=dict)
    balances_by_account: dict[str, dict[str, BalanceEntry]] = field(default_factory=dict)

    # Relationship indexes
    _customer_accounts: dict[str, list[str]] = field(default_factory=dict)

    _next_id: int = 1
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _journal: _UndoJournal | None = field(default=None, repr=False)

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        """Run a block atomically against the store."""
        with self._lock:
            outermost = self._journal is None
            if outermost:
                self._journal = _UndoJournal(next_id=self._next_id)
            try:
                yield
            except BaseException:
                if outermost:
                    self._rollback(self._journal)
                raise
            finally:
                if outermost:
                    self._journal = None

    def _remember_account(self, account_number: str) -> None:
        journal = self._journal
        if journal is None or account_number in journal.accounts:
            return
        journal.accounts[account_number] = self.accounts.get(account_number)
        balances = self.balances_by_account.get(account_number)
        journal.balances[account_number] = dict(balances) if balances is not None else None

    def _remember_customer(self, customer_id: str) -> None:
        journal = self._journal
        if journal is None or customer_id in journal.customers:
            return
        numbers = self._customer_accounts.get(customer_id)
        journal.customers[customer_id] = list(numbers) if numbers is not None else None

    def _rollback(self, journal: _UndoJournal) -> None:
        for number, account in journal.accounts.items():
            if account is None:
                self.accounts.pop(number, None)
            else:
                self.accounts[number] = account
        for number, balances in journal.balances.items():
            if balances is None:
                self.balances_by_account.pop(number, None)
            else:
                self.balances_by_account[number] = balances
        for customer_id, numbers in journal.customers.items():
            if numbers is None:
                self._customer_accounts.pop(customer_id, None)
            else:
                self._customer_accounts[customer_id] = numbers
        self._next_id = journal.next_id

    # Accounts
    def exists(self, account_number: str) -> bool:
        return account_number in self.accounts

    def get(self, account_number: str) -> Account | None:
        with self._lock:
            account = self.accounts.get(account_number)
            return copy.deepcopy(account) if account is not None else None

    def get_for_update(self, account_number: str) -> Account | None:
        """Load an account for modification.

        Row locking is provided by the unit-of-work lock.
        """
        return self.get(account_number)

    def find_by_customer_id(self, customer_id: str) -> list[Account]:
        with self._lock:
            numbers = self._customer_accounts.get(customer_id, [])
            return [copy.deepcopy(self.accounts[n]) for n in numbers]

    def find_by_name(self, fragment: str) -> list[Account]:
        needle = fragment.casefold()
        with self._lock:
            return [
                copy.deepcopy(a) for a in self.accounts.values() if needle in a.account_name.casefold()
            ]

    def find_by_status(self, status: AccountStatus) -> list[Account]:
        with self._lock:
            return [copy.deepcopy(a) for a in self.accounts.values() if a.status == status]

    def all(self) -> list[Account]:
        with self._lock:
            return [copy.deepcopy(a) for a in self.accounts.values()]

    def save(self, account: Account) -> Account:
        """Insert or update an account aggregate.

        Raises
        ------
        ConcurrentModificationError
            If the stored version differs from the one the caller loaded.
        """
        with self._lock:
            stored = self.accounts.get(account.account_number)
            if stored is None:
                if account.version != 0:
                    raise ConcurrentModificationError(
                        f"Account {account.account_number} no longer exists"
                    )
                account.account_id = self._next_id
                self._next_id += 1
            elif stored.version != account.version:
                raise ConcurrentModificationError(
                    f"Account {account.account_number} was modified concurrently "
                    f"(expected version {account.version}, found {stored.version})"
                )
            else:
                self._check_immutable_fields(stored, account)

            self._remember_account(account.account_number)
            account.version += 1
            self.accounts[account.account_number] = copy.deepcopy(account)
            self._reindex_holders(account)
            return account

    @staticmethod
    def _check_immutable_fields(stored: Account, account: Account) -> None:
        if stored.account_id != account.account_id:
            raise ValidationError(f"Account {account.account_number} identity cannot change")
        stored_refs = [t.transaction_reference for t in stored.transactions]
        new_refs = [t.transaction_reference for t in account.transactions]
        if new_refs[: len(stored_refs)] != stored_refs:
            raise ValidationError(f"Ledger of account {account.account_number} is append-only")

    def _reindex_holders(self, account: Account) -> None:
        for customer_id in account.customer_ids:
            self._remember_customer(customer_id)
            numbers = self._customer_accounts.setdefault(customer_id, [])
            if account.account_number not in numbers:
                numbers.append(account.account_number)

    # Transactions
    def transactions_between(
        self, account_number: str, start: datetime, end: datetime
    ) -> list[Transaction]:
        """Transactions with ``start <= transaction_date < end``, newest first."""
        with self._lock:
            account = self.accounts.get(account_number)
            if account is None:
                return []
            selected = [t for t in account.transactions if start <= t.transaction_date < end]
            return newest_first(selected)

    # Balances
    def balances(self, account_number: str) -> list[BalanceEntry]:
        with self._lock:
            return [copy.deepcopy(b) for b in self.balances_by_account.get(account_number, {}).values()]

    def balance(self, account_number: str, balance_type: str) -> BalanceEntry | None:
        with self._lock:
            entry = self.balances_by_account.get(account_number, {}).get(balance_type)
            return copy.deepcopy(entry) if entry is not None else None

    def save_balance(self, entry: BalanceEntry) -> None:
        if entry.balance_amount < 0:
            raise ValidationError(
                f"Balance {entry.balance_type} of account {entry.account_number} cannot be negative"
            )
        with self._lock:
            if entry.account_number not in self.accounts:
                raise ValidationError(f"Account {entry.account_number} not found for balance entry")
            self._remember_account(entry.account_number)
            self.balances_by_account.setdefault(entry.account_number, {})[entry.balance_type] = (
                copy.deepcopy(entry)
            )

    def summary(self) -> dict[str, int]:
        """Return summary counts of stored entities."""
        return {
            "accounts": len(self.accounts),
            "holders": sum(len(a.holders) for a in self.accounts.values()),
            "transactions": sum(len(a.transactions) for a in self.accounts.values()),
            "balances": sum(len(b) for b in self.balances_by_account.values()),
        }
