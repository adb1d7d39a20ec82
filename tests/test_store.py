"""Tests for the account stores."""

from datetime import date, datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from fd_engine.config import PostgresConfig
from fd_engine.exceptions import ConcurrentModificationError, ValidationError
from fd_engine.models import (
    Account,
    AccountHolder,
    AccountStatus,
    BalanceEntry,
    RoleType,
    Transaction,
    TransactionType,
)
from fd_engine.store.base import newest_first
from fd_engine.store.memory import InMemoryAccountStore
from fd_engine.store.postgres import ACCOUNT_COLUMNS, SCHEMA, PostgresAccountStore

NOW = datetime(2023, 1, 1, 9, 30)


def new_account(number: str = "1011234567", name: str = "Asha Savings FD", owner: str = "cust-001") -> Account:
    account = Account(
        account_number=number,
        account_name=name,
        product_code="FD-STD",
        status=AccountStatus.ACTIVE,
        term_in_months=12,
        interest_rate=Decimal("7.50"),
        principal_amount=Decimal("100000.00"),
        maturity_amount=Decimal("107500.00"),
        effective_date=date(2023, 1, 1),
        maturity_date=date(2024, 1, 1),
        created_at=NOW,
    )
    account.add_holder(AccountHolder(owner, RoleType.OWNER, Decimal("100.00")))
    account.post_transaction(TransactionType.PRINCIPAL_DEPOSIT, Decimal("100000.00"), NOW, f"{number}-dep")
    return account


class TestNewestFirst:
    """Tests for ledger ordering."""

    def test_orders_by_date_descending_then_latest_posted(self) -> None:
        t1 = Transaction("a", "r1", TransactionType.PRINCIPAL_DEPOSIT, Decimal("1"), NOW)
        t2 = Transaction("a", "r2", TransactionType.PENALTY_DEBIT, Decimal("-1"), NOW + timedelta(days=1))
        t3 = Transaction("a", "r3", TransactionType.PREMATURE_WITHDRAWAL, Decimal("-1"), NOW + timedelta(days=1))

        ordered = newest_first([t1, t2, t3])

        assert [t.transaction_reference for t in ordered] == ["r3", "r2", "r1"]


class TestInMemoryAccountStore:
    """Tests for InMemoryAccountStore."""

    def test_save_new_account_assigns_id_and_version(self) -> None:
        store = InMemoryAccountStore()
        account = new_account()

        store.save(account)

        assert account.account_id == 1
        assert account.version == 1
        assert store.exists("1011234567")
        assert store.summary() == {"accounts": 1, "holders": 1, "transactions": 1, "balances": 0}

    def test_get_returns_detached_copy(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account())

        loaded = store.get("1011234567")
        loaded.post_transaction(TransactionType.INTEREST_ACCRUAL, Decimal("10"), NOW, "r-x")

        assert len(store.get("1011234567").transactions) == 1

    def test_get_missing_returns_none(self) -> None:
        assert InMemoryAccountStore().get("0000000000") is None

    def test_stale_version_rejected(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account())
        first = store.get_for_update("1011234567")
        second = store.get_for_update("1011234567")
        first.updated_at = NOW
        store.save(first)

        second.updated_at = NOW
        with pytest.raises(ConcurrentModificationError, match="modified concurrently"):
            store.save(second)

    def test_new_account_with_version_rejected(self) -> None:
        account = new_account()
        account.version = 3

        with pytest.raises(ConcurrentModificationError):
            InMemoryAccountStore().save(account)

    def test_ledger_is_append_only(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account())
        loaded = store.get("1011234567")
        loaded._transactions.clear()

        with pytest.raises(ValidationError, match="append-only"):
            store.save(loaded)

    def test_unit_of_work_rolls_back_on_error(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account())

        with pytest.raises(RuntimeError):
            with store.unit_of_work():
                account = store.get_for_update("1011234567")
                account.post_transaction(TransactionType.INTEREST_ACCRUAL, Decimal("10"), NOW, "r-acc")
                store.save(account)
                store.save(new_account("1019999995"))
                raise RuntimeError("crash mid-operation")

        assert len(store.get("1011234567").transactions) == 1
        assert store.get("1011234567").version == 1
        assert not store.exists("1019999995")

    def test_rollback_restores_touched_and_keeps_untouched(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account("1011111111", owner="cust-001"))
        store.save(new_account("1012222222", owner="cust-002"))
        store.save_balance(BalanceEntry("1011111111", "FD_PRINCIPAL", Decimal("100000.00"), NOW))
        store.save_balance(BalanceEntry("1012222222", "FD_PRINCIPAL", Decimal("100000.00"), NOW))

        with pytest.raises(RuntimeError):
            with store.unit_of_work():
                touched = store.get_for_update("1011111111")
                touched.add_holder(AccountHolder("cust-009", RoleType.NOMINEE))
                touched.post_transaction(TransactionType.INTEREST_ACCRUAL, Decimal("10"), NOW, "r-acc")
                store.save(touched)
                store.save(touched)
                store.save_balance(BalanceEntry("1011111111", "FD_PRINCIPAL", Decimal("1.00"), NOW))
                store.save_balance(BalanceEntry("1011111111", "FD_INTEREST", Decimal("10"), NOW))
                store.save(new_account("1013333333", owner="cust-002"))
                store.save_balance(BalanceEntry("1013333333", "FD_PRINCIPAL", Decimal("5"), NOW))
                raise RuntimeError("crash mid-operation")

        touched = store.get("1011111111")
        assert touched.version == 1
        assert len(touched.transactions) == 1
        assert touched.customer_ids == ["cust-001"]
        assert [b.balance_type for b in store.balances("1011111111")] == ["FD_PRINCIPAL"]
        assert store.balance("1011111111", "FD_PRINCIPAL").balance_amount == Decimal("100000.00")
        assert store.get("1012222222").version == 1
        assert store.balance("1012222222", "FD_PRINCIPAL").balance_amount == Decimal("100000.00")
        assert not store.exists("1013333333")
        assert store.balances("1013333333") == []
        assert store.find_by_customer_id("cust-009") == []
        assert [a.account_number for a in store.find_by_customer_id("cust-002")] == ["1012222222"]

        store.save(new_account("1014444444"))
        assert store.get("1014444444").account_id == 3

    def test_committed_unit_of_work_is_kept(self) -> None:
        store = InMemoryAccountStore()

        with store.unit_of_work():
            store.save(new_account())
            store.save_balance(BalanceEntry("1011234567", "FD_PRINCIPAL", Decimal("100000.00"), NOW))

        with pytest.raises(RuntimeError):
            with store.unit_of_work():
                store.save(new_account("1019999995"))
                raise RuntimeError("boom")

        assert store.exists("1011234567")
        assert store.balance("1011234567", "FD_PRINCIPAL") is not None
        assert not store.exists("1019999995")

    def test_nested_unit_of_work_rolls_back_to_outermost(self) -> None:
        store = InMemoryAccountStore()

        with pytest.raises(RuntimeError):
            with store.unit_of_work():
                store.save(new_account())
                with store.unit_of_work():
                    store.save(new_account("1019999995"))
                raise RuntimeError("boom")

        assert store.all() == []

    def test_find_by_customer_id(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account("1011111111", owner="cust-001"))
        store.save(new_account("1012222222", owner="cust-002"))
        joint = store.get("1012222222")
        joint.add_holder(AccountHolder("cust-001", RoleType.JOINT_HOLDER))
        store.save(joint)

        numbers = [a.account_number for a in store.find_by_customer_id("cust-001")]

        assert numbers == ["1011111111", "1012222222"]
        assert store.find_by_customer_id("cust-404") == []

    def test_find_by_name_is_case_insensitive_substring(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account("1011111111", name="Asha Savings FD"))
        store.save(new_account("1012222222", name="Retirement Corpus"))

        assert [a.account_number for a in store.find_by_name("savings")] == ["1011111111"]

    def test_find_by_status(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account("1011111111"))
        closed = new_account("1012222222")
        closed.transition_to(AccountStatus.MATURED, NOW)
        store.save(closed)

        assert [a.account_number for a in store.find_by_status(AccountStatus.ACTIVE)] == ["1011111111"]

    def test_transactions_between_is_half_open_newest_first(self) -> None:
        store = InMemoryAccountStore()
        account = new_account()
        account.post_transaction(TransactionType.INTEREST_ACCRUAL, Decimal("1"), datetime(2023, 2, 1), "feb")
        account.post_transaction(TransactionType.INTEREST_ACCRUAL, Decimal("1"), datetime(2023, 3, 1), "mar")
        store.save(account)

        selected = store.transactions_between("1011234567", datetime(2023, 1, 1), datetime(2023, 3, 1))

        assert [t.transaction_reference for t in selected] == ["feb", "1011234567-dep"]
        assert store.transactions_between("0000000000", datetime(2023, 1, 1), datetime(2024, 1, 1)) == []

    def test_save_balance_round_trip(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account())
        entry = BalanceEntry("1011234567", "FD_INTEREST", Decimal("10.5"), NOW)

        store.save_balance(entry)
        entry.balance_amount = Decimal("99")

        assert store.balance("1011234567", "FD_INTEREST").balance_amount == Decimal("10.5")
        assert [b.balance_type for b in store.balances("1011234567")] == ["FD_INTEREST"]
        assert store.balance("1011234567", "PENALTY") is None

    def test_save_balance_rejects_negative(self) -> None:
        store = InMemoryAccountStore()
        store.save(new_account())

        with pytest.raises(ValidationError, match="negative"):
            store.save_balance(BalanceEntry("1011234567", "FD_INTEREST", Decimal("-0.01"), NOW))

    def test_save_balance_rejects_unknown_account(self) -> None:
        with pytest.raises(ValidationError, match="not found"):
            InMemoryAccountStore().save_balance(BalanceEntry("0000000000", "FD_INTEREST", Decimal("1"), NOW))


def account_row(account: Account, account_id: int = 7, version: int = 1) -> dict:
    row = {c: getattr(account, c) for c in ACCOUNT_COLUMNS}
    row["status"] = account.status.value
    row["maturity_instruction"] = account.maturity_instruction.value
    row["account_id"] = account_id
    row["version"] = version
    return row


class TestPostgresAccountStore:
    """Tests for PostgresAccountStore with a mocked psycopg connection."""

    def _store(self) -> tuple[PostgresAccountStore, MagicMock, MagicMock]:
        conn = MagicMock()
        cursor = MagicMock()
        conn.cursor.return_value.__enter__.return_value = cursor
        return PostgresAccountStore("postgresql://localhost/fd", connection=conn), conn, cursor

    @patch("fd_engine.store.postgres.psycopg")
    def test_connects_with_config(self, mock_psycopg: MagicMock) -> None:
        config = PostgresConfig(host="db", database="fd")

        store = PostgresAccountStore(config)

        args, kwargs = mock_psycopg.connect.call_args
        assert args[0] == "postgresql://postgres:postgres@db:5432/fd"
        assert kwargs["autocommit"] is True
        assert store.conn is mock_psycopg.connect.return_value

    def test_create_schema(self) -> None:
        store, _, cursor = self._store()

        store.create_schema()

        cursor.execute.assert_called_once_with(SCHEMA)

    def test_unit_of_work_uses_transaction(self) -> None:
        store, conn, _ = self._store()

        with store.unit_of_work():
            pass

        conn.transaction.assert_called_once()
        conn.transaction.return_value.__enter__.assert_called_once()

    def test_exists(self) -> None:
        store, _, cursor = self._store()
        cursor.fetchone.return_value = {"?column?": 1}

        assert store.exists("1011234567")
        assert cursor.execute.call_args[0][1] == ("1011234567",)

    def test_get_for_update_locks_row(self) -> None:
        store, _, cursor = self._store()
        cursor.fetchone.return_value = None

        assert store.get_for_update("1011234567") is None
        assert cursor.execute.call_args[0][0].endswith("FOR UPDATE")

    def test_get_maps_row_with_children(self) -> None:
        store, _, cursor = self._store()
        source = new_account()
        cursor.fetchone.return_value = account_row(source)
        cursor.fetchall.side_effect = [
            [{"customer_id": "cust-001", "role_type": "OWNER", "ownership_percentage": Decimal("100.00")}],
            [
                {
                    "transaction_reference": "r1",
                    "transaction_type": "PRINCIPAL_DEPOSIT",
                    "amount": Decimal("100000.00"),
                    "transaction_date": NOW,
                    "description": None,
                },
                {
                    "transaction_reference": "r2",
                    "transaction_type": "PENALTY_DEBIT",
                    "amount": Decimal("-400.00"),
                    "transaction_date": NOW,
                    "description": "Penalty",
                },
            ],
        ]

        account = store.get("1011234567")

        assert account.account_id == 7
        assert account.version == 1
        assert account.status == AccountStatus.ACTIVE
        assert account.holders[0].role_type == RoleType.OWNER
        assert account.transactions[1].amount == Decimal("-400.00")
        assert account.ledger_balance() == Decimal("99600.00")

    def test_save_inserts_new_account(self) -> None:
        store, _, cursor = self._store()
        cursor.fetchone.return_value = {"account_id": 42}
        account = new_account()

        store.save(account)

        assert account.account_id == 42
        assert account.version == 1
        statements = [c[0][0] for c in cursor.execute.call_args_list]
        assert statements[0].startswith("INSERT INTO fd_accounts")
        assert any("fd_account_holders" in s for s in statements)
        assert any("fd_transactions" in s for s in statements)

    def test_save_updates_with_version_check(self) -> None:
        store, _, cursor = self._store()
        cursor.rowcount = 1
        account = new_account()
        account.account_id, account.version = 42, 3

        store.save(account)

        sql, params = cursor.execute.call_args_list[0][0]
        assert "version = version + 1" in sql
        assert params[-2:] == ["1011234567", 3]
        assert account.version == 4

    def test_save_stale_version_raises(self) -> None:
        store, _, cursor = self._store()
        cursor.rowcount = 0
        account = new_account()
        account.account_id, account.version = 42, 3

        with pytest.raises(ConcurrentModificationError):
            store.save(account)

        assert account.version == 3

    def test_save_balance_upserts(self) -> None:
        store, _, cursor = self._store()

        store.save_balance(BalanceEntry("1011234567", "FD_INTEREST", Decimal("1875.0000"), NOW))

        sql = cursor.execute.call_args[0][0]
        assert "ON CONFLICT (account_number, balance_type) DO UPDATE" in sql

    def test_save_balance_rejects_negative(self) -> None:
        store, _, cursor = self._store()

        with pytest.raises(ValidationError):
            store.save_balance(BalanceEntry("1011234567", "PENALTY", Decimal("-1"), NOW))

        cursor.execute.assert_not_called()

    def test_balances_maps_rows(self) -> None:
        store, _, cursor = self._store()
        cursor.fetchall.return_value = [
            {
                "account_number": "1011234567",
                "balance_type": "FD_PRINCIPAL",
                "balance_amount": Decimal("100000.00"),
                "is_active": True,
                "created_at": NOW,
                "updated_at": None,
            }
        ]

        entries = store.balances("1011234567")

        assert entries[0].balance_amount == Decimal("100000.00")

    def test_transactions_between_orders_newest_first(self) -> None:
        store, _, cursor = self._store()
        cursor.fetchall.return_value = []

        store.transactions_between("1011234567", NOW, NOW + timedelta(days=1))

        sql = cursor.execute.call_args[0][0]
        assert "ORDER BY t.transaction_date DESC, t.transaction_id DESC" in sql

    def test_close(self) -> None:
        store, conn, _ = self._store()

        store.close()

        conn.close.assert_called_once()
