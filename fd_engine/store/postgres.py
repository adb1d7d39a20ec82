"""PostgreSQL account store (psycopg 3)."""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

import psycopg
from psycopg.rows import dict_row

from fd_engine.config import PostgresConfig
from fd_engine.exceptions import ConcurrentModificationError, ValidationError
from fd_engine.models import (
    Account,
    AccountHolder,
    AccountStatus,
    BalanceEntry,
    MaturityInstruction,
    RoleType,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS fd_accounts (
    account_id              BIGSERIAL PRIMARY KEY,
    account_number          VARCHAR(10) NOT NULL UNIQUE,
    account_name            VARCHAR(255) NOT NULL,
    product_code            VARCHAR(64) NOT NULL,
    status                  VARCHAR(32) NOT NULL,
    term_in_months          INTEGER NOT NULL,
    interest_rate           NUMERIC(9, 4) NOT NULL,
    principal_amount        NUMERIC(19, 4) NOT NULL CHECK (principal_amount > 0),
    maturity_amount         NUMERIC(19, 4) NOT NULL,
    effective_date          DATE NOT NULL,
    maturity_date           DATE NOT NULL CHECK (maturity_date >= effective_date),
    maturity_instruction    VARCHAR(64) NOT NULL,
    payout_account_number   VARCHAR(64),
    calc_id                 BIGINT,
    result_id               BIGINT,
    apy                     NUMERIC(9, 4),
    effective_rate          NUMERIC(9, 4),
    payout_freq             VARCHAR(32),
    payout_amount           NUMERIC(19, 4),
    category1_id            VARCHAR(64),
    category2_id            VARCHAR(64),
    tenure_value            INTEGER,
    tenure_unit             VARCHAR(16),
    currency                VARCHAR(8),
    interest_type           VARCHAR(32),
    compounding_frequency   VARCHAR(32),
    created_at              TIMESTAMP NOT NULL,
    updated_at              TIMESTAMP,
    closed_at               TIMESTAMP,
    version                 INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS fd_account_holders (
    holder_id               BIGSERIAL PRIMARY KEY,
    account_id              BIGINT NOT NULL REFERENCES fd_accounts (account_id),
    customer_id             VARCHAR(64) NOT NULL,
    role_type               VARCHAR(32) NOT NULL,
    ownership_percentage    NUMERIC(5, 2),
    UNIQUE (account_id, customer_id, role_type)
);

CREATE TABLE IF NOT EXISTS fd_transactions (
    transaction_id          BIGSERIAL PRIMARY KEY,
    transaction_reference   VARCHAR(64) NOT NULL UNIQUE,
    account_id              BIGINT NOT NULL REFERENCES fd_accounts (account_id),
    transaction_type        VARCHAR(32) NOT NULL,
    amount                  NUMERIC(19, 4) NOT NULL,
    transaction_date        TIMESTAMP NOT NULL,
    description             TEXT
);

CREATE TABLE IF NOT EXISTS fd_account_balances (
    account_number          VARCHAR(10) NOT NULL REFERENCES fd_accounts (account_number),
    balance_type            VARCHAR(64) NOT NULL,
    balance_amount          NUMERIC(19, 4) NOT NULL CHECK (balance_amount >= 0),
    is_active               BOOLEAN NOT NULL DEFAULT TRUE,
    created_at              TIMESTAMP NOT NULL,
    updated_at              TIMESTAMP,
    PRIMARY KEY (account_number, balance_type)
);

CREATE INDEX IF NOT EXISTS idx_fd_accounts_status ON fd_accounts (status);
CREATE INDEX IF NOT EXISTS idx_fd_holders_customer ON fd_account_holders (customer_id);
CREATE INDEX IF NOT EXISTS idx_fd_transactions_account_date
    ON fd_transactions (account_id, transaction_date);
"""

# Account columns written on insert/update, in table order
ACCOUNT_COLUMNS = (
    "account_number",
    "account_name",
    "product_code",
    "status",
    "term_in_months",
    "interest_rate",
    "principal_amount",
    "maturity_amount",
    "effective_date",
    "maturity_date",
    "maturity_instruction",
    "payout_account_number",
    "calc_id",
    "result_id",
    "apy",
    "effective_rate",
    "payout_freq",
    "payout_amount",
    "category1_id",
    "category2_id",
    "tenure_value",
    "tenure_unit",
    "currency",
    "interest_type",
    "compounding_frequency",
    "created_at",
    "updated_at",
    "closed_at",
)

_SELECT_ACCOUNT = "SELECT account_id, version, " + ", ".join(ACCOUNT_COLUMNS) + " FROM fd_accounts"


class PostgresAccountStore:
    """Account store backed by PostgreSQL.

    The connection runs in autocommit mode; :meth:`unit_of_work` opens an
    explicit transaction (a savepoint when nested) and
    :meth:`get_for_update` takes a row lock with ``SELECT ... FOR UPDATE``.
    """

    def __init__(self, config: PostgresConfig | str, connection: Any = None) -> None:
        """Initialize the store.

        Parameters
        ----------
        config : PostgresConfig | str
            Connection settings or a libpq connection string.
        connection : Any
            Existing psycopg connection to reuse (must use ``dict_row``).
        """
        conninfo = config.connection_string if isinstance(config, PostgresConfig) else config
        self.conn = connection or psycopg.connect(conninfo, autocommit=True, row_factory=dict_row)

    def create_schema(self) -> None:
        """Create tables and indexes if missing."""
        with self.conn.cursor() as cur:
            cur.execute(SCHEMA)
        logger.info("FD schema ensured")

    def close(self) -> None:
        self.conn.close()

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        with self.conn.transaction():
            yield

    # Accounts
    def exists(self, account_number: str) -> bool:
        with self.conn.cursor() as cur:
            cur.execute("SELECT 1 FROM fd_accounts WHERE account_number = %s", (account_number,))
            return cur.fetchone() is not None

    def get(self, account_number: str) -> Account | None:
        return self._fetch_one(f"{_SELECT_ACCOUNT} WHERE account_number = %s", (account_number,))

    def get_for_update(self, account_number: str) -> Account | None:
        return self._fetch_one(
            f"{_SELECT_ACCOUNT} WHERE account_number = %s FOR UPDATE", (account_number,)
        )

    def find_by_customer_id(self, customer_id: str) -> list[Account]:
        return self._fetch_all(
            f"{_SELECT_ACCOUNT} WHERE account_id IN "
            "(SELECT account_id FROM fd_account_holders WHERE customer_id = %s) "
            "ORDER BY account_id",
            (customer_id,),
        )

    def find_by_name(self, fragment: str) -> list[Account]:
        return self._fetch_all(
            f"{_SELECT_ACCOUNT} WHERE account_name ILIKE %s ORDER BY account_id",
            (f"%{fragment}%",),
        )

    def find_by_status(self, status: AccountStatus) -> list[Account]:
        return self._fetch_all(
            f"{_SELECT_ACCOUNT} WHERE status = %s ORDER BY account_id", (status.value,)
        )

    def all(self) -> list[Account]:
        return self._fetch_all(f"{_SELECT_ACCOUNT} ORDER BY account_id", ())

    def save(self, account: Account) -> Account:
        """Insert or update an account with an optimistic version check.

        Raises
        ------
        ConcurrentModificationError
            If the row's version no longer matches ``account.version``.
        """
        values = [self._column_value(account, c) for c in ACCOUNT_COLUMNS]
        with self.conn.transaction(), self.conn.cursor() as cur:
            if account.version == 0:
                placeholders = ", ".join(["%s"] * len(ACCOUNT_COLUMNS))
                cur.execute(
                    f"INSERT INTO fd_accounts ({', '.join(ACCOUNT_COLUMNS)}, version) "
                    f"VALUES ({placeholders}, 1) RETURNING account_id",
                    values,
                )
                account.account_id = cur.fetchone()["account_id"]
            else:
                assignments = ", ".join(f"{c} = %s" for c in ACCOUNT_COLUMNS[1:])
                cur.execute(
                    f"UPDATE fd_accounts SET {assignments}, version = version + 1 "
                    "WHERE account_number = %s AND version = %s",
                    [*values[1:], account.account_number, account.version],
                )
                if cur.rowcount == 0:
                    raise ConcurrentModificationError(
                        f"Account {account.account_number} was modified concurrently "
                        f"(expected version {account.version})"
                    )

            for holder in account.holders:
                cur.execute(
                    "INSERT INTO fd_account_holders "
                    "(account_id, customer_id, role_type, ownership_percentage) "
                    "VALUES (%s, %s, %s, %s) "
                    "ON CONFLICT (account_id, customer_id, role_type) DO NOTHING",
                    (account.account_id, holder.customer_id, holder.role_type.value,
                     holder.ownership_percentage),
                )
            for txn in account.transactions:
                cur.execute(
                    "INSERT INTO fd_transactions "
                    "(transaction_reference, account_id, transaction_type, amount, "
                    "transaction_date, description) VALUES (%s, %s, %s, %s, %s, %s) "
                    "ON CONFLICT (transaction_reference) DO NOTHING",
                    (txn.transaction_reference, account.account_id, txn.transaction_type.value,
                     txn.amount, txn.transaction_date, txn.description),
                )
        account.version += 1
        return account

    @staticmethod
    def _column_value(account: Account, column: str) -> Any:
        value = getattr(account, column)
        if isinstance(value, (AccountStatus, MaturityInstruction)):
            return value.value
        return value

    # Transactions
    def transactions_between(
        self, account_number: str, start: datetime, end: datetime
    ) -> list[Transaction]:
        with self.conn.cursor() as cur:
            cur.execute(
                "SELECT t.* FROM fd_transactions t "
                "JOIN fd_accounts a ON a.account_id = t.account_id "
                "WHERE a.account_number = %s AND t.transaction_date >= %s "
                "AND t.transaction_date < %s "
                "ORDER BY t.transaction_date DESC, t.transaction_id DESC",
                (account_number, start, end),
            )
            return [self._transaction_from_row(account_number, r) for r in cur.fetchall()]

    # Balances
    def balances(self, account_number: str) -> list[BalanceEntry]:
        with self.conn.cursor() as cur:
            cur.execute(
                "SELECT * FROM fd_account_balances WHERE account_number = %s ORDER BY created_at",
                (account_number,),
            )
            return [BalanceEntry(**row) for row in cur.fetchall()]

    def balance(self, account_number: str, balance_type: str) -> BalanceEntry | None:
        with self.conn.cursor() as cur:
            cur.execute(
                "SELECT * FROM fd_account_balances WHERE account_number = %s AND balance_type = %s",
                (account_number, balance_type),
            )
            row = cur.fetchone()
            return BalanceEntry(**row) if row else None

    def save_balance(self, entry: BalanceEntry) -> None:
        if entry.balance_amount < 0:
            raise ValidationError(
                f"Balance {entry.balance_type} of account {entry.account_number} cannot be negative"
            )
        with self.conn.cursor() as cur:
            cur.execute(
                "INSERT INTO fd_account_balances "
                "(account_number, balance_type, balance_amount, is_active, created_at, updated_at) "
                "VALUES (%s, %s, %s, %s, %s, %s) "
                "ON CONFLICT (account_number, balance_type) DO UPDATE SET "
                "balance_amount = EXCLUDED.balance_amount, is_active = EXCLUDED.is_active, "
                "updated_at = EXCLUDED.updated_at",
                (entry.account_number, entry.balance_type, entry.balance_amount,
                 entry.is_active, entry.created_at, entry.updated_at),
            )

    # Row mapping
    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        with self.conn.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        return self._account_from_row(row) if row else None

    def _fetch_all(self, query: str, params: tuple) -> list[Account]:
        with self.conn.cursor() as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        return [self._account_from_row(r) for r in rows]

    def _account_from_row(self, row: dict[str, Any]) -> Account:
        data = {c: row[c] for c in ACCOUNT_COLUMNS}
        data["status"] = AccountStatus(data["status"])
        data["maturity_instruction"] = MaturityInstruction(data["maturity_instruction"])
        account = Account(**data, account_id=row["account_id"], version=row["version"])

        with self.conn.cursor() as cur:
            cur.execute(
                "SELECT customer_id, role_type, ownership_percentage FROM fd_account_holders "
                "WHERE account_id = %s ORDER BY holder_id",
                (account.account_id,),
            )
            for h in cur.fetchall():
                account.add_holder(
                    AccountHolder(h["customer_id"], RoleType(h["role_type"]), h["ownership_percentage"])
                )
            cur.execute(
                "SELECT * FROM fd_transactions WHERE account_id = %s ORDER BY transaction_id",
                (account.account_id,),
            )
            # Stored amounts are already signed
            account.restore_transactions(
                self._transaction_from_row(account.account_number, t) for t in cur.fetchall()
            )
        return account

    @staticmethod
    def _transaction_from_row(account_number: str, row: dict[str, Any]) -> Transaction:
        return Transaction(
            account_number=account_number,
            transaction_reference=row["transaction_reference"],
            transaction_type=TransactionType(row["transaction_type"]),
            amount=row["amount"],
            transaction_date=row["transaction_date"],
            description=row["description"],
        )
