"""Initial balance seeding."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable

from fd_engine.models import Account, BalanceEntry, BalanceType, ProductConfig
from fd_engine.store.base import AccountStore

logger = logging.getLogger(__name__)

# Opening amount per balance type; types not listed start at zero
SEED_RULES: dict[str, Callable[[Account], Decimal]] = {
    BalanceType.FD_PRINCIPAL.value: lambda account: account.principal_amount,
}


def initial_amount(balance_type: str, account: Account) -> Decimal:
    rule = SEED_RULES.get(balance_type)
    return rule(account) if rule else Decimal("0")


def seed_balances(
    store: AccountStore,
    account: Account,
    product: ProductConfig,
    now: datetime,
) -> list[BalanceEntry]:
    """Create one balance entry per active product balance type.

    Parameters
    ----------
    store : AccountStore
        Store holding the (already committed) account.
    account : Account
        Newly opened account.
    product : ProductConfig
        Product defining the balance buckets.
    now : datetime
        Creation timestamp for the entries.

    Returns
    -------
    list[BalanceEntry]
        The seeded entries, in product order.
    """
    entries = []
    for balance_type in product.active_balance_types():
        entry = BalanceEntry(
            account_number=account.account_number,
            balance_type=balance_type,
            balance_amount=initial_amount(balance_type, account),
            created_at=now,
        )
        store.save_balance(entry)
        entries.append(entry)
    logger.info(
        "Seeded %d balances for account %s: %s",
        len(entries),
        account.account_number,
        ", ".join(e.balance_type for e in entries) or "none",
    )
    return entries
