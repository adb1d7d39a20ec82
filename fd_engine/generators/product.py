"""FD product configuration generator."""

from __future__ import annotations

import random
from decimal import Decimal

from fd_engine.generators.base import BaseGenerator
from fd_engine.models import (
    BalanceType,
    ChargeCalculationType,
    CommunicationEventType,
    Frequency,
    PenaltyCharge,
    ProductBalance,
    ProductCommunication,
    ProductConfig,
    RoleType,
    TransactionType,
)

OPENING_TEMPLATE = (
    "Dear customer, your fixed deposit ${ACCOUNT_NUMBER} of ${PRINCIPAL_AMOUNT} is open "
    "and matures on ${MATURITY_DATE}."
)

STATEMENT_TEMPLATE = (
    "Hello ${CUSTOMER_NAME}, here is the statement for ${PRODUCT_NAME} (xx${LAST_4_DIGITS}). "
    "Opening ${OPENING_BALANCE}, closing ${CLOSING_BALANCE}."
)


class ProductGenerator(BaseGenerator):
    """Generate FD product configurations with tiered penalty charges."""

    PRODUCT_NAMES = ["Regular FD", "Senior Citizen FD", "Tax Saver FD", "Flexi FD"]
    COMPOUNDING = [Frequency.MONTHLY, Frequency.QUARTERLY, Frequency.YEARLY]
    COMPOUNDING_WEIGHTS = [0.25, 0.60, 0.15]

    def generate(self, product_code: str | None = None, allow_premature: bool = True) -> ProductConfig:
        """Generate a single product.

        Parameters
        ----------
        product_code : str | None
            Code to use; a random ``FD-XXX`` code when omitted.
        allow_premature : bool
            Whether PREMATURE_WITHDRAWAL is an allowed transaction.

        Returns
        -------
        ProductConfig
            Generated product.
        """
        code = product_code or f"FD-{self.fake.bothify('???').upper()}"
        transactions = {
            TransactionType.PRINCIPAL_DEPOSIT,
            TransactionType.INTEREST_ACCRUAL,
            TransactionType.INTEREST_PAYOUT,
            TransactionType.PENALTY_DEBIT,
            TransactionType.MATURITY_PAYOUT,
            TransactionType.RENEWAL_DEPOSIT,
        }
        if allow_premature:
            transactions.add(TransactionType.PREMATURE_WITHDRAWAL)

        return ProductConfig(
            product_code=code,
            product_name=random.choice(self.PRODUCT_NAMES),
            currency="INR",
            interest_type="COMPOUND",
            compounding_frequency=random.choices(self.COMPOUNDING, weights=self.COMPOUNDING_WEIGHTS, k=1)[0].value,
            roles=frozenset({RoleType.OWNER, RoleType.CO_OWNER, RoleType.JOINT_HOLDER, RoleType.NOMINEE}),
            transactions=frozenset(transactions),
            balances=(
                ProductBalance(BalanceType.FD_PRINCIPAL.value),
                ProductBalance(BalanceType.FD_INTEREST.value),
                ProductBalance(BalanceType.PENALTY.value),
            ),
            charges=self._charges(code),
            communications=(
                ProductCommunication(
                    comm_code=f"{code}-OPEN",
                    event=CommunicationEventType.COMM_OPENING.value,
                    template=OPENING_TEMPLATE,
                ),
                ProductCommunication(
                    comm_code=f"{code}-STMT",
                    event=CommunicationEventType.COMM_MONTHLY_STATEMENT.value,
                    template=STATEMENT_TEMPLATE,
                    communication_type="STATEMENT",
                ),
            ),
        )

    @staticmethod
    def _charges(code: str) -> tuple[PenaltyCharge, ...]:
        """Non-overlapping tiers: steep early, percentage of principal late."""
        early = Decimal(random.choice(["1.50", "2.00"]))
        return (
            PenaltyCharge(f"{code}-PEN-EARLY", ChargeCalculationType.INTEREST_DELTA, early,
                          Decimal("0"), Decimal("50")),
            PenaltyCharge(f"{code}-PEN-MID", ChargeCalculationType.INTEREST_DELTA, Decimal("1.00"),
                          Decimal("50"), Decimal("90")),
            PenaltyCharge(f"{code}-PEN-LATE", ChargeCalculationType.PERCENTAGE, Decimal("0.50"),
                          Decimal("90"), Decimal("100")),
        )
