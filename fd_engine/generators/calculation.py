"""Calculation result generator."""

from __future__ import annotations

import random
from datetime import date
from decimal import Decimal
from typing import Iterator

from fd_engine.generators.base import BaseGenerator
from fd_engine.models import CalculationResult, Frequency
from fd_engine.money import add_months, calculate_maturity_amount


class CalculationResultGenerator(BaseGenerator):
    """Generate quotes as the FD calculation service would return them."""

    TERMS = [6, 12, 24, 36, 60]
    TERM_WEIGHTS = [0.15, 0.40, 0.20, 0.15, 0.10]
    PAYOUT_FREQUENCIES = [None, Frequency.MONTHLY.value, Frequency.QUARTERLY.value]

    def __init__(self, seed: int | None = None, first_calc_id: int = 1) -> None:
        super().__init__(seed)
        self._next_calc_id = first_calc_id

    def generate(
        self,
        product_code: str,
        effective_date: date,
        include_principal: bool = False,
    ) -> CalculationResult:
        """Generate a quote starting on ``effective_date``.

        Parameters
        ----------
        product_code : str
            Product the quote is for.
        effective_date : date
            Date the deposit would start.
        include_principal : bool
            Return the principal explicitly instead of leaving it to be
            derived from the maturity value.
        """
        principal = Decimal(random.randrange(10_000, 1_000_001, 5_000))
        term = random.choices(self.TERMS, weights=self.TERM_WEIGHTS, k=1)[0]
        rate = Decimal("5.50") + Decimal("0.25") * random.randint(0, 10)

        calc_id = self._next_calc_id
        self._next_calc_id += 1
        return CalculationResult(
            maturity_value=calculate_maturity_amount(principal, rate, term),
            maturity_date=add_months(effective_date, term),
            product_code=product_code,
            effective_rate=rate,
            apy=rate,
            payout_freq=random.choice(self.PAYOUT_FREQUENCIES),
            calc_id=calc_id,
            result_id=calc_id,
            category1_id=random.choice(["GENERAL", "SENIOR"]),
            principal_amount=principal if include_principal else None,
            tenure_value=term,
            tenure_unit="MONTHS",
        )

    def generate_batch(self, count: int, product_code: str, effective_date: date) -> Iterator[CalculationResult]:
        for _ in range(count):
            yield self.generate(product_code, effective_date)
