"""Upstream data providers: calculation results, product configuration and customers.

The engines depend only on the protocols below. The ``Static*`` classes are
in-memory implementations used by simulations and tests; any failure to
produce a record surfaces as :class:`UpstreamUnavailableError`.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from fd_engine.exceptions import UpstreamUnavailableError
from fd_engine.models import CalculationResult, CustomerProfile, ProductConfig

logger = logging.getLogger(__name__)


class CalculationProvider(Protocol):
    def get_calculation(self, calc_id: int) -> CalculationResult: ...


class ProductProvider(Protocol):
    def get_product(self, product_code: str) -> ProductConfig: ...


class CustomerProvider(Protocol):
    def get_customer(self, customer_id: str) -> CustomerProfile: ...


@dataclass
class StaticCalculationProvider:
    """Calculation results keyed by ``calc_id``."""

    results: dict[int, CalculationResult] = field(default_factory=dict)

    def add(self, result: CalculationResult) -> None:
        if result.calc_id is None:
            raise UpstreamUnavailableError("Calculation result has no calc_id")
        self.results[result.calc_id] = result

    def get_calculation(self, calc_id: int) -> CalculationResult:
        try:
            return self.results[calc_id]
        except KeyError as e:
            logger.error("Calculation %s not available", calc_id)
            raise UpstreamUnavailableError(f"Calculation service has no result {calc_id}") from e


@dataclass
class StaticProductCatalog:
    """Product configurations keyed by product code."""

    products: dict[str, ProductConfig] = field(default_factory=dict)

    def add(self, product: ProductConfig) -> None:
        self.products[product.product_code] = product

    def get_product(self, product_code: str) -> ProductConfig:
        try:
            return self.products[product_code]
        except KeyError as e:
            logger.error("Product %s not available", product_code)
            raise UpstreamUnavailableError(f"Product service has no product {product_code}") from e


@dataclass
class StaticCustomerDirectory:
    """Customer profiles keyed by customer id."""

    customers: dict[str, CustomerProfile] = field(default_factory=dict)

    def add(self, customer: CustomerProfile) -> None:
        self.customers[customer.customer_id] = customer

    def get_customer(self, customer_id: str) -> CustomerProfile:
        try:
            return self.customers[customer_id]
        except KeyError as e:
            logger.error("Customer %s not available", customer_id)
            raise UpstreamUnavailableError(f"Customer service has no customer {customer_id}") from e
