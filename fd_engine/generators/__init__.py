"""Faker-backed demo data generators."""

from fd_engine.generators.calculation import CalculationResultGenerator
from fd_engine.generators.customer import CustomerProfileGenerator
from fd_engine.generators.product import ProductGenerator

__all__ = ["CalculationResultGenerator", "CustomerProfileGenerator", "ProductGenerator"]
