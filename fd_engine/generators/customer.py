"""Customer profile generator."""

from __future__ import annotations

from typing import Iterator

from fd_engine.generators.base import BaseGenerator
from fd_engine.models import CustomerProfile


class CustomerProfileGenerator(BaseGenerator):
    """Generate synthetic customer profiles."""

    def generate(self) -> CustomerProfile:
        """Generate a single customer profile."""
        first_name = self.fake.first_name()
        last_name = self.fake.last_name()
        return CustomerProfile(
            customer_id=f"CUST-{self.fake.uuid4()[:8].upper()}",
            customer_number=self.fake.numerify("CN########"),
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name}.{last_name}@{self.fake.free_email_domain()}".lower(),
            phone_number=self.fake.numerify("+91 9#########"),
            date_of_birth=self.fake.date_of_birth(minimum_age=18, maximum_age=85),
            address_line1=self.fake.street_address(),
            city=self.fake.city(),
            country="India",
            postal_code=self.fake.postcode(),
        )

    def generate_batch(self, count: int) -> Iterator[CustomerProfile]:
        """Generate multiple customer profiles.

        Parameters
        ----------
        count : int
            Number of customers to generate.

        Yields
        ------
        CustomerProfile
            Generated customers.
        """
        for _ in range(count):
            yield self.generate()
