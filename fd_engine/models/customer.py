"""Customer profile model."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class CustomerProfile:
    """Customer record returned by the customer profile service."""

    customer_id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    customer_number: str | None = None
    date_of_birth: date | None = None
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    postal_code: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
