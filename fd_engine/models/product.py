"""Product configuration model."""

from dataclasses import dataclass, field
from decimal import Decimal

from fd_engine.exceptions import ValidationError
from fd_engine.models.enums import ChargeCalculationType, RoleType, TransactionType

FULL_TERM = Decimal("100")


@dataclass(frozen=True)
class ProductBalance:
    """Balance bucket defined by a product."""

    balance_type: str
    is_active: bool = True


@dataclass(frozen=True)
class PenaltyCharge:
    """Premature-withdrawal charge for a completion-percentage tier.

    The tier covers ``[min_completion, max_completion)``; a tier ending at
    100 also covers 100 itself. ``amount`` is the penalty rate in
    percentage points.
    """

    charge_code: str
    calculation_type: ChargeCalculationType
    amount: Decimal
    min_completion: Decimal = Decimal("0")
    max_completion: Decimal = FULL_TERM

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValidationError(f"Charge {self.charge_code} has a negative amount: {self.amount}")
        if not (0 <= self.min_completion < self.max_completion <= FULL_TERM):
            raise ValidationError(
                f"Charge {self.charge_code} has an invalid completion range "
                f"[{self.min_completion}, {self.max_completion})"
            )

    def matches(self, completion_percentage: Decimal) -> bool:
        if completion_percentage < self.min_completion:
            return False
        if completion_percentage < self.max_completion:
            return True
        return self.max_completion == FULL_TERM and completion_percentage == FULL_TERM


@dataclass(frozen=True)
class ProductCommunication:
    """Communication template attached to a product event."""

    comm_code: str
    event: str
    template: str
    channel: str = "EMAIL"
    communication_type: str = "ALERT"


@dataclass(frozen=True)
class ProductConfig:
    """Product and pricing configuration for an FD product."""

    product_code: str
    product_name: str = ""
    currency: str | None = None
    interest_type: str | None = None
    compounding_frequency: str | None = None
    roles: frozenset[RoleType] = field(default_factory=frozenset)
    transactions: frozenset[TransactionType] = field(default_factory=frozenset)
    balances: tuple[ProductBalance, ...] = ()
    charges: tuple[PenaltyCharge, ...] = ()
    communications: tuple[ProductCommunication, ...] = ()

    def is_role_allowed(self, role_type: RoleType) -> bool:
        return role_type in self.roles

    def is_transaction_allowed(self, transaction_type: TransactionType) -> bool:
        return transaction_type in self.transactions

    def active_balance_types(self) -> list[str]:
        """Active balance types in configuration order, without duplicates."""
        return list(dict.fromkeys(b.balance_type for b in self.balances if b.is_active))

    def penalty_charge_for(self, completion_percentage: Decimal) -> PenaltyCharge | None:
        """Return the charge tier covering ``completion_percentage``.

        Raises
        ------
        ValidationError
            If more than one tier matches (overlapping product data).
        """
        matched = [c for c in self.charges if c.matches(completion_percentage)]
        if len(matched) > 1:
            codes = ", ".join(c.charge_code for c in matched)
            raise ValidationError(
                f"Product {self.product_code} has overlapping penalty tiers at "
                f"{completion_percentage}%: {codes}"
            )
        return matched[0] if matched else None

    def communications_for(self, event: str) -> list[ProductCommunication]:
        return [c for c in self.communications if c.event == event]

    def template_for(self, event: str) -> str | None:
        for comm in self.communications:
            if comm.event == event:
                return comm.template
        return None
