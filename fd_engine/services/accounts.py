"""Account lifecycle: opening, holders, search and ledger queries."""

import logging
from decimal import Decimal

from fd_engine.clock import ClockProvider
from fd_engine.config import EngineConfig
from fd_engine.exceptions import NotFoundError, PolicyViolationError, ValidationError
from fd_engine.models import (
    Account,
    AccountCreatedEvent,
    AccountHolder,
    AccountStatus,
    AlertType,
    CalculationResult,
    CommunicationEventType,
    MaturityInstruction,
    ProductConfig,
    RoleType,
    SearchKind,
    Transaction,
    TransactionType,
)
from fd_engine.money import calculate_principal_from_maturity, months_between
from fd_engine.providers import CalculationProvider, ProductProvider
from fd_engine.services.account_numbers import AccountNumberGenerator, new_transaction_reference
from fd_engine.services.balances import seed_balances
from fd_engine.services.notifications import Notifier, new_event_id
from fd_engine.sinks.base import EventSink
from fd_engine.store.base import AccountStore, newest_first

logger = logging.getLogger(__name__)

FULL_OWNERSHIP = Decimal("100.00")


class AccountService:
    """Open FD accounts and manage their holders.

    Parameters
    ----------
    store : AccountStore
        Account persistence.
    products : ProductProvider
        Product configuration lookup.
    calculations : CalculationProvider
        Calculation result lookup, used by :meth:`open_account`.
    sink : EventSink
        Destination for account events.
    clock : ClockProvider
        Source of all dates and timestamps.
    config : EngineConfig | None
        Engine settings (branch code, default currency).
    """

    def __init__(
        self,
        store: AccountStore,
        products: ProductProvider,
        calculations: CalculationProvider,
        sink: EventSink,
        clock: ClockProvider,
        config: EngineConfig | None = None,
        number_generator: AccountNumberGenerator | None = None,
    ) -> None:
        self.store = store
        self.products = products
        self.calculations = calculations
        self.clock = clock
        self.config = config or EngineConfig()
        self.notifier = Notifier(sink, clock)
        self.numbers = number_generator or AccountNumberGenerator(store, self.config.branch_code)

    def open_account(self, calc_id: int, account_name: str, owner_customer_id: str) -> Account:
        """Open an account from a calculation id."""
        calculation = self.calculations.get_calculation(calc_id)
        return self.create_account(calculation, account_name, owner_customer_id)

    def create_account(
        self,
        calculation: CalculationResult,
        account_name: str,
        owner_customer_id: str,
        maturity_instruction: MaturityInstruction = MaturityInstruction.PAYOUT_TO_LINKED_ACCOUNT,
        payout_account_number: str | None = None,
    ) -> Account:
        """Open an FD account from a calculation result.

        The account, its OWNER holder and its PRINCIPAL_DEPOSIT are committed
        together; balances are seeded after the commit and events are
        published last.

        Raises
        ------
        ValidationError
            For blank names or ids, a non-positive maturity value, a maturity
            date before today or a non-positive derived principal.
        UpstreamUnavailableError
            If the product configuration cannot be fetched.
        """
        if not account_name or not account_name.strip():
            raise ValidationError("Account name is required")
        if not owner_customer_id or not owner_customer_id.strip():
            raise ValidationError("Owner customer id is required")
        if calculation.maturity_value is None or calculation.maturity_value <= 0:
            raise ValidationError(f"Maturity value must be positive, got {calculation.maturity_value}")

        effective_date = self.clock.logical_date()
        if calculation.maturity_date < effective_date:
            raise ValidationError(
                f"Maturity date {calculation.maturity_date} is before effective date {effective_date}"
            )

        product = self.products.get_product(calculation.product_code)
        term = months_between(effective_date, calculation.maturity_date)
        rate = calculation.rate
        if calculation.principal_amount is not None:
            principal = calculation.principal_amount
        else:
            principal = calculate_principal_from_maturity(calculation.maturity_value, rate, term)
        if principal <= 0:
            raise ValidationError(f"Derived principal must be positive, got {principal}")

        now = self.clock.logical_datetime()
        with self.store.unit_of_work():
            account = Account(
                account_number=self.numbers.generate(),
                account_name=account_name.strip(),
                product_code=calculation.product_code,
                status=AccountStatus.ACTIVE,
                term_in_months=term,
                interest_rate=rate,
                principal_amount=principal,
                maturity_amount=calculation.maturity_value,
                effective_date=effective_date,
                maturity_date=calculation.maturity_date,
                created_at=now,
                maturity_instruction=maturity_instruction,
                payout_account_number=payout_account_number,
                calc_id=calculation.calc_id,
                result_id=calculation.result_id,
                apy=calculation.apy,
                effective_rate=calculation.effective_rate,
                payout_freq=calculation.payout_freq,
                payout_amount=calculation.payout_amount,
                category1_id=calculation.category1_id,
                category2_id=calculation.category2_id,
                tenure_value=calculation.tenure_value,
                tenure_unit=calculation.tenure_unit,
                currency=product.currency or self.config.default_currency,
                interest_type=product.interest_type,
                compounding_frequency=product.compounding_frequency,
            )
            account.add_holder(AccountHolder(owner_customer_id, RoleType.OWNER, FULL_OWNERSHIP))
            account.post_transaction(
                TransactionType.PRINCIPAL_DEPOSIT,
                principal,
                now,
                new_transaction_reference(),
                "Initial principal deposit.",
            )
            self.store.save(account)

        logger.info(
            "Created FD account %s for customer %s: principal=%s rate=%s term=%d months",
            account.account_number,
            owner_customer_id,
            principal,
            rate,
            term,
            extra={"account_number": account.account_number},
        )

        seed_balances(self.store, account, product, now)
        self._announce_opening(account, product)
        return account

    def _announce_opening(self, account: Account, product: ProductConfig) -> None:
        owner = account.primary_customer_id or ""
        self.notifier.publish(
            AccountCreatedEvent(
                account_number=account.account_number,
                customer_id=owner,
                principal_amount=account.principal_amount,
                maturity_date=account.maturity_date,
                event_id=new_event_id(),
            )
        )
        self.notifier.alert(
            account,
            AlertType.ACCOUNT_CREATED,
            f"Fixed deposit account {account.account_number} opened",
            details=f"principal={account.principal_amount}, maturity={account.maturity_date.isoformat()}",
        )
        self.notifier.communicate(
            account,
            product,
            CommunicationEventType.COMM_OPENING.value,
            {
                "ACCOUNT_NUMBER": account.account_number,
                "ACCOUNT_NAME": account.account_name,
                "PRINCIPAL_AMOUNT": str(account.principal_amount),
                "MATURITY_DATE": account.maturity_date.isoformat(),
                "MATURITY_AMOUNT": str(account.maturity_amount),
            },
        )

    def add_role_to_account(
        self,
        account_number: str,
        customer_id: str,
        role_type: RoleType | str,
        ownership_percentage: Decimal | None = None,
    ) -> Account:
        """Attach a holder to an existing account.

        Raises
        ------
        NotFoundError
            If the account does not exist.
        PolicyViolationError
            ``INVALID_ROLE`` when the product does not allow the role.
        ValidationError
            For an unknown role, an out-of-range ownership percentage or a
            duplicate (customer, role) pair.
        """
        role = self._parse_role(role_type)
        with self.store.unit_of_work():
            account = self.store.get_for_update(account_number)
            if account is None:
                raise NotFoundError(f"Account not found with number: {account_number}")

            product = self.products.get_product(account.product_code)
            if not product.is_role_allowed(role):
                raise PolicyViolationError(
                    f"Role {role.value} is not allowed for product {product.product_code}",
                    code="INVALID_ROLE",
                )

            account.add_holder(AccountHolder(customer_id, role, ownership_percentage))
            account.updated_at = self.clock.logical_datetime()
            self.store.save(account)

        logger.info(
            "Added %s %s to account %s",
            role.value,
            customer_id,
            account_number,
            extra={"account_number": account_number},
        )
        self.notifier.alert(
            account,
            AlertType.ACCOUNT_HOLDER_ADDED,
            f"Customer {customer_id} added as {role.value}",
        )
        return account

    @staticmethod
    def _parse_role(role_type: RoleType | str) -> RoleType:
        if isinstance(role_type, RoleType):
            return role_type
        try:
            return RoleType(str(role_type).strip().upper())
        except ValueError as e:
            raise ValidationError(f"Unknown role type: {role_type}") from e

    def find_accounts(self, search_kind: SearchKind | str, value: str) -> list[Account]:
        """Search by account number, customer id or account name fragment."""
        kind = SearchKind.parse(search_kind)
        logger.debug("Searching accounts by %s=%s", kind.value, value)
        if kind == SearchKind.ACCOUNT_NUMBER:
            account = self.store.get(value)
            return [account] if account is not None else []
        if kind == SearchKind.CUSTOMER_ID:
            return self.store.find_by_customer_id(value)
        return self.store.find_by_name(value)

    def get_account(self, account_number: str) -> Account:
        account = self.store.get(account_number)
        if account is None:
            raise NotFoundError(f"Account not found with number: {account_number}")
        return account

    def get_transactions(self, account_number: str) -> list[Transaction]:
        """All postings of an account, newest first."""
        return newest_first(list(self.get_account(account_number).transactions))
