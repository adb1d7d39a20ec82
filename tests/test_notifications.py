"""Tests for event publication, balance seeding and upstream providers."""

import logging
from datetime import datetime
from decimal import Decimal

import pytest

from fd_engine.exceptions import UpstreamUnavailableError
from fd_engine.models import AccountAlertEvent, AlertType, CommunicationRequestedEvent
from fd_engine.providers import StaticCalculationProvider, StaticCustomerDirectory, StaticProductCatalog
from fd_engine.services.balances import SEED_RULES, initial_amount, seed_balances
from fd_engine.services.notifications import Notifier, new_event_id

from conftest import make_calculation, make_product


class TestNotifier:
    """Tests for Notifier."""

    def test_publish_success(self, sink, clock, opened_account) -> None:
        sink.clear()
        notifier = Notifier(sink, clock)

        assert notifier.alert(opened_account, AlertType.ACCOUNT_MODIFIED, "changed", "x=1")

        alert = sink.of_type(AccountAlertEvent)[0]
        assert alert.customer_id == "cust-001"
        assert alert.timestamp == datetime(2023, 1, 1, 9, 30)
        assert alert.details == "x=1"

    def test_publish_failure_is_logged(self, sink, clock, opened_account, caplog: pytest.LogCaptureFixture) -> None:
        sink.fail_with = RuntimeError("broker down")
        notifier = Notifier(sink, clock)

        with caplog.at_level(logging.ERROR, logger="fd_engine.services.notifications"):
            assert notifier.alert(opened_account, AlertType.ACCOUNT_MODIFIED, "changed") is False

        record = caplog.records[-1]
        assert "AccountAlertEvent" in record.getMessage()
        assert record.account_number == opened_account.account_number
        assert record.exc_info is not None

    def test_alert_without_holders_uses_system(self, sink, clock, opened_account) -> None:
        opened_account._holders.clear()

        event = Notifier(sink, clock).alert_event(opened_account, AlertType.ACCOUNT_MODIFIED, "m")

        assert event.customer_id == "SYSTEM"

    def test_communicate_counts_successes(self, sink, clock, opened_account, product) -> None:
        sink.clear()

        sent = Notifier(sink, clock).communicate(
            opened_account, product, "COMM_MONTHLY_STATEMENT", {"A": "1"}
        )

        assert sent == 1
        request = sink.of_type(CommunicationRequestedEvent)[0]
        assert request.communication_type == "STATEMENT"
        assert request.template_variables == {"A": "1"}

    def test_communicate_without_configuration(self, sink, clock, opened_account, product) -> None:
        assert Notifier(sink, clock).communicate(opened_account, product, "COMM_MATURITY_REMINDER") == 0

    def test_event_ids_are_unique(self) -> None:
        assert new_event_id() != new_event_id()


class TestSeedBalances:
    """Tests for balance seeding."""

    def test_principal_rule(self, opened_account) -> None:
        assert initial_amount("FD_PRINCIPAL", opened_account) == opened_account.principal_amount
        assert initial_amount("FD_INTEREST", opened_account) == Decimal("0")
        assert initial_amount("CUSTOM", opened_account) == Decimal("0")
        assert "FD_PRINCIPAL" in SEED_RULES

    def test_seeds_only_active_types(self, store, opened_account, clock) -> None:
        product = make_product()

        entries = seed_balances(store, opened_account, product, clock.logical_datetime())

        assert [e.balance_type for e in entries] == ["FD_PRINCIPAL", "FD_INTEREST", "PENALTY"]
        assert store.balance(opened_account.account_number, "BONUS") is None


class TestStaticProviders:
    """Tests for the in-memory upstream providers."""

    def test_calculation_lookup(self) -> None:
        provider = StaticCalculationProvider()
        provider.add(make_calculation(calc_id=5))

        assert provider.get_calculation(5).calc_id == 5
        with pytest.raises(UpstreamUnavailableError):
            provider.get_calculation(6)

    def test_calculation_requires_id(self) -> None:
        with pytest.raises(UpstreamUnavailableError):
            StaticCalculationProvider().add(make_calculation(calc_id=None))

    def test_product_lookup(self) -> None:
        catalog = StaticProductCatalog()
        catalog.add(make_product("FD-X"))

        assert catalog.get_product("FD-X").product_code == "FD-X"
        with pytest.raises(UpstreamUnavailableError, match="FD-Y"):
            catalog.get_product("FD-Y")

    def test_customer_lookup(self, customers: StaticCustomerDirectory) -> None:
        assert customers.get_customer("cust-001").first_name == "Asha"
        with pytest.raises(UpstreamUnavailableError):
            customers.get_customer("cust-404")
