#!/usr/bin/env python3
"""Simulate FD account lifecycles on a logical clock.

Opens a batch of generated accounts, then walks the clock forward day by
day running the interest, payout and maturity jobs, sends monthly
statements and closes one account early.

Examples
--------
    python scripts/simulate.py --accounts 10 --months 13
    python scripts/simulate.py --sink kafka --kafka-bootstrap localhost:9092
"""

import argparse
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fd_engine.batch import InterestAccrualJob, InterestPayoutJob, MaturityProcessingJob
from fd_engine.clock import LogicalClock
from fd_engine.config import EngineConfig, KafkaConfig
from fd_engine.exceptions import FdEngineError
from fd_engine.generators import CalculationResultGenerator, CustomerProfileGenerator, ProductGenerator
from fd_engine.logging import setup_logging
from fd_engine.models import MaturityInstruction
from fd_engine.providers import StaticCalculationProvider, StaticCustomerDirectory, StaticProductCatalog
from fd_engine.services import AccountService, ReportService, StatementService, WithdrawalService
from fd_engine.sinks import create_sink
from fd_engine.store import InMemoryAccountStore

logger = logging.getLogger("simulate")


def build_store(postgres_url: str | None):
    """In-memory store, or PostgreSQL when a URL is given."""
    if postgres_url is None:
        return InMemoryAccountStore()
    from fd_engine.store.postgres import PostgresAccountStore

    store = PostgresAccountStore(postgres_url)
    store.create_schema()
    return store


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Simulate fixed deposit lifecycles")
    parser.add_argument(
        "--accounts",
        type=int,
        default=5,
        help="Number of accounts to open (default: 5)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--start-date",
        type=date.fromisoformat,
        default=date(2024, 1, 10),
        help="Logical start date, ISO format (default: 2024-01-10)",
    )
    parser.add_argument(
        "--months",
        type=int,
        default=7,
        help="Number of months to simulate (default: 7)",
    )
    parser.add_argument(
        "--sink",
        choices=["console", "kafka", "memory"],
        default="memory",
        help="Event sink (default: memory)",
    )
    parser.add_argument(
        "--kafka-bootstrap",
        type=str,
        default="localhost:9092",
        help="Kafka bootstrap servers",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="PostgreSQL connection string (default: in-memory store)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["standard", "json"],
        default="standard",
        help="Log format (default: standard)",
    )
    args = parser.parse_args()

    setup_logging(args.log_level, args.log_format)
    config = EngineConfig(
        kafka=KafkaConfig(bootstrap_servers=args.kafka_bootstrap),
        clock_mode="logical",
        event_sink=args.sink,
        log_level=args.log_level,
        log_format=args.log_format,
    )

    clock = LogicalClock(args.start_date)
    store = build_store(args.postgres_url)
    sink = create_sink(config)

    product = ProductGenerator(seed=args.seed).generate("FD-STD")
    products = StaticProductCatalog({product.product_code: product})
    customers = StaticCustomerDirectory()
    calculations = StaticCalculationProvider()
    customer_gen = CustomerProfileGenerator(seed=args.seed)
    calc_gen = CalculationResultGenerator(seed=args.seed)

    accounts_svc = AccountService(store, products, calculations, sink, clock, config)
    withdrawals = WithdrawalService(store, products, sink, clock, config)
    statements = StatementService(store, products, customers, sink, clock, config)
    reports = ReportService(store, clock)
    jobs = [
        InterestAccrualJob(store, sink, clock),
        InterestPayoutJob(store, sink, clock),
        MaturityProcessingJob(store, products, sink, clock, config),
    ]

    opened = []
    for i, customer in enumerate(customer_gen.generate_batch(args.accounts)):
        customers.add(customer)
        calculation = calc_gen.generate(product.product_code, clock.logical_date())
        calculations.add(calculation)
        instruction = (
            MaturityInstruction.RENEW_PRINCIPAL_AND_INTEREST if i % 2 else MaturityInstruction.CLOSE
        )
        account = accounts_svc.create_account(
            calculation, f"{customer.full_name} FD", customer.customer_id, maturity_instruction=instruction
        )
        opened.append(account.account_number)

    end_date = args.start_date + timedelta(days=30 * args.months)
    withdraw_on = args.start_date + timedelta(days=15 * args.months)
    while clock.logical_date() < end_date:
        clock.advance_days(1)
        today = clock.logical_date()
        for job in jobs:
            job.run()
        if today.day == 1:
            period_end = today - timedelta(days=1)
            statements.generate_statements_for_all(period_end.replace(day=1), period_end)
        if today == withdraw_on and opened:
            try:
                quote = withdrawals.inquiry(opened[0])
                logger.info("Withdrawal quote for %s: payout=%s penalty=%s",
                            opened[0], quote.final_payout_amount, quote.penalty_amount)
                withdrawals.execute(opened[0], "CUSTOMER_REQUEST")
            except FdEngineError as e:
                logger.warning("Withdrawal of %s not possible: %s", opened[0], e)

    print(f"\n{'='*60}")
    print(f"Simulation finished on {clock.logical_date()}")
    print("=" * 60)
    for account in store.all():
        print(
            f"  {account.account_number}  {account.status.value:<20} "
            f"principal={account.principal_amount:>14}  ledger={account.ledger_balance():>14}"
        )
    maturing = reports.accounts_maturing_within(90)
    print(f"\nAccounts maturing within 90 days: {len(maturing)}")
    sink.close()


if __name__ == "__main__":
    main()
