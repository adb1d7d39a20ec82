"""Account lifecycle, withdrawal, statement and report services."""

from fd_engine.services.accounts import AccountService
from fd_engine.services.reports import ReportService
from fd_engine.services.statements import StatementService
from fd_engine.services.withdrawal import WithdrawalService

__all__ = ["AccountService", "ReportService", "StatementService", "WithdrawalService"]
