"""Scheduled batch jobs over active accounts."""

from fd_engine.batch.base import AccountJob, JobResult
from fd_engine.batch.interest import InterestAccrualJob, InterestPayoutJob
from fd_engine.batch.maturity import MaturityProcessingJob

__all__ = ["AccountJob", "InterestAccrualJob", "InterestPayoutJob", "JobResult", "MaturityProcessingJob"]
