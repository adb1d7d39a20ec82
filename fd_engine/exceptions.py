"""Custom exception hierarchy for fd-engine."""


class FdEngineError(Exception):
    """Base exception for all fd-engine errors."""


class NotFoundError(FdEngineError):
    """Raised when an account or other referenced resource does not exist."""


class InvalidStateError(FdEngineError):
    """Raised when an operation is attempted from a disallowed account status."""


class ConcurrentModificationError(InvalidStateError):
    """Raised when an account was changed by another unit of work since it was loaded."""


class PolicyViolationError(FdEngineError):
    """Raised when product configuration forbids a role or transaction type."""

    def __init__(self, message: str, code: str = "POLICY_VIOLATION") -> None:
        super().__init__(message)
        self.code = code


class ValidationError(FdEngineError):
    """Raised for malformed input or inconsistent configuration data."""


class UpstreamUnavailableError(FdEngineError):
    """Raised when a calculation, product or customer provider fails."""


class ConfigurationError(FdEngineError):
    """Raised when configuration is invalid or missing."""


class SinkError(FdEngineError):
    """Raised when an event sink cannot be created or used."""
