"""Tests for custom exception hierarchy."""

from fd_engine.exceptions import (
    ConcurrentModificationError,
    ConfigurationError,
    FdEngineError,
    InvalidStateError,
    NotFoundError,
    PolicyViolationError,
    SinkError,
    UpstreamUnavailableError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_fd_engine_error_is_exception(self) -> None:
        assert isinstance(FdEngineError("test"), Exception)

    def test_domain_errors_are_fd_engine_errors(self) -> None:
        for cls in (
            NotFoundError,
            InvalidStateError,
            PolicyViolationError,
            ValidationError,
            UpstreamUnavailableError,
            ConfigurationError,
            SinkError,
        ):
            assert isinstance(cls("test"), FdEngineError)

    def test_concurrent_modification_is_invalid_state(self) -> None:
        err = ConcurrentModificationError("test")
        assert isinstance(err, InvalidStateError)
        assert isinstance(err, FdEngineError)

    def test_policy_violation_default_code(self) -> None:
        assert PolicyViolationError("nope").code == "POLICY_VIOLATION"

    def test_policy_violation_custom_code(self) -> None:
        err = PolicyViolationError("Role GUARDIAN not allowed", code="INVALID_ROLE")
        assert err.code == "INVALID_ROLE"
        assert str(err) == "Role GUARDIAN not allowed"

    def test_exception_message(self) -> None:
        err = NotFoundError("Account not found with number: 1011234567")
        assert str(err) == "Account not found with number: 1011234567"
