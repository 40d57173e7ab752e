"""Exception hierarchy for the ISC withdrawal builder."""

from typing import Any


class WithdrawalError(Exception):
    """Base exception for all withdrawal builder errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FormatError(WithdrawalError):
    """Raised when an address, signature or amount is malformed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class RpcError(WithdrawalError):
    """Raised when a chain RPC call fails or times out."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint


class EstimationError(RpcError):
    """Raised when gas estimation fails or does not settle."""

    pass


class InsufficientFundsError(WithdrawalError):
    """Raised when the balance cannot cover the estimated fee."""

    def __init__(
        self,
        message: str,
        balance: int | None = None,
        fee: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.balance = balance
        self.fee = fee


class MismatchError(WithdrawalError):
    """Raised when a post-signing consistency check fails."""

    def __init__(
        self,
        message: str,
        expected: Any | None = None,
        actual: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.expected = expected
        self.actual = actual
