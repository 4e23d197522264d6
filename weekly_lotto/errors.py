from __future__ import annotations


class LotteryError(RuntimeError):
    """Base error. ``operation`` names the client step that raised it."""

    def __init__(self, message: str = "", *, operation: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    def add_operation(self, operation: str) -> None:
        self.operation = f"{operation} > {self.operation}" if self.operation else operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class SiteUnavailable(LotteryError):
    pass


class AuthenticationFailed(LotteryError):
    pass


class ParseError(LotteryError):
    pass


class PurchaseRejected(LotteryError):
    def __init__(self, message: str, *, result_code: str = "", operation: str = "") -> None:
        super().__init__(message, operation=operation)
        self.result_code = result_code


class InvalidInput(LotteryError, ValueError):
    pass


class NoDataFound(LotteryError):
    pass


class TransportError(LotteryError):
    pass
