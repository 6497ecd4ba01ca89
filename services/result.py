"""
Result[T]: how services report expected failures without raising.

Cooldowns, limits and insufficient funds are normal outcomes for an economy
command, so services hand them back as values the command layer can render:

    result = transfer_service.quote_transfer(sender_id, receiver_id, 500)
    if not result:
        if result.error_code == COOLDOWN_ACTIVE:
            wait = result.data["retry_after_seconds"]
        ...
    quote = result.value
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    A simple result type for service method return values.

    Attributes:
        success: Whether the operation succeeded
        value: The return value if successful (None if failed or void operation)
        error: Error message if failed (None if successful)
        error_code: Optional error code for programmatic error handling
        data: Structured failure details (remaining cooldown, limit hit, ...)
    """

    success: bool
    value: T | None = None
    error: str | None = None
    error_code: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        """Create a successful result with an optional value."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str, code: str | None = None, data: dict[str, Any] | None = None) -> "Result[T]":
        """Create a failed result with an error message, optional code and details."""
        return cls(success=False, error=error, error_code=code, data=dict(data or {}))

    def __bool__(self) -> bool:
        """Allow using Result in boolean context: if result: ..."""
        return self.success

    def unwrap(self) -> T:
        """
        Get the value, raising ValueError if the result is a failure.

        Raises:
            ValueError: If the result is a failure
        """
        if not self.success:
            raise ValueError(f"Cannot unwrap failed result: {self.error}")
        return self.value  # type: ignore

    def unwrap_or(self, default: T) -> T:
        """Get the value or a default if the result is a failure."""
        return self.value if self.success else default  # type: ignore

    def map(self, fn: Callable[[T], "Result"]) -> "Result":
        """
        Chain operations on successful results.

        If this result is successful, applies fn to the value and returns its result.
        If this result is a failure, returns this failure unchanged.
        """
        if not self.success:
            return self
        return fn(self.value)
