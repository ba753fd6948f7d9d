"""
Shell Exceptions

Base exception for every error raised by the bracesh core.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any


class ShellException(Exception):
    """
    Base exception for all shell errors.

    Every error raised by the parser, the evaluator or the process
    runner derives from this class. It carries a numeric error code
    and free-form context so callers can report errors uniformly.

    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
        recoverable: Whether evaluation of the line may continue
        context: Additional context about the error

    Example:
        >>> raise ShellException("Something went wrong", error_code=1)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        recoverable: bool = True,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or 0
        self.recoverable = recoverable
        self.context = context or {}

    def __str__(self) -> str:
        base = f"[Error {self.error_code}] {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({context_str})"
        return base

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code}, "
            f"recoverable={self.recoverable})"
        )
