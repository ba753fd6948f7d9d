"""
Process Exceptions

Fatal errors in process and pipe creation. Unlike execution errors
these are never turned into an exit status: they abort evaluation of
the whole line, regardless of operator, and reach the caller.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from .shell_exceptions import ShellException


class FatalShellError(ShellException):
    """
    Base exception for unrecoverable errors.

    Attributes:
        errno: OS error number that triggered the failure (if any)
    """

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if errno is not None:
            ctx["errno"] = errno
        super().__init__(
            message=message,
            error_code=error_code or 3000,
            recoverable=False,
            context=ctx
        )
        self.errno = errno


class ProcessCreationError(FatalShellError):
    """
    The system could not create a child process.

    Example:
        >>> raise ProcessCreationError("ls", "Resource temporarily unavailable")
    """

    def __init__(self, command: str, reason: str, errno: Optional[int] = None) -> None:
        super().__init__(
            message=f"cannot create process for '{command}': {reason}",
            errno=errno,
            error_code=3001,
            context={"command": command}
        )
        self.command = command


class PipeCreationError(FatalShellError):
    """The system could not create a pipe between two pipeline stages."""

    def __init__(self, reason: str, errno: Optional[int] = None) -> None:
        super().__init__(
            message=f"cannot create pipe: {reason}",
            errno=errno,
            error_code=3002
        )
