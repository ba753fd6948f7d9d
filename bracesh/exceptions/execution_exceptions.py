"""
Execution Exceptions

Recoverable errors raised while evaluating a parsed line. Each one is
reported to the user and converted into an exit status that the
'&&', '||' and ';' operators then act upon.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from .shell_exceptions import ShellException


class ExecutionException(ShellException):
    """
    Base exception for recoverable evaluation errors.

    Attributes:
        status: Exit status the failing statement evaluates to
    """

    def __init__(
        self,
        message: str,
        status: int = 1,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code or 2000,
            recoverable=True,
            context=context
        )
        self.status = status


class CommandNotFoundError(ExecutionException):
    """
    No executable matched the command name.

    Example:
        >>> raise CommandNotFoundError("frobnicate")
    """

    def __init__(self, command: str, status: int = 127) -> None:
        super().__init__(
            message=f"{command}: command not found",
            status=status,
            error_code=2001
        )
        self.command = command


class RedirectFileNotFoundError(ExecutionException):
    """The file named by a '<' redirection does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(
            message=f"{path}: no such file",
            status=1,
            error_code=2002,
            context={"path": path}
        )
        self.path = path


class RedirectionError(ExecutionException):
    """A redirection target could not be opened."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            message=f"{path}: {reason}",
            status=1,
            error_code=2003,
            context={"path": path}
        )
        self.path = path
        self.reason = reason


class ExecError(ExecutionException):
    """The operating system refused to execute a resolved file."""

    def __init__(self, path: str, reason: str, status: int = 126) -> None:
        super().__init__(
            message=f"{path}: cannot execute: {reason}",
            status=status,
            error_code=2004,
            context={"path": path}
        )
        self.path = path


class InvalidIdentifierError(ExecutionException):
    """
    The left side of an assignment is not a valid name.

    Names start with a letter; the remaining characters are letters
    or digits.
    """

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"'{name}': not a valid identifier",
            status=1,
            error_code=2005
        )
        self.name = name


class BuiltinError(ExecutionException):
    """A built-in command failed or was used where it cannot run."""

    def __init__(self, builtin: str, reason: str) -> None:
        super().__init__(
            message=f"{builtin}: {reason}",
            status=1,
            error_code=2006
        )
        self.builtin = builtin
