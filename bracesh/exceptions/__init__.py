"""
bracesh Exception Hierarchy

All errors raised by the shell core inherit from ShellException, with
one sub-category per way a line can fail.

Architecture:
    ShellException (Base)
    ├── ParseException              (line aborted, nothing runs)
    │   ├── UnbalancedBraceError
    │   ├── UnterminatedQuoteError
    │   ├── EmptyLeftOperandError
    │   ├── MissingRightOperandError
    │   ├── DanglingPipeError
    │   ├── BackgroundMidPipelineError
    │   ├── MissingRedirectTargetError
    │   └── EmptyCommandError
    ├── ExecutionException          (becomes an exit status)
    │   ├── CommandNotFoundError
    │   ├── RedirectFileNotFoundError
    │   ├── RedirectionError
    │   ├── ExecError
    │   ├── InvalidIdentifierError
    │   └── BuiltinError
    ├── FatalShellError             (aborts the whole line)
    │   ├── ProcessCreationError
    │   └── PipeCreationError
    └── ConfigError
"""

from .shell_exceptions import ShellException

from .parse_exceptions import (
    ParseException,
    UnbalancedBraceError,
    UnterminatedQuoteError,
    EmptyLeftOperandError,
    MissingRightOperandError,
    DanglingPipeError,
    BackgroundMidPipelineError,
    MissingRedirectTargetError,
    EmptyCommandError,
)

from .execution_exceptions import (
    ExecutionException,
    CommandNotFoundError,
    RedirectFileNotFoundError,
    RedirectionError,
    ExecError,
    InvalidIdentifierError,
    BuiltinError,
)

from .process_exceptions import (
    FatalShellError,
    ProcessCreationError,
    PipeCreationError,
)


class ConfigError(ShellException):
    """Raised when a configuration file cannot be loaded or is invalid."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(
            message=message,
            error_code=4001,
            recoverable=False,
            context={"path": path} if path else None
        )
        self.path = path


__all__ = [
    "ShellException",
    # Parse exceptions
    "ParseException",
    "UnbalancedBraceError",
    "UnterminatedQuoteError",
    "EmptyLeftOperandError",
    "MissingRightOperandError",
    "DanglingPipeError",
    "BackgroundMidPipelineError",
    "MissingRedirectTargetError",
    "EmptyCommandError",
    # Execution exceptions
    "ExecutionException",
    "CommandNotFoundError",
    "RedirectFileNotFoundError",
    "RedirectionError",
    "ExecError",
    "InvalidIdentifierError",
    "BuiltinError",
    # Fatal exceptions
    "FatalShellError",
    "ProcessCreationError",
    "PipeCreationError",
    # Configuration
    "ConfigError",
]
