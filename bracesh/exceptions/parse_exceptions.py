"""
Parse Exceptions

Exceptions raised while turning a line of text into a syntax tree.
A parse error aborts the whole line before anything is executed.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from .shell_exceptions import ShellException


class ParseException(ShellException):
    """
    Base exception for all syntax errors.

    Attributes:
        construct: The construct that failed (brace, quote, operator, ...)
        line: The full input line being parsed
        column: Zero-based offset of the offending character
    """

    def __init__(
        self,
        message: str,
        construct: str,
        line: str = "",
        column: Optional[int] = None,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if column is not None:
            ctx["column"] = column
        super().__init__(
            message=message,
            error_code=error_code or 1000,
            recoverable=False,
            context=ctx
        )
        self.construct = construct
        self.line = line
        self.column = column

    def describe(self) -> str:
        """
        Render the error with the offending line and a caret marker.

        Example:
            >>> print(UnbalancedBraceError("{echo a", 0).describe())
            parse error (brace): matching '}' not found
              {echo a
              ^
        """
        text = f"parse error ({self.construct}): {self.message}"
        if self.line:
            text += f"\n  {self.line}"
            if self.column is not None:
                text += "\n  " + " " * self.column + "^"
        return text


class UnbalancedBraceError(ParseException):
    """A '{' without its matching '}', or a stray '}'."""

    def __init__(self, line: str, column: int, message: Optional[str] = None) -> None:
        super().__init__(
            message=message or "matching '}' not found",
            construct="brace",
            line=line,
            column=column,
            error_code=1001
        )


class UnterminatedQuoteError(ParseException):
    """A '"' without a closing, unescaped '"'."""

    def __init__(self, line: str, column: int) -> None:
        super().__init__(
            message="closing '\"' not found",
            construct="quote",
            line=line,
            column=column,
            error_code=1002
        )


class EmptyLeftOperandError(ParseException):
    """An operator with nothing before it, e.g. '&& ls'."""

    def __init__(self, operator: str, line: str, column: int) -> None:
        super().__init__(
            message=f"left statement of '{operator}' is empty",
            construct="operator",
            line=line,
            column=column,
            error_code=1003,
            context={"operator": operator}
        )
        self.operator = operator


class MissingRightOperandError(ParseException):
    """An operator that ends the expression, e.g. 'ls &&'."""

    def __init__(self, operator: str, line: str, column: int) -> None:
        super().__init__(
            message=f"expected argument after operator '{operator}'",
            construct="operator",
            line=line,
            column=column,
            error_code=1004,
            context={"operator": operator}
        )
        self.operator = operator


class DanglingPipeError(ParseException):
    """A '|' with an empty segment on either side."""

    def __init__(self, line: str, column: int, message: Optional[str] = None) -> None:
        super().__init__(
            message=message or "pipe has no command before it",
            construct="pipe",
            line=line,
            column=column,
            error_code=1005
        )


class BackgroundMidPipelineError(ParseException):
    """A '&' anywhere but at the very end of a statement."""

    def __init__(self, line: str, column: int, message: Optional[str] = None) -> None:
        super().__init__(
            message=message or "'&' is only allowed at the end of a pipeline",
            construct="background",
            line=line,
            column=column,
            error_code=1006
        )


class MissingRedirectTargetError(ParseException):
    """A redirection operator with no file name or delimiter after it."""

    def __init__(self, operator: str, line: str, column: int) -> None:
        super().__init__(
            message=f"expected a target after '{operator}'",
            construct="redirection",
            line=line,
            column=column,
            error_code=1007,
            context={"operator": operator}
        )
        self.operator = operator


class EmptyCommandError(ParseException):
    """A segment holding only redirections or '&', e.g. '> out'."""

    def __init__(self, line: str, column: int) -> None:
        super().__init__(
            message="command name is missing",
            construct="command",
            line=line,
            column=column,
            error_code=1008
        )
