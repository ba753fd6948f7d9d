"""
Scanner Module

Low-level scanning primitives shared by every parser:
- Whitespace trimming of an index range
- Brace and quote matching
- Whitespace tokenization that keeps braced and quoted regions whole
- Operator recognition

All functions work on the original, unmodified line plus a
[start, end) index range so errors can point at the exact column.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Optional, List, Tuple

from bracesh.exceptions import UnbalancedBraceError, UnterminatedQuoteError


# Operators that split an expression into statement OP expression
EXPRESSION_OPERATORS = ('&&', '||', ';', '=')

# Pipe boundary inside an invocation
PIPE = '|'

# Trailing background marker of a pipeline
BACKGROUND = '&'

# Redirection operators inside an invocation
REDIRECT_OPERATORS = ('<', '<<', '>', '>>')


@dataclass(frozen=True)
class Token:
    """A whitespace-delimited token and its position in the line."""
    value: str
    start: int
    end: int


def trim(text: str, start: int = 0, end: Optional[int] = None) -> Optional[Tuple[int, int]]:
    """
    Narrow [start, end) past leading and trailing whitespace.

    Returns:
        The narrowed (start, end) pair, or None if the range holds
        only whitespace.
    """
    if end is None:
        end = len(text)
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    if start >= end:
        return None
    return start, end


def match_quote(text: str, open_index: int, end: Optional[int] = None) -> int:
    """
    Find the '"' closing the quote opened at open_index.

    A backslash escapes the character after it, so '\\"' does not
    close the quote.

    Raises:
        UnterminatedQuoteError: If no closing quote exists before end
    """
    if end is None:
        end = len(text)
    if text[open_index] != '"':
        raise ValueError(f"no quote at position {open_index}")

    i = open_index + 1
    while i < end:
        char = text[i]
        if char == '\\' and i + 1 < end:
            i += 2
            continue
        if char == '"':
            return i
        i += 1

    raise UnterminatedQuoteError(text, open_index)


def match_brace(text: str, open_index: int, end: Optional[int] = None) -> int:
    """
    Find the '}' matching the '{' at open_index.

    Nested braces are counted; brace characters inside quotes are
    inert.

    Raises:
        UnbalancedBraceError: If the depth never returns to zero before end
        UnterminatedQuoteError: If a quote inside the braces is not closed
    """
    if end is None:
        end = len(text)
    if text[open_index] != '{':
        raise ValueError(f"no brace at position {open_index}")

    depth = 0
    i = open_index
    while i < end:
        char = text[i]
        if char == '"':
            i = match_quote(text, i, end) + 1
            continue
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return i
        i += 1

    raise UnbalancedBraceError(text, open_index)


def tokenize(text: str, start: int = 0, end: Optional[int] = None) -> List[Token]:
    """
    Split [start, end) into whitespace-delimited tokens.

    A braced region or a quoted region always belongs to a single
    token, whatever whitespace or operators it contains.

    Example:
        >>> [t.value for t in tokenize('{echo a ; b} && echo "x y"')]
        ['{echo a ; b}', '&&', 'echo', '"x y"']
    """
    if end is None:
        end = len(text)

    tokens: List[Token] = []
    i = start
    while i < end:
        if text[i].isspace():
            i += 1
            continue

        token_start = i
        while i < end and not text[i].isspace():
            char = text[i]
            if char == '"':
                i = match_quote(text, i, end) + 1
            elif char == '{':
                i = match_brace(text, i, end) + 1
            elif char == '}':
                raise UnbalancedBraceError(text, i, "unexpected '}'")
            else:
                i += 1

        tokens.append(Token(text[token_start:i], token_start, i))

    return tokens


def is_operator(token: str) -> bool:
    """Check if a token splits an expression ('&&', '||', ';', '=')."""
    return token in EXPRESSION_OPERATORS


def is_pipe(token: str) -> bool:
    return token == PIPE


def is_redirect(token: str) -> bool:
    return token in REDIRECT_OPERATORS


def find_operator(tokens: List[Token]) -> Optional[int]:
    """Index of the leftmost expression operator token, or None."""
    for index, token in enumerate(tokens):
        if is_operator(token.value):
            return index
    return None
