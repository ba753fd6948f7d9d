"""
Expression Parser Module

Parses a line of shell syntax into a syntax tree.

Grammar ('+' = whitespace):
    expr: s / s + op + expr
    s:    {expr} / NAME=value / invocation
    op:   && / || / ; / =

The split point of an expression is the leftmost operator token found
at brace depth 0 outside quotes, so 'a ; b && c' is 'a ; (b && c)'.
An '=' binds only to the statement right after it:
'A = x ; echo $A' is '(A = x) ; (echo $A)'.

Author: YSNRFD
Version: 1.0.0
"""

import re
from dataclasses import dataclass
from typing import NamedTuple, Optional, Union

from bracesh.exceptions import (
    EmptyLeftOperandError,
    MissingRightOperandError,
    UnbalancedBraceError,
)
from bracesh.logger import get_logger
from .invocation import Pipeline, parse_invocation
from .scanner import find_operator, match_brace, tokenize, trim


_COMPACT_ASSIGNMENT = re.compile(r'^([A-Za-z][A-Za-z0-9]*)=(.*)$', re.DOTALL)

_logger = get_logger('parser')


@dataclass(frozen=True)
class Compound:
    """Two sides joined by '&&', '||' or ';'."""
    operator: str
    left: 'Node'
    right: 'Node'


@dataclass(frozen=True)
class Braced:
    """A braced sub-expression. body is None for '{}'."""
    body: Optional['Node']


@dataclass(frozen=True)
class Assignment:
    """
    NAME = value. Both sides are kept as written.

    The value is not stored literally: when the assignment is evaluated
    it gets the same quote removal and $NAME expansion as a command
    argument, so 'A = $B' stores the current value of B.
    """
    name: str
    value: str


Node = Union[Compound, Braced, Assignment, Pipeline]


class ExpressionSplit(NamedTuple):
    """Result of splitting an expression at its leftmost operator."""
    left: str
    operator: Optional[str]
    right: str


def split_expression(line: str, start: int = 0, end: Optional[int] = None) -> ExpressionSplit:
    """
    Split an expression into (left statement, operator, right expression).

    Example:
        >>> split_expression('a ; b && c')
        ExpressionSplit(left='a', operator=';', right='b && c')
        >>> split_expression('  ')
        ExpressionSplit(left='', operator=None, right='')

    Raises:
        EmptyLeftOperandError: If the expression starts with an operator
        MissingRightOperandError: If the expression ends with an operator
    """
    span = trim(line, start, end)
    if span is None:
        return ExpressionSplit('', None, '')
    start, end = span

    tokens = tokenize(line, start, end)
    index = find_operator(tokens)
    if index is None:
        return ExpressionSplit(line[start:end], None, '')

    operator = tokens[index]
    if index == 0:
        raise EmptyLeftOperandError(operator.value, line, operator.start)
    if index == len(tokens) - 1:
        raise MissingRightOperandError(operator.value, line, operator.start)

    return ExpressionSplit(
        line[start:operator.start].strip(),
        operator.value,
        line[operator.end:end].strip(),
    )


def parse_expression(line: str, start: int = 0, end: Optional[int] = None) -> Optional[Node]:
    """
    Parse [start, end) of line as an expression.

    Returns:
        The syntax tree, or None if the range is empty
    """
    span = trim(line, start, end)
    if span is None:
        return None
    start, end = span

    tokens = tokenize(line, start, end)
    index = find_operator(tokens)
    if index is None:
        return _parse_statement(line, start, end)

    operator = tokens[index]
    if index == 0:
        raise EmptyLeftOperandError(operator.value, line, operator.start)
    if index == len(tokens) - 1:
        raise MissingRightOperandError(operator.value, line, operator.start)

    if operator.value == '=':
        return _parse_assignment(line, start, end, tokens, index)

    return Compound(
        operator.value,
        _parse_statement(line, start, operator.start),
        parse_expression(line, operator.end, end),
    )


def _parse_assignment(line: str, start: int, end: int, tokens, index: int) -> Node:
    """Parse 'NAME = value [op expr]' where tokens[index] is the '='."""
    equals = tokens[index]
    name = line[start:equals.start].strip()

    following = None
    for position in range(index + 1, len(tokens)):
        if tokens[position].value in ('&&', '||', ';'):
            following = position
            break

    if following is None:
        return Assignment(name, line[equals.end:end].strip())

    operator = tokens[following]
    if following == index + 1:
        raise MissingRightOperandError('=', line, equals.start)
    if following == len(tokens) - 1:
        raise MissingRightOperandError(operator.value, line, operator.start)

    return Compound(
        operator.value,
        Assignment(name, line[equals.end:operator.start].strip()),
        parse_expression(line, operator.end, end),
    )


def parse_statement(line: str, start: int = 0, end: Optional[int] = None) -> Optional[Node]:
    """
    Classify and parse [start, end) of line as a statement.

    Text that still holds a top-level operator is parsed as an
    expression instead.
    """
    span = trim(line, start, end)
    if span is None:
        return None
    start, end = span

    if find_operator(tokenize(line, start, end)) is not None:
        return parse_expression(line, start, end)
    return _parse_statement(line, start, end)


def _parse_statement(line: str, start: int, end: int) -> Node:
    start, end = trim(line, start, end)

    if line[start] == '{':
        close = match_brace(line, start, end)
        if close != end - 1:
            raise UnbalancedBraceError(line, close + 1, "unexpected text after '}'")
        return Braced(parse_expression(line, start + 1, close))

    match = _COMPACT_ASSIGNMENT.match(line[start:end])
    if match and len(tokenize(line, start, end)) == 1:
        return Assignment(match.group(1), match.group(2))

    return parse_invocation(line, start, end)


def parse(line: str) -> Optional[Node]:
    """
    Parse a complete input line.

    Example:
        >>> parse('true && echo yes')
        Compound(operator='&&', left=Pipeline(...), right=Pipeline(...))

    Returns:
        The syntax tree, or None for a blank line

    Raises:
        ParseException: If the line is not well formed
    """
    tree = parse_expression(line)
    _logger.debug("parsed line", context={'line': line, 'tree': type(tree).__name__})
    return tree
