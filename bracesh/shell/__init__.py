"""
bracesh Shell Module

The expression parser and evaluator:
- Scanning and tokenizing
- Expression, statement and invocation parsing
- Variable expansion
- Operator semantics and built-in commands
"""

from .shell import Shell, create_shell
from .constants import ConstantTable, is_identifier
from .evaluator import Evaluator, PARSE_ERROR_STATUS
from .builtins import BuiltinCommands
from .expansion import expand, expand_word, unquote
from .invocation import (
    Command,
    ExpandedCommand,
    Pipeline,
    RedirectKind,
    RedirectionClause,
    parse_invocation,
)
from .parser import (
    Assignment,
    Braced,
    Compound,
    ExpressionSplit,
    parse,
    parse_expression,
    parse_statement,
    split_expression,
)
from .scanner import Token, match_brace, match_quote, tokenize, trim, is_operator

__all__ = [
    'Shell',
    'create_shell',
    'ConstantTable',
    'is_identifier',
    'Evaluator',
    'PARSE_ERROR_STATUS',
    'BuiltinCommands',
    'expand',
    'expand_word',
    'unquote',
    'Command',
    'ExpandedCommand',
    'Pipeline',
    'RedirectKind',
    'RedirectionClause',
    'parse_invocation',
    'Assignment',
    'Braced',
    'Compound',
    'ExpressionSplit',
    'parse',
    'parse_expression',
    'parse_statement',
    'split_expression',
    'Token',
    'match_brace',
    'match_quote',
    'tokenize',
    'trim',
    'is_operator',
]
