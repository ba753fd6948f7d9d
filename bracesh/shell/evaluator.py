"""
Evaluator Module

Walks the syntax tree of a line and gives each operator its meaning:
- 'a && b': run b only if a succeeded
- 'a || b': run b only if a failed
- 'a ; b':  run a, then b
- 'N = v':  define constant N

Statements are either braced sub-expressions, evaluated recursively,
or pipelines, handed to the process runner. Heredoc bodies for the
whole line are read from the input before the first statement runs.

Error handling:
- Parse errors are reported and the line returns PARSE_ERROR_STATUS
  without running anything.
- Execution errors (command not found, bad redirection, invalid
  identifier) are reported and become the statement's exit status.
- Fatal errors propagate to the caller untouched.

Author: YSNRFD
Version: 1.0.0
"""

import sys
from dataclasses import replace
from typing import Callable, Optional

from bracesh.exceptions import (
    BuiltinError,
    ExecutionException,
    InvalidIdentifierError,
    ParseException,
)
from bracesh.logger import get_logger
from bracesh.process.runner import ProcessRunner
from .builtins import BuiltinCommands
from .constants import ConstantTable, is_identifier
from .expansion import expand_word, unquote
from .invocation import Command, Pipeline, RedirectKind
from .parser import Assignment, Braced, Compound, Node, parse, parse_statement


# Exit status of a line that failed to parse
PARSE_ERROR_STATUS = 2


def _print_error(message: str) -> None:
    print(f"bracesh: {message}", file=sys.stderr)


class Evaluator:
    """
    Evaluates lines of shell syntax.

    Example:
        >>> table = ConstantTable(initial_path='/bin:/usr/bin')
        >>> evaluator = Evaluator(table, ProcessRunner(table))
        >>> evaluator.evaluate('false || true')
        0
    """

    def __init__(
        self,
        constants: ConstantTable,
        runner: ProcessRunner,
        builtins: Optional[BuiltinCommands] = None,
        report: Optional[Callable[[str], None]] = None
    ):
        self._constants = constants
        self._runner = runner
        self._builtins = builtins
        self._report = report or _print_error
        self._logger = get_logger('evaluator')
        self.last_error: Optional[Exception] = None

    @property
    def constants(self) -> ConstantTable:
        return self._constants

    def evaluate(self, line: str) -> int:
        """
        Parse and evaluate one line.

        Returns:
            Exit status of the line (0 = success)

        Raises:
            FatalShellError: If a process or pipe could not be created
        """
        self.last_error = None
        try:
            tree = parse(line)
        except ParseException as e:
            return self._parse_failed(e)

        if tree is None:
            return 0
        return self.evaluate_node(self.read_heredocs(tree))

    # The line is parsed as a whole, so expressions and lines are the same thing.
    evaluate_expression = evaluate

    def evaluate_statement(self, text: str) -> int:
        """Parse and evaluate text as a single statement."""
        self.last_error = None
        try:
            tree = parse_statement(text)
        except ParseException as e:
            return self._parse_failed(e)

        if tree is None:
            return 0
        return self.evaluate_node(self.read_heredocs(tree))

    def read_heredocs(self, node: Node) -> Node:
        """
        Read the body of every heredoc in the tree, left to right.

        Bodies are consumed from the shell's input before anything on
        the line runs, so a heredoc whose command is skipped by '&&' or
        '||', or fails to resolve, never leaves its lines behind to be
        read as commands.

        Returns:
            A copy of the tree with each heredoc clause's body filled in
        """
        if isinstance(node, Compound):
            left = self.read_heredocs(node.left)
            right = self.read_heredocs(node.right)
            return replace(node, left=left, right=right)
        if isinstance(node, Braced):
            if node.body is None:
                return node
            return replace(node, body=self.read_heredocs(node.body))
        if isinstance(node, Pipeline):
            return replace(node, commands=tuple(self._read_bodies(c) for c in node.commands))
        return node

    def _read_bodies(self, command: Command) -> Command:
        if not any(c.kind is RedirectKind.HEREDOC for c in command.redirections):
            return command
        redirections = []
        for clause in command.redirections:
            if clause.kind is RedirectKind.HEREDOC:
                clause = replace(clause, body=self._runner.read_heredoc(unquote(clause.target)))
            redirections.append(clause)
        return replace(command, redirections=tuple(redirections))

    def evaluate_node(self, node: Node) -> int:
        """Evaluate an already parsed tree."""
        if isinstance(node, Compound):
            return self._evaluate_compound(node)
        if isinstance(node, Braced):
            if node.body is None:
                return 0
            return self.evaluate_node(node.body)
        if isinstance(node, Assignment):
            return self._guarded(self._evaluate_assignment, node)
        if isinstance(node, Pipeline):
            return self._guarded(self._evaluate_pipeline, node)
        raise TypeError(f"cannot evaluate {type(node).__name__}")

    def _evaluate_compound(self, node: Compound) -> int:
        status = self.evaluate_node(node.left)

        if node.operator == '&&':
            if status != 0:
                return status
            return self.evaluate_node(node.right)

        if node.operator == '||':
            if status == 0:
                return 0
            return self.evaluate_node(node.right)

        if node.operator == ';':
            return self.evaluate_node(node.right)

        raise ValueError(f"unknown operator {node.operator!r}")

    def _evaluate_assignment(self, node: Assignment) -> int:
        if not is_identifier(node.name):
            raise InvalidIdentifierError(node.name)

        value = expand_word(node.value, self._constants)
        self._constants.define(node.name, value)
        self._logger.debug(f"defined {node.name}", context={'value': value})
        return 0

    def _evaluate_pipeline(self, node: Pipeline) -> int:
        commands = node.expand(self._constants)

        if self._builtins is not None:
            names = [command.name for command in commands]
            builtin = next((name for name in names if self._builtins.is_builtin(name)), None)
            if builtin is not None:
                if len(commands) > 1 or node.background:
                    raise BuiltinError(builtin, "cannot run in a pipeline or in the background")
                if commands[0].redirections:
                    raise BuiltinError(builtin, "redirections are not supported")
                return self._builtins.execute(builtin, commands[0].argv[1:])

        return self._runner.run(commands, background=node.background)

    def _guarded(self, evaluate: Callable[[Node], int], node: Node) -> int:
        """Run a leaf evaluation, turning execution errors into a status."""
        try:
            return evaluate(node)
        except ExecutionException as e:
            self.last_error = e
            self._logger.warning(e.message, context={'error_code': e.error_code})
            self._report(e.message)
            return e.status

    def _parse_failed(self, error: ParseException) -> int:
        self.last_error = error
        self._logger.warning(error.message, context={'construct': error.construct})
        self._report(error.describe())
        return PARSE_ERROR_STATUS
