"""
Invocation Parser Module

Parses the text of a statement that is not a braced expression into a
pipeline of commands:
- Pipe boundaries (|)
- Redirections (<, <<, >, >>)
- Background execution (trailing &)
- Quoted arguments

Words are kept raw at parse time. Quote removal and $NAME expansion
happen when the pipeline is about to run, so assignments made earlier
on the same line are visible.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Tuple

from bracesh.exceptions import (
    BackgroundMidPipelineError,
    DanglingPipeError,
    EmptyCommandError,
    MissingRedirectTargetError,
)
from .constants import ConstantTable
from .expansion import expand_word, unquote
from .scanner import BACKGROUND, Token, is_pipe, is_redirect, tokenize


class RedirectKind(Enum):
    """Redirection operators and the descriptor they replace."""
    INPUT = '<'
    HEREDOC = '<<'
    OUTPUT = '>'
    APPEND = '>>'

    @property
    def is_input(self) -> bool:
        return self in (RedirectKind.INPUT, RedirectKind.HEREDOC)


@dataclass(frozen=True)
class RedirectionClause:
    """
    A redirection attached to one command.

    body holds the text of a heredoc once it has been read from the
    shell's input; it stays None for every other kind.
    """
    kind: RedirectKind
    target: str
    body: Optional[str] = None


@dataclass(frozen=True)
class Command:
    """
    One pipeline segment as written.

    words[0] is the executable name and also argv[0].
    """
    words: Tuple[str, ...]
    redirections: Tuple[RedirectionClause, ...] = ()

    @property
    def name(self) -> str:
        return unquote(self.words[0])

    def expand(self, constants: ConstantTable) -> 'ExpandedCommand':
        """Produce the argv and redirection targets the runner will use."""
        redirections = []
        for clause in self.redirections:
            if clause.kind is RedirectKind.HEREDOC:
                target = unquote(clause.target)
            else:
                target = expand_word(clause.target, constants)
            redirections.append(RedirectionClause(clause.kind, target, clause.body))
        return ExpandedCommand(
            argv=[expand_word(word, constants) for word in self.words],
            redirections=redirections,
        )


@dataclass
class ExpandedCommand:
    """A command ready to be resolved and launched."""
    argv: List[str]
    redirections: List[RedirectionClause] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.argv[0]


@dataclass(frozen=True)
class Pipeline:
    """Commands connected by pipes, optionally run in the background."""
    commands: Tuple[Command, ...]
    background: bool = False
    text: str = ""

    def expand(self, constants: ConstantTable) -> List[ExpandedCommand]:
        return [command.expand(constants) for command in self.commands]


def split_segments(line: str, tokens: List[Token]) -> List[List[Token]]:
    """
    Split invocation tokens at standalone '|' tokens.

    Raises:
        DanglingPipeError: If a pipe has no command on one of its sides
    """
    segments: List[List[Token]] = []
    current: List[Token] = []

    for token in tokens:
        if is_pipe(token.value):
            if not current:
                raise DanglingPipeError(line, token.start)
            segments.append(current)
            current = []
        else:
            current.append(token)

    if not current:
        raise DanglingPipeError(line, tokens[-1].start, "pipe has no command after it")
    segments.append(current)
    return segments


def parse_command(line: str, tokens: List[Token]) -> Tuple[Command, bool]:
    """
    Parse one pipeline segment.

    Returns:
        The command and whether the segment ended with '&'
    """
    background = False
    if tokens[-1].value == BACKGROUND:
        background = True
        marker = tokens[-1]
        tokens = tokens[:-1]
        if not tokens:
            raise EmptyCommandError(line, marker.start)

    for token in tokens:
        if token.value == BACKGROUND:
            raise BackgroundMidPipelineError(line, token.start, "'&' must end the statement")

    words: List[str] = []
    redirections: List[RedirectionClause] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if is_redirect(token.value):
            if i + 1 >= len(tokens) or is_redirect(tokens[i + 1].value):
                raise MissingRedirectTargetError(token.value, line, token.start)
            redirections.append(
                RedirectionClause(RedirectKind(token.value), tokens[i + 1].value)
            )
            i += 2
            continue
        words.append(token.value)
        i += 1

    if not words:
        raise EmptyCommandError(line, tokens[0].start)

    return Command(tuple(words), tuple(redirections)), background


def parse_invocation(line: str, start: int = 0, end: Optional[int] = None) -> Pipeline:
    """
    Parse [start, end) of line as a pipeline.

    Example:
        >>> p = parse_invocation('ls -l | grep x > out &')
        >>> [c.words for c in p.commands], p.background
        ([('ls', '-l'), ('grep', 'x')], True)

    Raises:
        DanglingPipeError, BackgroundMidPipelineError,
        MissingRedirectTargetError, EmptyCommandError
    """
    if end is None:
        end = len(line)

    tokens = tokenize(line, start, end)
    if not tokens:
        raise EmptyCommandError(line, start)

    segments = split_segments(line, tokens)
    last = len(segments) - 1
    commands: List[Command] = []
    background = False

    for index, segment in enumerate(segments):
        command, segment_background = parse_command(line, segment)
        if segment_background and index != last:
            raise BackgroundMidPipelineError(line, segment[-1].start)
        background = segment_background
        commands.append(command)

    return Pipeline(tuple(commands), background, line[start:end].strip())
