"""
Word Expansion Module

Quote removal and $NAME substitution for invocation words.

Author: YSNRFD
Version: 1.0.0
"""

from .constants import ConstantTable


def unquote(word: str) -> str:
    """
    Remove double-quote pairs from a word.

    Inside quotes a backslash escapes '"' and '\\'; any other
    backslash is kept. Outside quotes every character is literal.

    Example:
        >>> unquote('"a b"')
        'a b'
        >>> unquote('pre"fix \\"x\\""')
        'prefix "x"'
    """
    if '"' not in word:
        return word

    out = []
    in_quote = False
    i = 0
    while i < len(word):
        char = word[i]
        if char == '"':
            in_quote = not in_quote
            i += 1
            continue
        if in_quote and char == '\\' and i + 1 < len(word) and word[i + 1] in '"\\':
            out.append(word[i + 1])
            i += 2
            continue
        out.append(char)
        i += 1
    return ''.join(out)


def expand(token: str, constants: ConstantTable) -> str:
    """
    Substitute every $NAME in a token with its constant value.

    NAME is the longest run of ASCII letters and digits after '$'. Undefined
    names expand to the empty string. A '$' not followed by a letter or
    digit is kept as is. Substituted values are not scanned again.

    Example:
        >>> table = ConstantTable()
        >>> table.define('X', '1')
        >>> expand('a$X-$Y$', table)
        'a1-$'
    """
    if '$' not in token:
        return token

    out = []
    i = 0
    length = len(token)
    while i < length:
        char = token[i]
        if char != '$':
            out.append(char)
            i += 1
            continue

        j = i + 1
        while j < length and token[j].isascii() and token[j].isalnum():
            j += 1

        if j == i + 1:
            out.append('$')
        else:
            out.append(constants.lookup(token[i + 1:j]) or '')
        i = j

    return ''.join(out)


def expand_word(word: str, constants: ConstantTable) -> str:
    """Quote removal followed by variable expansion."""
    return expand(unquote(word), constants)
