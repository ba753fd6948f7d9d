"""
Constant Table Module

User-defined NAME -> value strings substituted into arguments through
$NAME. The table is owned by the shell and mutated only by the
evaluator, one line at a time.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Iterator, Optional


def is_identifier(name: str) -> bool:
    """
    Check whether a name can be defined in the table.

    A valid name starts with an ASCII letter; the remaining characters
    are ASCII letters or digits.
    """
    if not name or not name.isascii() or not name[0].isalpha():
        return False
    return name.isalnum()


class ConstantTable:
    """
    Mapping of constant names to string values.

    Example:
        >>> table = ConstantTable(initial_path='/bin')
        >>> table.lookup('PATH')
        '/bin'
        >>> table.lookup('MISSING') is None
        True
    """

    def __init__(self, initial_path: Optional[str] = None):
        self._values: dict[str, str] = {}
        if initial_path is not None:
            self._values['PATH'] = initial_path

    def define(self, name: str, value: str) -> None:
        """
        Define or overwrite a constant.

        Raises:
            ValueError: If name is not a valid identifier
        """
        if not is_identifier(name):
            raise ValueError(f"invalid identifier: {name!r}")
        self._values[name] = value

    def lookup(self, name: str) -> Optional[str]:
        """Get a constant's value, or None if it is not defined."""
        return self._values.get(name)

    def clear(self) -> None:
        self._values.clear()

    def snapshot(self) -> dict[str, str]:
        """Copy of the table as it is right now."""
        return dict(self._values)

    def names(self) -> list[str]:
        return sorted(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __repr__(self) -> str:
        return f"ConstantTable({self._values!r})"
