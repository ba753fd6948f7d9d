"""
Path Resolver Module

Turns a command name into the path of an executable file, searching
the PATH constant of the shell's constant table (not the OS
environment).

Author: YSNRFD
Version: 1.0.0
"""

import os
from typing import Callable, Optional

from bracesh.exceptions import CommandNotFoundError
from bracesh.shell.constants import ConstantTable


def is_executable(path: str) -> bool:
    """Check if path is a regular file the shell may execute."""
    return os.path.isfile(path) and os.access(path, os.X_OK)


class PathResolver:
    """
    Resolves command names against PATH.

    Names containing '/' are used literally. Otherwise each
    ':'-separated PATH directory is tried in order and the first
    executable match wins. An empty entry means the current directory.

    Example:
        >>> table = ConstantTable(initial_path='/usr/bin:/bin')
        >>> PathResolver(table).resolve('env')
        '/usr/bin/env'
    """

    def __init__(
        self,
        constants: ConstantTable,
        is_executable: Callable[[str], bool] = is_executable,
        not_found_status: int = 127
    ):
        self._constants = constants
        self._is_executable = is_executable
        self._not_found_status = not_found_status

    def search_path(self) -> list[str]:
        path = self._constants.lookup('PATH') or ''
        return [directory or '.' for directory in path.split(':')] if path else []

    def find(self, name: str) -> Optional[str]:
        """Resolve name, returning None if nothing matches."""
        if not name:
            return None
        if '/' in name:
            return name if self._is_executable(name) else None
        for directory in self.search_path():
            candidate = os.path.join(directory, name)
            if self._is_executable(candidate):
                return candidate
        return None

    def resolve(self, name: str) -> str:
        """
        Resolve name to an executable path.

        Raises:
            CommandNotFoundError: If no executable matches
        """
        path = self.find(name)
        if path is None:
            raise CommandNotFoundError(name, status=self._not_found_status)
        return path
