"""
Shell Built-in Commands

Commands that must run inside the shell process itself because they
change the shell's own state.

Author: YSNRFD
Version: 1.0.0
"""

import os
from typing import Callable, List

from bracesh.exceptions import BuiltinError


class BuiltinCommands:
    """
    Built-in shell commands.

    These commands are executed directly by the shell without
    creating a new process.
    """

    def __init__(self, shell):
        """
        Initialize built-in commands.

        Args:
            shell: The shell instance
        """
        self._shell = shell
        self._commands: dict[str, Callable[[List[str]], int]] = {
            'cd': self.cmd_cd,
            'exit': self.cmd_exit,
        }

    def get_commands(self) -> dict[str, Callable[[List[str]], int]]:
        """Get all built-in commands."""
        return self._commands

    def is_builtin(self, name: str) -> bool:
        """Check if a command is built-in."""
        return name in self._commands

    def execute(self, name: str, args: List[str]) -> int:
        """
        Execute a built-in command.

        Args:
            name: Command name
            args: Arguments after the command name

        Returns:
            Exit code

        Raises:
            BuiltinError: If the command fails
        """
        return self._commands[name](args)

    def cmd_cd(self, args: List[str]) -> int:
        """Change the working directory."""
        if len(args) > 1:
            raise BuiltinError('cd', "too many arguments")

        if args:
            target = args[0]
        else:
            target = self._shell.constants.lookup('HOME') or os.path.expanduser('~')

        try:
            os.chdir(target)
        except OSError as e:
            raise BuiltinError('cd', f"{target}: {e.strerror or e}")
        return 0

    def cmd_exit(self, args: List[str]) -> int:
        """Ask the shell to stop after the current line."""
        if len(args) > 1:
            raise BuiltinError('exit', "too many arguments")

        status = self._shell.last_status
        if args:
            try:
                status = int(args[0]) & 0xFF
            except ValueError:
                raise BuiltinError('exit', f"{args[0]}: numeric argument required")

        self._shell.request_exit(status)
        return status
