"""
bracesh Shell Module

The object a driver talks to: it owns the constant table, the process
runner and the evaluator, and exposes init() / evaluate() / finish().
A minimal read loop is included for interactive use.

Author: YSNRFD
Version: 1.0.0
"""

import sys
from typing import Callable, Optional, TextIO

from bracesh.core.config_loader import Config, get_config
from bracesh.exceptions import FatalShellError
from bracesh.logger import get_logger
from bracesh.process.runner import ProcessRunner
from bracesh.process.spawner import ProcessSpawner
from bracesh.process.resolver import PathResolver
from .builtins import BuiltinCommands
from .constants import ConstantTable
from .evaluator import Evaluator


class Shell:
    """
    bracesh shell.

    Example:
        >>> shell = Shell()
        >>> shell.init()
        >>> shell.evaluate('GREETING = hi ; echo $GREETING')
        hi
        0
        >>> shell.finish()
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        spawner: Optional[ProcessSpawner] = None,
        resolver_factory: Optional[Callable[[ConstantTable], PathResolver]] = None,
        stdin: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None
    ):
        self._config = config or get_config()
        self._spawner = spawner
        self._resolver_factory = resolver_factory
        self._stdin = stdin
        self._stderr = stderr
        self._logger = get_logger('shell')

        self._constants: Optional[ConstantTable] = None
        self._runner: Optional[ProcessRunner] = None
        self._evaluator: Optional[Evaluator] = None
        self._builtins = BuiltinCommands(self)

        self._running = False
        self._exiting = False
        self._exit_status = 0
        self._last_status = 0

    @property
    def constants(self) -> ConstantTable:
        if self._constants is None:
            raise RuntimeError("shell is not initialized; call init() first")
        return self._constants

    @property
    def runner(self) -> ProcessRunner:
        if self._runner is None:
            raise RuntimeError("shell is not initialized; call init() first")
        return self._runner

    @property
    def evaluator(self) -> Evaluator:
        if self._evaluator is None:
            raise RuntimeError("shell is not initialized; call init() first")
        return self._evaluator

    @property
    def last_status(self) -> int:
        return self._last_status

    @property
    def exiting(self) -> bool:
        return self._exiting

    @property
    def exit_status(self) -> int:
        return self._exit_status

    @property
    def input_stream(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def error_stream(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def init(self) -> None:
        """Create the constant table, seeded with PATH, and the evaluator."""
        self._constants = ConstantTable(initial_path=self._config.shell.initial_path)

        resolver = None
        if self._resolver_factory is not None:
            resolver = self._resolver_factory(self._constants)

        self._runner = ProcessRunner(
            self._constants,
            spawner=self._spawner,
            resolver=resolver,
            input_stream=self.input_stream,
            prompt_stream=self.error_stream,
            process_config=self._config.process,
            shell_config=self._config.shell,
        )
        self._evaluator = Evaluator(
            self._constants,
            self._runner,
            builtins=self._builtins,
            report=self.report,
        )
        self._exiting = False
        self._exit_status = 0
        self._last_status = 0
        self._logger.debug("shell initialized", context={'PATH': self._config.shell.initial_path})

    def evaluate(self, line: str) -> int:
        """
        Evaluate one line of input.

        Returns:
            Exit status of the line

        Raises:
            FatalShellError: If a process or pipe could not be created
        """
        self.runner.reap()
        status = self.evaluator.evaluate(line.rstrip('\n'))
        self._last_status = status
        return status

    def finish(self) -> None:
        """Reap finished background jobs and release the constant table."""
        if self._runner is not None:
            self._runner.reap()
            for job in self._runner.jobs:
                self._logger.info(f"leaving background job running: {job.text}", pid=job.pgid)
        if self._constants is not None:
            self._constants.clear()
        self._constants = None
        self._runner = None
        self._evaluator = None
        self._logger.debug("shell finished")

    def report(self, message: str) -> None:
        """Show an error message to the user."""
        print(f"bracesh: {message}", file=self.error_stream)

    def request_exit(self, status: int) -> None:
        """Request the shell to exit after the current line."""
        self._exiting = True
        self._exit_status = status

    def stop(self) -> None:
        """Stop the read loop."""
        self._running = False

    def run(self) -> int:
        """
        Run the interactive read loop until end of input or 'exit'.

        Returns:
            The status of the last line
        """
        self._running = True
        stream = self.input_stream
        interactive = hasattr(stream, 'isatty') and stream.isatty()

        while self._running and not self._exiting:
            if interactive:
                self.error_stream.write(self._config.shell.prompt)
                self.error_stream.flush()

            try:
                line = stream.readline()
            except KeyboardInterrupt:
                self.error_stream.write("^C\n")
                continue

            if not line:
                break

            try:
                self.evaluate(line)
            except KeyboardInterrupt:
                self.error_stream.write("\n")
                self._last_status = 130
                continue
            except FatalShellError as e:
                self._logger.critical(e.message, context=e.context)
                self.report(f"fatal: {e.message}")
                self._last_status = 1
                break

        self._running = False
        if self._exiting:
            return self._exit_status
        return self._last_status

    def run_script(self, script: str) -> int:
        """
        Evaluate several lines, stopping early on 'exit'.

        Returns:
            Last exit code
        """
        status = 0
        for line in script.split('\n'):
            if not line.strip():
                continue
            status = self.evaluate(line)
            if self._exiting:
                return self._exit_status
        return status


def create_shell(config: Optional[Config] = None, **kwargs) -> Shell:
    """Factory function to create an initialized shell."""
    shell = Shell(config, **kwargs)
    shell.init()
    return shell

