"""
Process Spawner Module

The capability the runner uses to start a child process with a given
argv and standard streams. The runner never touches fork/exec
directly, so its logic can be exercised against a fake spawner that
only records what it was asked to do.

Author: YSNRFD
Version: 1.0.0
"""

import errno
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple

from bracesh.exceptions import CommandNotFoundError, ExecError, ProcessCreationError
from bracesh.logger import get_logger


# Exec failures caused by the file itself rather than by the system
_EXEC_ERRNOS = (errno.EACCES, errno.ENOEXEC, errno.EISDIR, errno.ENOTDIR)


class ExecutionMode(Enum):
    """Whether the shell waits for a process or leaves it running."""
    WAITED = auto()
    DETACHED = auto()


@dataclass(frozen=True)
class SpawnRequest:
    """
    Everything needed to start one pipeline stage.

    stdin/stdout are file descriptors owned by the caller; None means
    the stage inherits the shell's stream. process_group only applies
    to DETACHED requests: 0 starts a new group led by this process,
    any other value joins that group.
    """
    executable: str
    argv: Tuple[str, ...]
    stdin: Optional[int] = None
    stdout: Optional[int] = None
    env: Optional[dict[str, str]] = None
    mode: ExecutionMode = ExecutionMode.WAITED
    process_group: Optional[int] = None


def exit_status(returncode: int) -> int:
    """Map a child's return code to a shell exit status (signal N -> 128+N)."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class SpawnedProcess(ABC):
    """Handle on a started stage."""

    @property
    @abstractmethod
    def pid(self) -> int:
        ...

    @abstractmethod
    def wait(self) -> int:
        """Block until the process exits and return its exit status."""

    @abstractmethod
    def poll(self) -> Optional[int]:
        """Return the exit status if the process has exited, else None."""


class ProcessSpawner(ABC):
    """Capability to start processes."""

    @abstractmethod
    def spawn(self, request: SpawnRequest) -> SpawnedProcess:
        """
        Start a process.

        Raises:
            CommandNotFoundError: The executable vanished before exec
            ExecError: The system refused to execute the file
            ProcessCreationError: The process could not be created
        """


class PopenProcess(SpawnedProcess):
    """SpawnedProcess backed by subprocess.Popen."""

    def __init__(self, popen: subprocess.Popen):
        self._popen = popen

    @property
    def pid(self) -> int:
        return self._popen.pid

    def wait(self) -> int:
        return exit_status(self._popen.wait())

    def poll(self) -> Optional[int]:
        returncode = self._popen.poll()
        if returncode is None:
            return None
        return exit_status(returncode)


class SubprocessSpawner(ProcessSpawner):
    """
    Spawner that starts real processes.

    Example:
        >>> spawner = SubprocessSpawner()
        >>> proc = spawner.spawn(SpawnRequest('/bin/true', ('true',)))
        >>> proc.wait()
        0
    """

    def __init__(self, not_executable_status: int = 126, not_found_status: int = 127):
        self._logger = get_logger('runner')
        self._not_executable_status = not_executable_status
        self._not_found_status = not_found_status

    def spawn(self, request: SpawnRequest) -> SpawnedProcess:
        kwargs = {}
        if request.mode is ExecutionMode.DETACHED and request.process_group is not None:
            kwargs['process_group'] = request.process_group

        try:
            popen = subprocess.Popen(
                list(request.argv),
                executable=request.executable,
                stdin=request.stdin,
                stdout=request.stdout,
                env=request.env,
                **kwargs
            )
        except FileNotFoundError:
            raise CommandNotFoundError(request.argv[0], status=self._not_found_status)
        except OSError as e:
            if e.errno in _EXEC_ERRNOS:
                raise ExecError(
                    request.executable,
                    e.strerror or str(e),
                    status=self._not_executable_status
                )
            raise ProcessCreationError(request.argv[0], e.strerror or str(e), errno=e.errno)

        self._logger.debug(
            f"started {request.argv[0]}",
            pid=popen.pid,
            context={'mode': request.mode.name}
        )
        return PopenProcess(popen)
