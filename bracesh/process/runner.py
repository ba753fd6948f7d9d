"""
Process Runner Module

Executes a pipeline of expanded commands:
- Resolves every executable before anything starts
- Opens redirection targets and spools heredoc bodies
- Creates one OS pipe between each pair of adjacent stages
- Waits for foreground pipelines; detaches background ones into a new
  process group and reaps them later

Redirections always win over pipe wiring on the command they are
attached to: in 'a > f | b' the output of a goes to f and b reads an
empty stream; in 'a | b < f' b reads f. When a command has several
redirections for the same stream every target is opened in order and
the last one is used.

Author: YSNRFD
Version: 1.0.0
"""

import os
import sys
import tempfile
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import List, Optional, TextIO

from bracesh.core.config_loader import ProcessConfig, ShellConfig, get_config
from bracesh.exceptions import (
    PipeCreationError,
    RedirectFileNotFoundError,
    RedirectionError,
    ShellException,
)
from bracesh.logger import get_logger
from bracesh.shell.constants import ConstantTable
from bracesh.shell.invocation import ExpandedCommand, RedirectKind, RedirectionClause
from .resolver import PathResolver
from .spawner import (
    ExecutionMode,
    ProcessSpawner,
    SpawnedProcess,
    SpawnRequest,
    SubprocessSpawner,
)
from .states import PipelineState, can_transition


@dataclass
class PipelineJob:
    """A pipeline handed to the runner and the processes started for it."""
    commands: List[ExpandedCommand]
    mode: ExecutionMode
    state: PipelineState = PipelineState.RESOLVING
    processes: List[SpawnedProcess] = field(default_factory=list)
    pgid: Optional[int] = None
    status: Optional[int] = None

    @property
    def text(self) -> str:
        return " | ".join(" ".join(command.argv) for command in self.commands)

    def transition(self, state: PipelineState) -> None:
        if not can_transition(self.state, state):
            raise ValueError(f"invalid pipeline transition {self.state.name} -> {state.name}")
        self.state = state


@dataclass
class StageStreams:
    """Descriptors a stage reads from and writes to. None = inherit."""
    stdin: Optional[int] = None
    stdout: Optional[int] = None


class ProcessRunner:
    """
    Runs pipelines for the evaluator.

    Example:
        >>> runner = ProcessRunner(ConstantTable(initial_path='/bin:/usr/bin'))
        >>> runner.run([ExpandedCommand(['true'])])
        0
    """

    def __init__(
        self,
        constants: ConstantTable,
        spawner: Optional[ProcessSpawner] = None,
        resolver: Optional[PathResolver] = None,
        input_stream: Optional[TextIO] = None,
        prompt_stream: Optional[TextIO] = None,
        process_config: Optional[ProcessConfig] = None,
        shell_config: Optional[ShellConfig] = None
    ):
        config = get_config()
        self._process_config = process_config or config.process
        self._shell_config = shell_config or config.shell
        self._constants = constants
        self._spawner = spawner or SubprocessSpawner(
            not_executable_status=self._process_config.not_executable_status,
            not_found_status=self._process_config.command_not_found_status,
        )
        self._resolver = resolver or PathResolver(
            constants,
            not_found_status=self._process_config.command_not_found_status,
        )
        self._input = input_stream
        self._prompt_stream = prompt_stream
        self._jobs: List[PipelineJob] = []
        self._logger = get_logger('runner')

    @property
    def jobs(self) -> List[PipelineJob]:
        """Background jobs not yet reaped."""
        return list(self._jobs)

    def run(self, commands: List[ExpandedCommand], background: bool = False) -> int:
        """
        Run a pipeline.

        Returns:
            The exit status of the last stage, or 0 for a background
            pipeline

        Raises:
            ExecutionException: Resolution or redirection failed
            FatalShellError: A pipe or process could not be created
        """
        detach = background and self._process_config.detach_background
        mode = ExecutionMode.DETACHED if detach else ExecutionMode.WAITED
        job = PipelineJob(commands, mode)

        executables = [self._resolver.resolve(command.name) for command in commands]
        job.transition(PipelineState.LAUNCHING)

        try:
            with ExitStack() as stack:
                streams = self._open_redirections(commands, stack)
                self._connect_pipes(streams, stack)
                env = self._environment()

                for index, command in enumerate(commands):
                    request = SpawnRequest(
                        executable=executables[index],
                        argv=tuple(command.argv),
                        stdin=streams[index].stdin,
                        stdout=streams[index].stdout,
                        env=env,
                        mode=mode,
                        process_group=self._process_group(job),
                    )
                    process = self._spawner.spawn(request)
                    job.processes.append(process)
                    if mode is ExecutionMode.DETACHED and job.pgid is None:
                        job.pgid = process.pid
        except ShellException:
            self._abandon(job)
            raise

        if background:
            job.transition(PipelineState.DETACHED)
            self._jobs.append(job)
            self._logger.info(
                f"background job started: {job.text}",
                pid=job.pgid,
                context={'stages': len(job.processes)}
            )
            return 0

        job.transition(PipelineState.WAITING)
        statuses = [process.wait() for process in job.processes]
        job.status = statuses[-1]
        job.transition(PipelineState.COMPLETED)
        self._logger.debug(
            f"pipeline finished: {job.text}",
            context={'statuses': statuses}
        )
        return job.status

    def reap(self) -> List[PipelineJob]:
        """
        Collect background jobs whose stages have all exited.

        Never blocks. Returns the jobs that completed.
        """
        finished = []
        for job in list(self._jobs):
            statuses = [process.poll() for process in job.processes]
            if any(status is None for status in statuses):
                continue
            job.status = statuses[-1] if statuses else 0
            job.transition(PipelineState.COMPLETED)
            self._jobs.remove(job)
            finished.append(job)
            self._logger.info(
                f"background job done: {job.text}",
                pid=job.pgid,
                context={'status': job.status}
            )
        return finished

    def _process_group(self, job: PipelineJob) -> Optional[int]:
        if job.mode is not ExecutionMode.DETACHED:
            return None
        return 0 if job.pgid is None else job.pgid

    def _abandon(self, job: PipelineJob) -> None:
        """Deal with stages already started when launching failed."""
        if not job.processes:
            job.transition(PipelineState.COMPLETED)
            return
        if job.mode is ExecutionMode.DETACHED:
            job.transition(PipelineState.DETACHED)
            self._jobs.append(job)
            return
        job.transition(PipelineState.WAITING)
        for process in job.processes:
            process.wait()
        job.transition(PipelineState.COMPLETED)

    def _environment(self) -> dict[str, str]:
        """OS environment overlaid with the constant table as it is now."""
        env = dict(os.environ)
        env.update(self._constants.snapshot())
        return env

    def _connect_pipes(self, streams: List[StageStreams], stack: ExitStack) -> None:
        """Create N-1 pipes and wire every stream not taken by a redirection."""
        for index in range(len(streams) - 1):
            try:
                read_fd, write_fd = os.pipe()
            except OSError as e:
                raise PipeCreationError(e.strerror or str(e), errno=e.errno)
            stack.callback(os.close, read_fd)
            stack.callback(os.close, write_fd)

            upstream, downstream = streams[index], streams[index + 1]
            if upstream.stdout is None:
                upstream.stdout = write_fd
            else:
                self._logger.debug("stage output redirected; pipe left unused",
                                   context={'stage': index})
            if downstream.stdin is None:
                downstream.stdin = read_fd
            else:
                self._logger.debug("stage input redirected; pipe left unused",
                                   context={'stage': index + 1})

    def _open_redirections(
        self,
        commands: List[ExpandedCommand],
        stack: ExitStack
    ) -> List[StageStreams]:
        streams = []
        for command in commands:
            stage = StageStreams()
            for clause in command.redirections:
                fd = self._open_redirection(clause, stack)
                replaced = stage.stdin if clause.kind.is_input else stage.stdout
                if replaced is not None:
                    self._logger.debug("earlier redirection replaced",
                                       context={'target': clause.target})
                if clause.kind.is_input:
                    stage.stdin = fd
                else:
                    stage.stdout = fd
            streams.append(stage)
        return streams

    def _open_redirection(self, clause: RedirectionClause, stack: ExitStack) -> int:
        if clause.kind is RedirectKind.HEREDOC:
            spool = stack.enter_context(tempfile.TemporaryFile())
            body = clause.body
            if body is None:
                body = self.read_heredoc(clause.target)
            spool.write(body.encode())
            spool.flush()
            spool.seek(0)
            return spool.fileno()

        if clause.kind is RedirectKind.INPUT:
            flags = os.O_RDONLY
        elif clause.kind is RedirectKind.OUTPUT:
            flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
        else:
            flags = os.O_WRONLY | os.O_CREAT | os.O_APPEND

        try:
            fd = os.open(clause.target, flags, 0o666)
        except FileNotFoundError:
            if clause.kind is RedirectKind.INPUT:
                raise RedirectFileNotFoundError(clause.target)
            raise RedirectionError(clause.target, "no such directory")
        except OSError as e:
            raise RedirectionError(clause.target, e.strerror or str(e))

        stack.callback(os.close, fd)
        return fd

    def read_heredoc(self, delimiter: str) -> str:
        """Read lines from the shell's input until one equals delimiter."""
        stream = self._input if self._input is not None else sys.stdin
        interactive = hasattr(stream, 'isatty') and stream.isatty()
        prompt = self._prompt_stream if self._prompt_stream is not None else sys.stderr

        lines = []
        while True:
            if interactive:
                prompt.write(self._shell_config.heredoc_prompt)
                prompt.flush()
            line = stream.readline()
            if not line:
                self._logger.warning(
                    "heredoc ended by end of input",
                    context={'delimiter': delimiter}
                )
                break
            if line.rstrip('\n') == delimiter:
                break
            lines.append(line if line.endswith('\n') else line + '\n')
        return ''.join(lines)
