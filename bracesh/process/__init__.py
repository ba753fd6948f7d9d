"""
bracesh Process Module

Runs pipelines as operating system processes:
- PATH resolution
- Pipe and redirection wiring
- Foreground waiting and background detachment
"""

from .states import PipelineState
from .spawner import (
    ExecutionMode,
    ProcessSpawner,
    SpawnedProcess,
    SpawnRequest,
    SubprocessSpawner,
    exit_status,
)
from .resolver import PathResolver, is_executable
from .runner import PipelineJob, ProcessRunner

__all__ = [
    'PipelineState',
    'ExecutionMode',
    'ProcessSpawner',
    'SpawnedProcess',
    'SpawnRequest',
    'SubprocessSpawner',
    'exit_status',
    'PathResolver',
    'is_executable',
    'PipelineJob',
    'ProcessRunner',
]
