"""
Pipeline States Module

Defines the lifecycle states a pipeline goes through while the runner
executes it.

Author: YSNRFD
Version: 1.0.0
"""

from enum import Enum, auto


class PipelineState(Enum):
    """
    Pipeline lifecycle states.

    State transitions:
        RESOLVING -> LAUNCHING: Every command name resolved to a file
        LAUNCHING -> WAITING: Foreground stages started
        LAUNCHING -> DETACHED: Background stages started in a new group
        WAITING -> COMPLETED: Every stage exited
        DETACHED -> COMPLETED: Every stage exited and was reaped
    """

    RESOLVING = auto()
    """Looking up executables on PATH."""

    LAUNCHING = auto()
    """Opening redirections, creating pipes and starting stages."""

    WAITING = auto()
    """The shell is blocked until every stage exits."""

    DETACHED = auto()
    """Running in the background; the shell did not wait."""

    COMPLETED = auto()
    """Every stage has exited."""


VALID_TRANSITIONS: dict[PipelineState, tuple[PipelineState, ...]] = {
    PipelineState.RESOLVING: (PipelineState.LAUNCHING, PipelineState.COMPLETED),
    PipelineState.LAUNCHING: (
        PipelineState.WAITING,
        PipelineState.DETACHED,
        PipelineState.COMPLETED,
    ),
    PipelineState.WAITING: (PipelineState.COMPLETED,),
    PipelineState.DETACHED: (PipelineState.COMPLETED,),
    PipelineState.COMPLETED: (),
}


def can_transition(current: PipelineState, target: PipelineState) -> bool:
    """Check if a pipeline may move from current to target."""
    return target in VALID_TRANSITIONS[current]
