"""Lifecycle events dispatched while a git command runs.

gitwrapper.events
~~~~~~~~~~~~~~~~~

A command emits :class:`GitPrepareEvent` first, then either
:class:`GitBypassEvent`, or zero or more :class:`GitOutputEvent` followed by
:class:`GitSuccessEvent` or :class:`GitErrorEvent`.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as t

if t.TYPE_CHECKING:
    from gitwrapper.command import GitCommand
    from gitwrapper.exc import GitExecutionError
    from gitwrapper.process import GitProcess
    from gitwrapper.wrapper import GitWrapper


class EventKind(enum.Enum):
    """Kinds of events dispatched by :class:`~gitwrapper.process.GitProcess`."""

    Prepare = "PREPARE"
    Output = "OUTPUT"
    Success = "SUCCESS"
    Error = "ERROR"
    Bypass = "BYPASS"


class OutputStream(enum.Enum):
    """Stream a chunk of output was read from."""

    Out = "OUT"
    Err = "ERR"


class PrepareOutcome(enum.Enum):
    """Decision a prepare listener may return.

    Returning :attr:`Bypass` skips the subprocess. Any other return value,
    including ``None``, lets the command proceed.
    """

    Proceed = "PROCEED"
    Bypass = "BYPASS"


@dataclasses.dataclass(frozen=True)
class GitEvent:
    """Fields shared by every lifecycle event."""

    kind: t.ClassVar[EventKind]

    wrapper: GitWrapper
    process: GitProcess
    command: GitCommand


@dataclasses.dataclass(frozen=True)
class GitPrepareEvent(GitEvent):
    """Dispatched before the command runs. Listeners may bypass it."""

    kind: t.ClassVar[EventKind] = EventKind.Prepare


@dataclasses.dataclass(frozen=True)
class GitOutputEvent(GitEvent):
    """Dispatched for each chunk read from the process's stdout or stderr."""

    kind: t.ClassVar[EventKind] = EventKind.Output

    stream: OutputStream = OutputStream.Out
    buffer: str = ""

    def is_error(self) -> bool:
        """Return True if the chunk came from the error stream."""
        return self.stream is OutputStream.Err


@dataclasses.dataclass(frozen=True)
class GitSuccessEvent(GitEvent):
    """Dispatched after git exits with status 0."""

    kind: t.ClassVar[EventKind] = EventKind.Success


@dataclasses.dataclass(frozen=True)
class GitErrorEvent(GitEvent):
    """Dispatched after git fails or times out, before the error is raised."""

    kind: t.ClassVar[EventKind] = EventKind.Error

    exception: GitExecutionError | None = None


@dataclasses.dataclass(frozen=True)
class GitBypassEvent(GitEvent):
    """Dispatched instead of running a command flagged to skip execution."""

    kind: t.ClassVar[EventKind] = EventKind.Bypass

