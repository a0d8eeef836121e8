"""gitwrapper, a typed, event-instrumented API wrapper for the git binary."""

from .__about__ import (
    __author__,
    __copyright__,
    __description__,
    __email__,
    __license__,
    __package_name__,
    __title__,
    __version__,
)
from .branches import GitBranches
from .command import GitCommand
from .dispatcher import EventDispatcher
from .events import (
    EventKind,
    GitBypassEvent,
    GitErrorEvent,
    GitEvent,
    GitOutputEvent,
    GitPrepareEvent,
    GitSuccessEvent,
    OutputStream,
    PrepareOutcome,
)
from .process import GitProcess
from .subscribers import GitLoggerEventSubscriber, StreamOutputEventSubscriber
from .working_copy import GitWorkingCopy
from .wrapper import GitWrapper

__all__ = (
    "EventDispatcher",
    "EventKind",
    "GitBranches",
    "GitBypassEvent",
    "GitCommand",
    "GitErrorEvent",
    "GitEvent",
    "GitLoggerEventSubscriber",
    "GitOutputEvent",
    "GitPrepareEvent",
    "GitProcess",
    "GitSuccessEvent",
    "GitWorkingCopy",
    "GitWrapper",
    "OutputStream",
    "PrepareOutcome",
    "StreamOutputEventSubscriber",
    "__author__",
    "__copyright__",
    "__description__",
    "__email__",
    "__license__",
    "__package_name__",
    "__title__",
    "__version__",
)
