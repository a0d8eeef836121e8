"""Event subscribers shipped with gitwrapper.

gitwrapper.subscribers
~~~~~~~~~~~~~~~~~~~~~~

- :class:`StreamOutputEventSubscriber` writes git output to the terminal as it
  arrives.
- :class:`GitLoggerEventSubscriber` logs every lifecycle event through
  :py:mod:`logging`.
"""

from __future__ import annotations

import logging
import sys
import typing as t

from gitwrapper import exc
from gitwrapper.events import EventKind

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from gitwrapper.events import (
        GitBypassEvent,
        GitErrorEvent,
        GitEvent,
        GitOutputEvent,
        GitPrepareEvent,
        GitSuccessEvent,
    )


class OutputEventSubscriber:
    """Base class for subscribers handling :class:`GitOutputEvent` only."""

    def get_subscribed_events(self) -> dict[EventKind, str | tuple[str, int]]:
        """Subscribe :meth:`handle_output` to output events."""
        return {EventKind.Output: "handle_output"}

    def handle_output(self, event: GitOutputEvent) -> None:
        """Handle a chunk of git output."""
        raise NotImplementedError


class StreamOutputEventSubscriber(OutputEventSubscriber):
    """Write each chunk verbatim to :data:`sys.stdout` or :data:`sys.stderr`."""

    def handle_output(self, event: GitOutputEvent) -> None:
        """Write the chunk to the stream it was read from."""
        handle = sys.stderr if event.is_error() else sys.stdout
        handle.write(event.buffer)
        handle.flush()


class GitLoggerEventSubscriber:
    """Log git lifecycle events.

    Every record carries the command line in ``record.command``; output
    records also carry ``record.error``, True for chunks read from stderr.

    Parameters
    ----------
    logger : :class:`logging.Logger`, optional
        Logger to write to. Defaults to this module's logger.
    level_mapping : dict, optional
        Log level per :class:`~gitwrapper.events.EventKind`, merged over the
        defaults: prepare, success and bypass at INFO, output at DEBUG and
        error at ERROR.

    Examples
    --------
    >>> subscriber = GitLoggerEventSubscriber()
    >>> subscriber.get_log_level_mapping(EventKind.Output) == logging.DEBUG
    True
    >>> subscriber.set_log_level_mapping(EventKind.Output, logging.INFO)
    >>> subscriber.get_log_level_mapping(EventKind.Output) == logging.INFO
    True
    """

    def __init__(
        self,
        logger: logging.Logger | logging.LoggerAdapter[t.Any] | None = None,
        level_mapping: Mapping[EventKind, int] | None = None,
    ) -> None:
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.level_mapping: dict[t.Any, int] = {
            EventKind.Prepare: logging.INFO,
            EventKind.Output: logging.DEBUG,
            EventKind.Success: logging.INFO,
            EventKind.Error: logging.ERROR,
            EventKind.Bypass: logging.INFO,
        }
        if level_mapping is not None:
            self.level_mapping.update(level_mapping)

    def get_subscribed_events(self) -> dict[EventKind, str | tuple[str, int]]:
        """Subscribe a handler to every event kind."""
        return {
            EventKind.Prepare: ("on_prepare", 0),
            EventKind.Output: ("handle_output", 0),
            EventKind.Success: ("on_success", 0),
            EventKind.Error: ("on_error", 0),
            EventKind.Bypass: ("on_bypass", 0),
        }

    def set_logger(
        self,
        logger: logging.Logger | logging.LoggerAdapter[t.Any],
    ) -> None:
        """Replace the logger records are written to."""
        self.logger = logger

    def set_log_level_mapping(self, kind: t.Any, level: int) -> None:
        """Log events of ``kind`` at ``level``."""
        self.level_mapping[kind] = level

    def get_log_level_mapping(self, kind: t.Any) -> int:
        """Return the log level for events of ``kind``.

        Raises
        ------
        :exc:`exc.UnknownEventKind`
            No level is mapped to ``kind``.
        """
        try:
            return self.level_mapping[kind]
        except KeyError:
            raise exc.UnknownEventKind(kind) from None

    def log(
        self,
        event: GitEvent,
        message: str,
        extra: dict[str, t.Any] | None = None,
    ) -> None:
        """Log ``message`` at the level mapped to the event's kind."""
        level = self.get_log_level_mapping(event.kind)
        context: dict[str, t.Any] = {
            "command": event.process.get_command_line_string(),
        }
        if extra is not None:
            context.update(extra)
        self.logger.log(level, message, extra=context)

    def on_prepare(self, event: GitPrepareEvent) -> None:
        """Log that a command is about to run."""
        self.log(event, "Git command preparing to run")

    def handle_output(self, event: GitOutputEvent) -> None:
        """Log a chunk of output."""
        self.log(event, event.buffer, {"error": event.is_error()})

    def on_success(self, event: GitSuccessEvent) -> None:
        """Log a successful command."""
        self.log(event, "Git command successfully run")

    def on_error(self, event: GitErrorEvent) -> None:
        """Log a failed command."""
        self.log(event, "Error running Git command")

    def on_bypass(self, event: GitBypassEvent) -> None:
        """Log a bypassed command."""
        self.log(event, "Git command bypassed")
