"""Provide exceptions used by gitwrapper.

gitwrapper.exc
~~~~~~~~~~~~~~

This module implements exceptions used throughout gitwrapper for error
handling while building commands, running git and querying working copies.

Notes
-----
Exceptions in this module inherit from :exc:`GitWrapperException` or
specialized base classes to form a hierarchy of git-related errors.
"""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Sequence


class GitWrapperException(Exception):
    """Base exception for all gitwrapper errors."""


class CommandSetupError(GitWrapperException):
    """Raised before a subprocess is spawned, e.g. bad working directory."""

    def __init__(
        self,
        message: str,
        command_line: Sequence[str] | None = None,
        *args: object,
    ) -> None:
        self.command_line = list(command_line) if command_line is not None else []
        super().__init__(message)


class BinaryNotFound(CommandSetupError):
    """Raised when the git binary cannot be found on the system."""

    def __init__(
        self,
        binary: str | None = None,
        command_line: Sequence[str] | None = None,
        *args: object,
    ) -> None:
        if binary is not None:
            msg = f"Unable to find the git executable: {binary}"
        else:
            msg = "Unable to find the git executable."
        super().__init__(msg, command_line)


class GitExecutionError(GitWrapperException):
    """Raised when git exits with a non-zero status.

    ``error_output`` is the error stream of the process, or its output stream
    when git wrote nothing to the error stream.
    """

    def __init__(
        self,
        error_output: str,
        command_line: Sequence[str] | None = None,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        *args: object,
    ) -> None:
        self.error_output = error_output
        self.command_line = list(command_line) if command_line is not None else []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(error_output)


class GitCommandTimeout(GitExecutionError, TimeoutError):
    """Raised when git runs past the configured timeout and is killed."""

    def __init__(
        self,
        timeout: float,
        command_line: Sequence[str] | None = None,
        stdout: str = "",
        stderr: str = "",
        returncode: int | None = None,
        *args: object,
    ) -> None:
        self.timeout = timeout
        super().__init__(
            f"The git command exceeded the timeout of {timeout} seconds.",
            command_line,
            returncode,
            stdout,
            stderr,
        )


class PathResolutionError(GitWrapperException):
    """Raised if a configured path (ssh key, ssh wrapper) does not resolve."""


class UnknownEventKind(GitWrapperException, LookupError):
    """Raised if no log level is mapped to an event kind."""

    def __init__(self, kind: object, *args: object) -> None:
        self.kind = kind
        super().__init__(f'Unknown event "{kind}"')


class RemoteNotFound(GitWrapperException, LookupError):
    """Raised if a named remote is not configured on the working copy."""

    def __init__(self, remote: str, *args: object) -> None:
        self.remote = remote
        super().__init__(f'The remote "{remote}" does not exist.')


class NotTrackingError(GitWrapperException):
    """Raised if HEAD has no upstream branch to compare against."""

    def __init__(self, *args: object) -> None:
        super().__init__(
            "HEAD does not have a remote tracking branch. "
            "Cannot compare it against its upstream.",
        )


class InvalidArgument(GitWrapperException, ValueError):
    """Raised if a command argument, flag or option value is malformed."""
