"""Run a :class:`~gitwrapper.command.GitCommand` through :py:mod:`subprocess`.

gitwrapper.process
~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import codecs
import enum
import functools
import logging
import os
import queue
import shlex
import shutil
import subprocess
import threading
import time
import typing as t

from gitwrapper import exc
from gitwrapper.events import (
    GitBypassEvent,
    GitErrorEvent,
    GitOutputEvent,
    GitPrepareEvent,
    GitSuccessEvent,
    OutputStream,
    PrepareOutcome,
)

if t.TYPE_CHECKING:
    from gitwrapper._internal.types import StrPath
    from gitwrapper.command import GitCommand
    from gitwrapper.events import GitEvent
    from gitwrapper.wrapper import GitWrapper

logger = logging.getLogger(__name__)

#: Maximum number of bytes read from a pipe at once
CHUNK_SIZE = 8192

#: Seconds to wait for the pipe readers after killing a timed out process
READER_JOIN_TIMEOUT = 1.0

#: Chunks buffered between the pipe readers and the calling thread
QUEUE_SIZE = 64


class ProcessState(enum.Enum):
    """Lifecycle of a :class:`GitProcess`."""

    Created = "CREATED"
    Prepared = "PREPARED"
    Bypassed = "BYPASSED"
    Running = "RUNNING"
    Succeeded = "SUCCEEDED"
    Failed = "FAILED"


def _pump(
    stream: OutputStream,
    pipe: t.IO[bytes],
    chunks: queue.Queue[tuple[OutputStream, bytes | None]],
) -> None:
    """Move chunks from ``pipe`` into ``chunks``, then a ``None`` sentinel."""
    read = functools.partial(os.read, pipe.fileno(), CHUNK_SIZE)
    try:
        for chunk in iter(read, b""):
            chunks.put((stream, chunk))
    finally:
        pipe.close()
        chunks.put((stream, None))


class GitProcess:
    """Run one git command, dispatching its lifecycle events.

    Output events are dispatched on the calling thread, one per chunk read
    from either stream, while git is still running. Two reader threads only
    move bytes off the pipes.

    The command line is built when the process is created. Changes a prepare
    listener makes to the command, other than bypassing it, do not alter
    what is spawned.

    On timeout git is killed. Output read up to that point is kept, and
    :attr:`returncode` holds the kill status.

    Parameters
    ----------
    wrapper : :class:`~gitwrapper.wrapper.GitWrapper`
        Supplies the binary, environment, timeout and event dispatcher.
    command : :class:`~gitwrapper.command.GitCommand`
        Command to run.
    cwd : str | PathLike, optional
        Working directory. Defaults to the command's directory.

    Examples
    --------
    >>> from gitwrapper.command import GitCommand
    >>> process = GitProcess(git_wrapper, GitCommand(version=True))
    >>> process.run()
    'git version ...'
    >>> process.state
    <ProcessState.Succeeded: 'SUCCEEDED'>
    >>> process.returncode
    0
    """

    def __init__(
        self,
        wrapper: GitWrapper,
        command: GitCommand,
        cwd: StrPath | None = None,
    ) -> None:
        self.wrapper = wrapper
        self.command = command
        if cwd is None:
            cwd = command.get_directory()
        self.cwd = os.fspath(cwd) if cwd is not None else None
        self.command_line: list[str] = [
            wrapper.git_binary,
            *command.get_command_line(),
        ]
        self.timeout = wrapper.timeout
        self.state = ProcessState.Created
        self.returncode: int | None = None
        self.popen: subprocess.Popen[bytes] | None = None
        self._buffers: dict[OutputStream, list[str]] = {
            OutputStream.Out: [],
            OutputStream.Err: [],
        }

    def __repr__(self) -> str:
        """Representation of :class:`GitProcess` object."""
        return (
            f"{self.__class__.__name__}"
            f"({self.get_command_line_string()!r}, state={self.state.name})"
        )

    @property
    def stdout(self) -> str:
        """Output stream content read so far."""
        return "".join(self._buffers[OutputStream.Out])

    @property
    def stderr(self) -> str:
        """Error stream content read so far."""
        return "".join(self._buffers[OutputStream.Err])

    def get_command_line_string(self) -> str:
        """Return the full command line, binary included, quoted for a shell."""
        return shlex.join(self.command_line)

    def get_error_output(self) -> str:
        """Return stderr, or stdout if git reported its failure there."""
        return self.stderr or self.stdout

    def _dispatch(self, event: GitEvent) -> list[t.Any]:
        return self.wrapper.get_dispatcher().dispatch(event)

    def _setup(self) -> str:
        """Resolve the binary and validate the working directory."""
        binary = shutil.which(self.wrapper.git_binary)
        if binary is None:
            raise exc.BinaryNotFound(self.wrapper.git_binary, self.command_line)

        if self.cwd is not None and not os.path.isdir(self.cwd):
            msg = f"The working directory does not exist: {self.cwd}"
            raise exc.CommandSetupError(msg, self.command_line)

        return binary

    def run(self) -> str:
        """Run the command and return its standard output.

        Returns an empty string if a prepare listener bypassed the command.

        Raises
        ------
        :exc:`exc.CommandSetupError`
            Binary missing or working directory absent. No event is
            dispatched.
        :exc:`exc.GitExecutionError`
            git exited with a non-zero status.
        :exc:`exc.GitCommandTimeout`
            git ran past :attr:`timeout` and was killed.
        """
        binary = self._setup()

        outcomes = self._dispatch(
            GitPrepareEvent(wrapper=self.wrapper, process=self, command=self.command),
        )
        self.state = ProcessState.Prepared
        if PrepareOutcome.Bypass in outcomes:
            self.command.bypass()

        self.command.executed = True

        if self.command.is_bypassed():
            self.state = ProcessState.Bypassed
            self._dispatch(
                GitBypassEvent(wrapper=self.wrapper, process=self, command=self.command),
            )
            return ""

        self._spawn(binary)
        timed_out = self._communicate()

        if timed_out:
            assert self.timeout is not None
            error: exc.GitExecutionError = exc.GitCommandTimeout(
                self.timeout,
                self.command_line,
                self.stdout,
                self.stderr,
                self.returncode,
            )
        elif self.returncode == 0:
            self.state = ProcessState.Succeeded
            self._dispatch(
                GitSuccessEvent(
                    wrapper=self.wrapper,
                    process=self,
                    command=self.command,
                ),
            )
            return self.stdout
        else:
            error = exc.GitExecutionError(
                self.get_error_output(),
                self.command_line,
                self.returncode,
                self.stdout,
                self.stderr,
            )

        self.state = ProcessState.Failed
        self._dispatch(
            GitErrorEvent(
                wrapper=self.wrapper,
                process=self,
                command=self.command,
                exception=error,
            ),
        )
        raise error

    def _spawn(self, binary: str) -> None:
        logger.debug("Running %s in %s", self.get_command_line_string(), self.cwd)
        try:
            self.popen = subprocess.Popen(
                [binary, *self.command_line[1:]],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                env=self.wrapper.get_environment(),
            )
        except OSError as e:
            logger.exception("Exception for %s", self.get_command_line_string())
            raise exc.CommandSetupError(str(e), self.command_line) from e
        self.state = ProcessState.Running

    def _communicate(self) -> bool:
        """Stream output until git exits. Return True if it timed out."""
        popen = self.popen
        assert popen is not None
        assert popen.stdout is not None
        assert popen.stderr is not None

        chunks: queue.Queue[tuple[OutputStream, bytes | None]] = queue.Queue(
            maxsize=QUEUE_SIZE,
        )
        readers = [
            threading.Thread(
                target=_pump,
                args=(stream, pipe, chunks),
                daemon=True,
            )
            for stream, pipe in (
                (OutputStream.Out, popen.stdout),
                (OutputStream.Err, popen.stderr),
            )
        ]
        for reader in readers:
            reader.start()

        decoders = {
            stream: codecs.getincrementaldecoder("utf-8")(errors="backslashreplace")
            for stream in self._buffers
        }
        deadline = (
            time.monotonic() + self.timeout if self.timeout is not None else None
        )

        def consume(stream: OutputStream, chunk: bytes | None) -> bool:
            """Emit a chunk. Return True once ``stream`` is exhausted."""
            if chunk is None:
                self._emit(stream, decoders[stream].decode(b"", final=True))
                return True
            self._emit(stream, decoders[stream].decode(chunk))
            return False

        def kill(open_streams: int) -> bool:
            self._kill()
            while open_streams:
                try:
                    stream, chunk = chunks.get(timeout=READER_JOIN_TIMEOUT)
                except queue.Empty:
                    break
                if consume(stream, chunk):
                    open_streams -= 1
            for reader in readers:
                reader.join(READER_JOIN_TIMEOUT)
            return True

        try:
            open_streams = len(readers)
            while open_streams:
                remaining = self._remaining(deadline)
                if remaining == 0:
                    return kill(open_streams)
                try:
                    stream, chunk = chunks.get(timeout=remaining)
                except queue.Empty:
                    return kill(open_streams)
                if consume(stream, chunk):
                    open_streams -= 1

            try:
                self.returncode = popen.wait(timeout=self._remaining(deadline))
            except subprocess.TimeoutExpired:
                return kill(open_streams)
        finally:
            if popen.poll() is None:
                self._kill()

        logger.debug(
            "%s exited with %s",
            self.get_command_line_string(),
            self.returncode,
        )
        return False

    def _remaining(self, deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return max(deadline - time.monotonic(), 0)

    def _emit(self, stream: OutputStream, text: str) -> None:
        if not text:
            return
        self._buffers[stream].append(text)
        self._dispatch(
            GitOutputEvent(
                wrapper=self.wrapper,
                process=self,
                command=self.command,
                stream=stream,
                buffer=text,
            ),
        )

    def _kill(self) -> None:
        assert self.popen is not None
        logger.debug("Killing %s", self.get_command_line_string())
        self.popen.kill()
        self.returncode = self.popen.wait()
