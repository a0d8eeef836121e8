"""Wrapper for the :term:`git(1)` binary.

gitwrapper.wrapper
~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import logging
import os
import pathlib
import shutil
import typing as t

from gitwrapper import exc
from gitwrapper.command import GitCommand
from gitwrapper.constants import (
    DEFAULT_SSH_PORT,
    DEFAULT_SSH_WRAPPER,
    DEFAULT_TIMEOUT,
    GIT_SSH,
    GIT_SSH_KEY,
    GIT_SSH_PORT,
)
from gitwrapper.dispatcher import EventDispatcher
from gitwrapper.process import GitProcess
from gitwrapper.strings import parse_repository_name
from gitwrapper.subscribers import StreamOutputEventSubscriber
from gitwrapper.working_copy import GitWorkingCopy

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from gitwrapper._internal.types import OptionValue, StrPath
    from gitwrapper.subscribers import (
        GitLoggerEventSubscriber,
        OutputEventSubscriber,
    )

logger = logging.getLogger(__name__)


def _resolve_path(path: StrPath, description: str) -> str:
    try:
        resolved = pathlib.Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        msg = f"Path to {description} could not be resolved: {os.fspath(path)}"
        raise exc.PathResolutionError(msg) from e
    return str(resolved)


class GitWrapper:
    """Context needed to run git: binary, environment, timeout and events.

    Parameters
    ----------
    git_binary : str, optional
        Path to git. Looked up on ``PATH`` when omitted.
    dispatcher : :class:`~gitwrapper.dispatcher.EventDispatcher`, optional
        Event dispatcher. A new one is created when omitted.
    timeout : float, optional
        Seconds before a running command is killed. ``None`` disables it.
    env : dict, optional
        Environment variables overriding :data:`os.environ` for git.

    Raises
    ------
    :exc:`exc.BinaryNotFound`
        git could not be found.

    Examples
    --------
    >>> git_wrapper.version()
    'git version ...'

    >>> git_wrapper.git('config --global user.name')
    'gitwrapper tester\\n'
    """

    def __init__(
        self,
        git_binary: str | None = None,
        dispatcher: EventDispatcher | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
        env: Mapping[str, t.Any] | None = None,
    ) -> None:
        if git_binary is None:
            git_binary = shutil.which("git")
            if not git_binary:
                raise exc.BinaryNotFound

        self.git_binary: str = git_binary
        self.timeout = timeout
        self._env: dict[str, t.Any] = dict(env) if env is not None else {}
        self._dispatcher = dispatcher if dispatcher is not None else EventDispatcher()
        self._stream_subscriber: StreamOutputEventSubscriber | None = None

    def __repr__(self) -> str:
        """Representation of :class:`GitWrapper` object."""
        return f"{self.__class__.__name__}(git_binary={self.git_binary})"

    #
    # Dispatcher
    #
    def get_dispatcher(self) -> EventDispatcher:
        """Return the event dispatcher owned by this wrapper."""
        return self._dispatcher

    def set_dispatcher(self, dispatcher: EventDispatcher) -> None:
        """Replace the event dispatcher."""
        self._dispatcher = dispatcher

    def add_output_event_subscriber(self, subscriber: OutputEventSubscriber) -> None:
        """Register a subscriber receiving :class:`~gitwrapper.events.GitOutputEvent`."""
        self._dispatcher.add_subscriber(subscriber)

    def remove_output_event_subscriber(
        self,
        subscriber: OutputEventSubscriber,
    ) -> None:
        """Unregister an output subscriber."""
        self._dispatcher.remove_subscriber(subscriber)

    def add_logger_event_subscriber(
        self,
        subscriber: GitLoggerEventSubscriber,
    ) -> None:
        """Register a subscriber logging every lifecycle event."""
        self._dispatcher.add_subscriber(subscriber)

    def stream_output(self, stream_output: bool = True) -> None:
        """Write git output to stdout / stderr in real time, or stop doing so."""
        if stream_output and self._stream_subscriber is None:
            self._stream_subscriber = StreamOutputEventSubscriber()
            self.add_output_event_subscriber(self._stream_subscriber)

        if not stream_output and self._stream_subscriber is not None:
            self.remove_output_event_subscriber(self._stream_subscriber)
            self._stream_subscriber = None

    #
    # Environment
    #
    def set_env_var(self, var: str, value: t.Any) -> None:
        """Set an environment variable visible only to git."""
        self._env[var] = value

    def unset_env_var(self, var: str) -> None:
        """Remove an environment variable set with :meth:`set_env_var`."""
        self._env.pop(var, None)

    def get_env_var(self, var: str, default: t.Any = None) -> t.Any:
        """Return an environment variable set with :meth:`set_env_var`.

        Parameters
        ----------
        var : str
            The environment variable name, e.g. 'HOME', 'GIT_SSH'.
        default : Any, optional
            Returned if the variable is not set.
        """
        return self._env.get(var, default)

    def get_env_vars(self) -> dict[str, t.Any]:
        """Return the environment overrides."""
        return dict(self._env)

    def get_environment(self) -> dict[str, str]:
        """Return the full environment git runs with."""
        environment = dict(os.environ)
        environment.update({var: str(value) for var, value in self._env.items()})
        return environment

    def set_private_key(
        self,
        private_key: StrPath,
        port: int = DEFAULT_SSH_PORT,
        wrapper: StrPath | None = None,
    ) -> None:
        """Use an alternate private key to connect to remotes.

        Points ``GIT_SSH`` at the ssh wrapper script, and sets ``GIT_SSH_KEY``
        and ``GIT_SSH_PORT`` which the script reads.

        Parameters
        ----------
        private_key : str | PathLike
            Path to the private key.
        port : int
            ssh port, defaults to 22.
        wrapper : str | PathLike, optional
            ssh wrapper script. Defaults to the script shipped with
            gitwrapper.

        Raises
        ------
        :exc:`exc.PathResolutionError`
            The wrapper script or the key does not exist.
        """
        if wrapper is None:
            wrapper = DEFAULT_SSH_WRAPPER

        wrapper_path = _resolve_path(wrapper, "GIT_SSH wrapper script")
        private_key_path = _resolve_path(private_key, "private key")

        self.set_env_var(GIT_SSH, wrapper_path)
        self.set_env_var(GIT_SSH_KEY, private_key_path)
        self.set_env_var(GIT_SSH_PORT, port)

    def unset_private_key(self) -> None:
        """Remove the variables set by :meth:`set_private_key`."""
        self.unset_env_var(GIT_SSH)
        self.unset_env_var(GIT_SSH_KEY)
        self.unset_env_var(GIT_SSH_PORT)

    #
    # Commands
    #
    def working_copy(self, directory: StrPath) -> GitWorkingCopy:
        """Return an object bound to the working copy in ``directory``."""
        return GitWorkingCopy(self, directory)

    def version(self) -> str:
        """Return the output of ``git --version``."""
        return self.git("--version")

    def init(self, directory: StrPath, **options: OptionValue) -> GitWorkingCopy:
        """Run ``git init`` for ``directory`` and return its working copy."""
        git = self.working_copy(directory)
        git.init(**options)
        git.set_cloned(True)
        return git

    def clone_repository(
        self,
        repository: str,
        directory: StrPath | None = None,
        **options: OptionValue,
    ) -> GitWorkingCopy:
        """Run ``git clone`` and return the new working copy.

        ``directory`` defaults to the name derived from the repository URL,
        see :func:`~gitwrapper.strings.parse_repository_name`.
        """
        if directory is None:
            directory = parse_repository_name(repository)

        git = self.working_copy(directory)
        git.clone_repository(repository, **options)
        git.set_cloned(True)
        return git

    def git(self, command_line: str, cwd: StrPath | None = None) -> str:
        """Run a raw command line, e.g. ``config -l``, and return stdout."""
        command = GitCommand(command_line).execute_raw()
        command.set_directory(cwd)
        return self.run(command)

    def run(self, command: GitCommand, cwd: StrPath | None = None) -> str:
        """Run ``command`` and return stdout, or ``""`` if it was bypassed."""
        return GitProcess(self, command, cwd).run()
