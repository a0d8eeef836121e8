"""Build git command lines from structured arguments, flags and options.

gitwrapper.command
~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import os
import shlex
import typing as t
from collections.abc import Mapping

from gitwrapper import exc

if t.TYPE_CHECKING:
    from typing_extensions import Self

    from gitwrapper._internal.types import OptionValue, StrPath


_SCALAR_TYPES = (str, int, os.PathLike)


def render_option_name(name: str) -> str:
    """Return the command line token for a flag or option name.

    Single character names get one dash, longer names two. Names already
    starting with a dash are kept as-is.

    Examples
    --------
    >>> render_option_name('s')
    '-s'
    >>> render_option_name('porcelain')
    '--porcelain'
    >>> render_option_name('--no-tags')
    '--no-tags'
    """
    if name.startswith("-"):
        return name
    if len(name) == 1:
        return f"-{name}"
    return f"--{name}"


def _check_name(name: object) -> str:
    if not isinstance(name, str) or not name:
        msg = f"Flag and option names must be non-empty strings, got {name!r}"
        raise exc.InvalidArgument(msg)
    return name


def _check_scalar(name: str, value: object) -> None:
    if isinstance(value, bool) or value is None:
        return
    if isinstance(value, float) or not isinstance(value, _SCALAR_TYPES):
        msg = f"Unsupported value for option {name!r}: {value!r}"
        raise exc.InvalidArgument(msg)


def _check_option_value(name: str, value: object) -> None:
    if isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, (list, tuple)):
                msg = f"Nested sequences are not supported for option {name!r}"
                raise exc.InvalidArgument(msg)
            _check_scalar(name, item)
        return
    _check_scalar(name, value)


def _to_token(value: StrPath | int) -> str:
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    return str(value)


def _render_option(name: str, value: OptionValue) -> list[str]:
    token = render_option_name(name)
    values = value if isinstance(value, (list, tuple)) else [value]

    rendered: list[str] = []
    for item in values:
        if item is None or item is False:
            continue
        rendered.append(token)
        if item is not True:
            rendered.append(_to_token(item))
    return rendered


class GitCommand:
    """A single git invocation: subcommand, flags, options and arguments.

    Positional elements of ``args_and_options`` that are mappings are merged
    into the options, everything else is a positional argument. Keyword
    options have underscores translated to dashes.

    The command line is always ``[name] + flags + options + arguments``, with
    flags and options in insertion order.

    Parameters
    ----------
    name : str, optional
        git subcommand, e.g. ``status``. In raw mode, a whole command line.
    args_and_options : str | int | PathLike | Mapping
        Positional arguments and option mappings.
    options : OptionValue
        Options, e.g. ``porcelain=True``.

    Examples
    --------
    >>> cmd = GitCommand('log', 'HEAD', oneline=True, n=3)
    >>> cmd.get_command_line()
    ['log', '--oneline', '-n', '3', 'HEAD']

    Repeat an option by passing a sequence:

    >>> GitCommand('log', {'author': ['alice', 'bob']}).get_command_line()
    ['log', '--author', 'alice', '--author', 'bob']

    Flags come before options:

    >>> cmd = GitCommand('commit')
    >>> cmd.set_option('m', 'Initial commit').set_flag('all').get_command_line()
    ['commit', '--all', '-m', 'Initial commit']
    """

    def __init__(
        self,
        name: str = "",
        *args_and_options: t.Any,
        **options: OptionValue,
    ) -> None:
        self.name = name
        self.args: list[str] = []
        self.flags: dict[str, None] = {}
        self.options: dict[str, OptionValue] = {}
        self.directory: str | None = None
        self.bypassed = False
        self.raw = False
        self.executed = False

        for item in args_and_options:
            if isinstance(item, Mapping):
                for option, value in item.items():
                    self.set_option(option, value)
            else:
                self.add_argument(item)

        for option, value in options.items():
            self.set_option(option.replace("_", "-"), value)

    def __repr__(self) -> str:
        """Representation of :class:`GitCommand` object."""
        return f"{self.__class__.__name__}({self.get_command_line_string()!r})"

    #
    # Builder
    #
    def add_argument(self, value: StrPath | int) -> Self:
        """Append a positional argument."""
        if isinstance(value, bool) or not isinstance(value, _SCALAR_TYPES):
            msg = f"Unsupported positional argument: {value!r}"
            raise exc.InvalidArgument(msg)
        self.args.append(_to_token(value))
        return self

    def add_arguments(self, *values: StrPath | int) -> Self:
        """Append several positional arguments, in order."""
        for value in values:
            self.add_argument(value)
        return self

    def set_flag(self, name: str) -> Self:
        """Set a boolean switch, rendered as ``--name`` (``-n`` if one char)."""
        self.flags[_check_name(name)] = None
        return self

    def unset_flag(self, name: str) -> Self:
        """Remove a flag, if set."""
        self.flags.pop(name, None)
        return self

    def set_option(self, name: str, value: OptionValue) -> Self:
        """Set an option.

        ``True`` renders the bare option, ``False`` and ``None`` omit it, a
        scalar renders ``--name value`` and a sequence repeats the option once
        per element.

        Raises
        ------
        :exc:`exc.InvalidArgument`
            Empty name or unsupported value type.
        """
        _check_name(name)
        _check_option_value(name, value)
        self.options[name] = list(value) if isinstance(value, (list, tuple)) else value
        return self

    def unset_option(self, name: str) -> Self:
        """Remove an option, if set."""
        self.options.pop(name, None)
        return self

    def get_option(self, name: str, default: OptionValue = None) -> OptionValue:
        """Return the value of an option, or ``default``."""
        return self.options.get(name, default)

    def set_directory(self, directory: StrPath | None) -> Self:
        """Set the working directory git runs in."""
        self.directory = os.fspath(directory) if directory is not None else None
        return self

    def get_directory(self) -> str | None:
        """Return the working directory override, if any."""
        return self.directory

    def bypass(self, bypass: bool = True) -> Self:
        """Flag the command so that no subprocess is spawned for it."""
        self.bypassed = bypass
        return self

    def is_bypassed(self) -> bool:
        """Return True if the command is flagged to skip execution."""
        return self.bypassed

    def execute_raw(self, raw: bool = True) -> Self:
        """Treat :attr:`name` as a pre-formed command line."""
        self.raw = raw
        return self

    def is_raw(self) -> bool:
        """Return True if :attr:`name` is used verbatim as the command line."""
        return self.raw

    #
    # Serialization
    #
    def build_flags(self) -> list[str]:
        """Return the flag tokens, in insertion order."""
        return [render_option_name(flag) for flag in self.flags]

    def build_options(self) -> list[str]:
        """Return the option tokens, in insertion order."""
        tokens: list[str] = []
        for name, value in self.options.items():
            tokens.extend(_render_option(name, value))
        return tokens

    def get_command_line(self) -> list[str]:
        """Return the argument vector passed to git, binary excluded.

        Examples
        --------
        >>> GitCommand('test-command', {'test-arg': [True, True]}).get_command_line()
        ['test-command', '--test-arg', '--test-arg']

        >>> GitCommand("config -l --show-origin").execute_raw().get_command_line()
        ['config', '-l', '--show-origin']
        """
        if self.raw:
            return shlex.split(self.name)

        command_line = [self.name] if self.name else []
        command_line += self.build_flags()
        command_line += self.build_options()
        command_line += self.args
        return command_line

    def get_command_line_string(self) -> str:
        """Return the command line quoted for a POSIX shell, for diagnostics."""
        return shlex.join(self.get_command_line())
