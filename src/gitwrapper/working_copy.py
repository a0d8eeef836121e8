"""Wrapper for a git working copy.

gitwrapper.working_copy
~~~~~~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import os
import pathlib
import typing as t

from gitwrapper import exc
from gitwrapper.branches import GitBranches
from gitwrapper.command import GitCommand
from gitwrapper.constants import REMOTE_URL_OPERATIONS
from gitwrapper.strings import split_lines

if t.TYPE_CHECKING:
    from collections.abc import Sequence

    from gitwrapper._internal.types import OptionValue, StrPath
    from gitwrapper.wrapper import GitWrapper

    RemoteDict = dict[str, str]


class GitWorkingCopy:
    """Run git commands against one working copy.

    Every command runs with :attr:`directory` as its working directory,
    except :meth:`init` and :meth:`clone_repository` which create it.

    Parameters
    ----------
    wrapper : :class:`~gitwrapper.wrapper.GitWrapper`
    directory : str | PathLike

    Examples
    --------
    >>> working_copy
    GitWorkingCopy(.../working_copy)

    >>> working_copy.status(s=True)
    ''

    >>> working_copy.has_changes()
    False

    >>> working_copy.is_tracking()
    True
    """

    def __init__(self, wrapper: GitWrapper, directory: StrPath) -> None:
        self.wrapper = wrapper
        self.directory = os.fspath(directory)
        self._cloned: bool | None = None

    def __repr__(self) -> str:
        """Representation of :class:`GitWorkingCopy` object."""
        return f"{self.__class__.__name__}({self.directory})"

    def get_wrapper(self) -> GitWrapper:
        """Return the wrapper this working copy runs commands through."""
        return self.wrapper

    def get_directory(self) -> str:
        """Return the path of the working copy."""
        return self.directory

    def set_cloned(self, cloned: bool) -> None:
        """Record whether the repository was initialized or cloned."""
        self._cloned = cloned

    def is_cloned(self) -> bool:
        """Return True if :attr:`directory` holds a git repository.

        Bare repositories count; the check looks for ``objects``, ``refs``
        and ``HEAD`` in the directory or in its ``.git`` subdirectory.
        """
        if self._cloned is None:
            git_dir = pathlib.Path(self.directory)
            if (git_dir / ".git").is_dir():
                git_dir = git_dir / ".git"
            self._cloned = (
                (git_dir / "objects").is_dir()
                and (git_dir / "refs").is_dir()
                and (git_dir / "HEAD").is_file()
            )
        return self._cloned

    #
    # Command
    #
    def run(
        self,
        command: str,
        *args_and_options: t.Any,
        set_directory: bool = True,
        **options: OptionValue,
    ) -> str:
        """Run any git subcommand and return its output.

        Parameters
        ----------
        command : str
            git subcommand, e.g. ``rev-parse``.
        args_and_options : str | int | PathLike | Mapping
            Positional arguments, and mappings of options.
        set_directory : bool
            Run inside :attr:`directory`. Defaults to True.
        options : OptionValue
            Options, underscores translated to dashes.

        Examples
        --------
        >>> working_copy.run('rev-parse', 'HEAD', abbrev_ref=True)
        'master\\n'
        """
        git_command = GitCommand(command, *args_and_options, **options)
        if set_directory:
            git_command.set_directory(self.directory)
        return self.wrapper.run(git_command)

    #
    # Derived state
    #
    def get_status(self) -> str:
        """Return the short-format status, ``$ git status -s``."""
        return self.run("status", s=True)

    def has_changes(self) -> bool:
        """Return True if the working tree or the index has changes."""
        output = self.run("status", porcelain=True)
        return any(line.strip() for line in split_lines(output))

    def is_tracking(self) -> bool:
        """Return True if HEAD has an upstream branch.

        A failing ``$ git rev-parse @{u}`` means no upstream, and is returned
        as False.
        """
        try:
            self.run("rev-parse", "@{u}")
        except exc.GitExecutionError:
            return False
        return True

    def get_ahead_behind(self) -> tuple[int, int]:
        """Return how many commits HEAD is ahead of and behind its upstream.

        Returns
        -------
        tuple[int, int]
            ``(ahead, behind)``

        Raises
        ------
        :exc:`exc.NotTrackingError`
            HEAD has no upstream.
        """
        if not self.is_tracking():
            raise exc.NotTrackingError

        output = self.run("rev-list", "HEAD...@{u}", left_right=True, count=True)
        ahead, behind = (int(count) for count in output.split())
        return ahead, behind

    def is_ahead(self) -> bool:
        """Return True if HEAD has commits its upstream does not."""
        ahead, _ = self.get_ahead_behind()
        return ahead > 0

    def is_behind(self) -> bool:
        """Return True if the upstream has commits HEAD does not."""
        _, behind = self.get_ahead_behind()
        return behind > 0

    def is_up_to_date(self) -> bool:
        """Return True if HEAD is not behind its upstream.

        Local commits not pushed yet do not make HEAD out of date.
        """
        return not self.is_behind()

    def needs_merge(self) -> bool:
        """Return True if HEAD and its upstream have diverged."""
        ahead, behind = self.get_ahead_behind()
        return ahead > 0 and behind > 0

    def has_ref(self, ref: str) -> bool:
        """Return True if ``ref`` (branch, tag, commit) resolves.

        >>> working_copy.has_ref('master')
        True
        >>> working_copy.has_ref('no-such-tag')
        False
        """
        try:
            self.run("rev-parse", ref, verify=True, quiet=True)
        except exc.GitExecutionError:
            return False
        return True

    def get_branches(self) -> GitBranches:
        """Return the branches of the working copy."""
        return GitBranches(self)

    #
    # Remotes
    #
    def get_remote_url(self, remote: str, operation: str = "fetch") -> str:
        """Return the fetch or push URL of ``remote``.

        Parameters
        ----------
        remote : str
            Remote name, e.g. ``origin``.
        operation : str
            ``fetch`` or ``push``.

        Raises
        ------
        :exc:`exc.RemoteNotFound`
            No such remote.
        :exc:`exc.InvalidArgument`
            Unknown operation.
        """
        if operation not in REMOTE_URL_OPERATIONS:
            msg = f"operation must be one of {REMOTE_URL_OPERATIONS}, got {operation!r}"
            raise exc.InvalidArgument(msg)
        if not self.has_remote(remote):
            raise exc.RemoteNotFound(remote)

        args = ["get-url"]
        if operation == "push":
            args.append("--push")
        args.append(remote)
        return self.remote(*args).rstrip("\r\n")

    def get_remotes(self) -> dict[str, RemoteDict]:
        """Return every remote with its fetch and push URLs.

        >>> working_copy.get_remotes()
        {'origin': {'fetch': '.../bare_repo', 'push': '.../bare_repo'}}
        """
        return {
            remote: {
                "fetch": self.remote("get-url", remote).rstrip("\r\n"),
                "push": self.remote("get-url", "--push", remote).rstrip("\r\n"),
            }
            for remote in split_lines(self.remote())
        }

    def get_remote(self, remote: str) -> RemoteDict:
        """Return the fetch and push URLs of ``remote``.

        Raises
        ------
        :exc:`exc.RemoteNotFound`
        """
        return {
            "fetch": self.get_remote_url(remote),
            "push": self.get_remote_url(remote, "push"),
        }

    def has_remote(self, remote: str) -> bool:
        """Return True if ``remote`` is configured."""
        return remote in split_lines(self.remote())

    def add_remote(
        self,
        name: str,
        url: str,
        fetch: bool = False,
        tags: bool = False,
        no_tags: bool = False,
        track: Sequence[str] | None = None,
        master: str | None = None,
    ) -> str:
        """Add a remote, ``$ git remote add <name> <url>``.

        Parameters
        ----------
        name : str
        url : str
        fetch : bool
            ``-f``, fetch the remote right away.
        tags : bool
            ``--tags``, import every tag when fetching.
        no_tags : bool
            ``--no-tags``, import no tags when fetching.
        track : list[str], optional
            ``-t <branch>`` per branch, fetch only these branches.
        master : str, optional
            ``-m <master>``, the branch ``<name>/HEAD`` points to.

        Raises
        ------
        :exc:`exc.InvalidArgument`
            Empty name or URL.
        """
        if not name:
            msg = "Cannot add remote without a name."
            raise exc.InvalidArgument(msg)
        if not url:
            msg = "Cannot add remote without a URL."
            raise exc.InvalidArgument(msg)

        args = ["add"]
        if fetch:
            args.append("-f")
        if tags:
            args.append("--tags")
        if no_tags:
            args.append("--no-tags")
        for branch in track or []:
            args += ["-t", branch]
        if master:
            args += ["-m", master]
        args += [name, url]

        return self.remote(*args)

    def remove_remote(self, name: str) -> str:
        """Remove a remote, ``$ git remote rm <name>``."""
        return self.remote("rm", name)

    #
    # Convenience
    #
    def push_tag(
        self,
        tag: str,
        repository: str = "origin",
        **options: OptionValue,
    ) -> str:
        """Push one tag, ``$ git push <repository> tag <tag>``."""
        return self.push(repository, "tag", tag, **options)

    def push_tags(self, repository: str = "origin", **options: OptionValue) -> str:
        """Push every tag, ``$ git push --tags <repository>``."""
        options["tags"] = True
        return self.push(repository, **options)

    def fetch_all(self, **options: OptionValue) -> str:
        """Fetch every remote, ``$ git fetch --all``."""
        options["all"] = True
        return self.fetch(**options)

    def checkout_new_branch(self, branch: str, **options: OptionValue) -> str:
        """Create and check out a branch, ``$ git checkout -b <branch>``."""
        options["b"] = True
        return self.checkout(branch, **options)

    #
    # git subcommands
    #
    def add(
        self,
        filepattern: StrPath,
        *args_and_options: t.Any,
        **options: OptionValue,
    ) -> str:
        """Add file contents to the index, ``$ git add <filepattern>``."""
        return self.run("add", filepattern, *args_and_options, **options)

    def apply(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Apply a patch, ``$ git apply``."""
        return self.run("apply", *args_and_options, **options)

    def bisect(
        self,
        sub_command: str,
        *args_and_options: t.Any,
        **options: OptionValue,
    ) -> str:
        """Find the commit that introduced a bug, ``$ git bisect <sub_command>``."""
        return self.run("bisect", sub_command, *args_and_options, **options)

    def branch(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """List, create or delete branches, ``$ git branch``."""
        return self.run("branch", *args_and_options, **options)

    def checkout(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Switch branches or restore files, ``$ git checkout``."""
        return self.run("checkout", *args_and_options, **options)

    def clone_repository(self, repository: str, **options: OptionValue) -> str:
        """Clone ``repository`` into :attr:`directory`, ``$ git clone``."""
        return self.run(
            "clone",
            repository,
            self.directory,
            set_directory=False,
            **options,
        )

    def commit(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Record changes, ``$ git commit``.

        A single string argument is the commit message, and commits every
        tracked change: ``commit('msg')`` runs ``git commit -m msg -a``.
        """
        if (
            len(args_and_options) == 1
            and isinstance(args_and_options[0], str)
            and not options
        ):
            return self.run("commit", {"m": args_and_options[0], "a": True})
        return self.run("commit", *args_and_options, **options)

    def config(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Get and set options, ``$ git config``."""
        return self.run("config", *args_and_options, **options)

    def diff(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Show changes, ``$ git diff``."""
        return self.run("diff", *args_and_options, **options)

    def fetch(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Download objects and refs, ``$ git fetch``."""
        return self.run("fetch", *args_and_options, **options)

    def grep(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Print lines matching a pattern, ``$ git grep``."""
        return self.run("grep", *args_and_options, **options)

    def init(self, **options: OptionValue) -> str:
        """Create a repository in :attr:`directory`, ``$ git init``."""
        return self.run("init", self.directory, set_directory=False, **options)

    def log(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Show commit logs, ``$ git log``."""
        return self.run("log", *args_and_options, **options)

    def merge(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Join histories, ``$ git merge``."""
        return self.run("merge", *args_and_options, **options)

    def mv(
        self,
        source: StrPath,
        destination: StrPath,
        **options: OptionValue,
    ) -> str:
        """Move or rename a file, ``$ git mv <source> <destination>``."""
        return self.run("mv", source, destination, **options)

    def pull(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Fetch and integrate, ``$ git pull``."""
        return self.run("pull", *args_and_options, **options)

    def push(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Update remote refs, ``$ git push``."""
        return self.run("push", *args_and_options, **options)

    def rebase(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Reapply commits on top of another base, ``$ git rebase``."""
        return self.run("rebase", *args_and_options, **options)

    def remote(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Manage tracked repositories, ``$ git remote``."""
        return self.run("remote", *args_and_options, **options)

    def reset(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Reset HEAD, ``$ git reset``."""
        return self.run("reset", *args_and_options, **options)

    def rm(self, filepattern: StrPath, **options: OptionValue) -> str:
        """Remove files from the tree and the index, ``$ git rm``."""
        return self.run("rm", filepattern, **options)

    def show(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Show objects, ``$ git show``."""
        return self.run("show", *args_and_options, **options)

    def status(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Show the working tree status, ``$ git status``."""
        return self.run("status", *args_and_options, **options)

    def tag(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Create, list or delete tags, ``$ git tag``."""
        return self.run("tag", *args_and_options, **options)

    def clean(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Remove untracked files, ``$ git clean``."""
        return self.run("clean", *args_and_options, **options)

    def archive(self, *args_and_options: t.Any, **options: OptionValue) -> str:
        """Create an archive of files from a tree, ``$ git archive``."""
        return self.run("archive", *args_and_options, **options)
