"""Branch listing for a working copy.

gitwrapper.branches
~~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import typing as t

from gitwrapper.strings import split_lines

if t.TYPE_CHECKING:
    from collections.abc import Iterator

    from gitwrapper.working_copy import GitWorkingCopy


class GitBranches:
    """Snapshot of ``git branch -a`` for a working copy.

    The listing is fetched once, when the object is created. Iterating or
    calling :meth:`all` reads that snapshot; :meth:`remote` and :meth:`head`
    query git again.

    Examples
    --------
    >>> branches = working_copy.get_branches()
    >>> branches.all()
    ['master', ...]
    """

    def __init__(self, working_copy: GitWorkingCopy) -> None:
        self.working_copy = working_copy
        self._branches = self.fetch_branches()

    def __repr__(self) -> str:
        """Representation of :class:`GitBranches` object."""
        return f"{self.__class__.__name__}({self._branches!r})"

    def __iter__(self) -> Iterator[str]:
        """Iterate over the snapshot."""
        return iter(self._branches)

    def __len__(self) -> int:
        """Return the number of branches in the snapshot."""
        return len(self._branches)

    def __contains__(self, branch: object) -> bool:
        """Return True if ``branch`` is in the snapshot."""
        return branch in self._branches

    def fetch_branches(self, only_remote: bool = False) -> list[str]:
        """Run ``git branch`` and return the branch names.

        Parameters
        ----------
        only_remote : bool
            List remote-tracking branches only (``-r``) instead of all of
            them (``-a``).
        """
        options = {"r": True} if only_remote else {"a": True}
        output = self.working_copy.branch(options)
        return [self.trim_branch(branch) for branch in split_lines(output)]

    @staticmethod
    def trim_branch(branch: str) -> str:
        """Strip the current-branch marker and indentation.

        >>> GitBranches.trim_branch('* master')
        'master'
        """
        return branch.lstrip(" *")

    def all(self) -> list[str]:
        """Return every branch, in listing order."""
        return list(self._branches)

    def remote(self) -> list[str]:
        """Return remote-tracking branches. Runs ``git branch -r``."""
        return self.fetch_branches(only_remote=True)

    def head(self) -> str:
        """Return the name of the checked out branch."""
        return self.working_copy.run("rev-parse", "HEAD", abbrev_ref=True).strip()
