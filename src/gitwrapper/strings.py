"""Helpers for interpreting git output and URLs.

gitwrapper.strings
~~~~~~~~~~~~~~~~~~

"""

from __future__ import annotations

import posixpath
import re
import urllib.parse

_LINE_SPLIT_RE = re.compile(r"\r\n|\n|\r")


def parse_repository_name(repository_url: str) -> str:
    """Return the directory name git derives from a repository URL.

    Parameters
    ----------
    repository_url : str
        scp-like (``git@host:owner/repo.git``), URL or local path.

    Returns
    -------
    str

    Examples
    --------
    >>> parse_repository_name('git@github.com:cpliakas/git-wrapper.git')
    'git-wrapper'
    >>> parse_repository_name('https://github.com/cpliakas/git-wrapper.git')
    'git-wrapper'
    >>> parse_repository_name('file:///srv/repos/project')
    'project'
    """
    scheme = urllib.parse.urlsplit(repository_url).scheme
    if scheme and "://" in repository_url:
        path = urllib.parse.urlsplit(repository_url).path
    else:
        path = repository_url.split(":", 1)[-1] if scheme else repository_url

    name = posixpath.basename(path.rstrip("/"))
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name


def split_lines(output: str) -> list[str]:
    """Split command output into lines, dropping trailing line breaks.

    Examples
    --------
    >>> split_lines('  main\\r\\n* topic\\n')
    ['  main', '* topic']
    >>> split_lines('')
    []
    """
    output = output.rstrip("\r\n")
    if not output:
        return []
    return _LINE_SPLIT_RE.split(output)
