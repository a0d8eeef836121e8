"""gitwrapper pytest plugin.

Fixtures creating throwaway git repositories inside an isolated ``$HOME``.
"""

from __future__ import annotations

import getpass
import logging
import typing as t

import pytest

from gitwrapper.wrapper import GitWrapper

if t.TYPE_CHECKING:
    import pathlib

    from gitwrapper.working_copy import GitWorkingCopy

logger = logging.getLogger(__name__)

#: Branch every fixture repository starts on
DEFAULT_BRANCH = "master"

#: Extra branch pushed to :func:`bare_repo`
TEST_BRANCH = "test-branch"

#: Tag pushed to :func:`bare_repo`
TEST_TAG = "test-tag"


@pytest.fixture(scope="session")
def home_path(tmp_path_factory: pytest.TempPathFactory) -> pathlib.Path:
    """Temporary `/home/` path."""
    return tmp_path_factory.mktemp("home")


@pytest.fixture(scope="session")
def home_user_name() -> str:
    """Return default username to set for :func:`user_path` fixture."""
    return getpass.getuser()


@pytest.fixture(scope="session")
def user_path(home_path: pathlib.Path, home_user_name: str) -> pathlib.Path:
    """Ensure and return temporary user directory.

    Used by: :func:`gitconfig`

    Note: You will need to set the home directory, see :ref:`set_home`.
    """
    p = home_path / home_user_name
    p.mkdir()
    return p


@pytest.fixture(scope="session")
def gitconfig(user_path: pathlib.Path) -> pathlib.Path:
    """Return fixture for ``.gitconfig`` in :func:`user_path`.

    - ``user.name``, ``user.email``: commits work without prompting
    - ``init.defaultBranch``: new repositories start on ``master``

    Note: You will need to set the home directory, see :ref:`set_home`.
    """
    c = user_path / ".gitconfig"
    c.write_text(
        f"""
[user]
	name = gitwrapper tester
	email = tester@example.org
[init]
	defaultBranch = {DEFAULT_BRANCH}
[color]
	ui = false
[advice]
	detachedHead = false
    """,
        encoding="utf-8",
    )
    return c


@pytest.fixture
def set_home(
    monkeypatch: pytest.MonkeyPatch,
    user_path: pathlib.Path,
    gitconfig: pathlib.Path,
) -> None:
    """Point ``$HOME`` at :func:`user_path` and keep git away from host config."""
    monkeypatch.setenv("HOME", str(user_path))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    for var in (
        "GIT_DIR",
        "GIT_WORK_TREE",
        "GIT_INDEX_FILE",
        "GIT_CONFIG_GLOBAL",
        "XDG_CONFIG_HOME",
        "GIT_AUTHOR_NAME",
        "GIT_AUTHOR_EMAIL",
        "GIT_COMMITTER_NAME",
        "GIT_COMMITTER_EMAIL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def git_wrapper(set_home: None) -> GitWrapper:
    """Return new :class:`gitwrapper.GitWrapper` using ``git`` from ``PATH``.

    >>> from gitwrapper.wrapper import GitWrapper

    >>> def test_example(git_wrapper: GitWrapper) -> None:
    ...     assert git_wrapper.version().startswith('git version')
    """
    return GitWrapper()


@pytest.fixture
def bare_repo(git_wrapper: GitWrapper, tmp_path: pathlib.Path) -> GitWorkingCopy:
    """Return a bare repository with history.

    Holds one commit on ``master``, a ``test-branch`` branch and a
    ``test-tag`` tag.
    """
    repo = git_wrapper.init(tmp_path / "bare_repo", bare=True)

    seed = git_wrapper.clone_repository(repo.get_directory(), tmp_path / "seed")
    (tmp_path / "seed" / "README").write_text("gitwrapper\n", encoding="utf-8")
    seed.add("README")
    seed.commit("Initial commit")
    seed.branch(TEST_BRANCH)
    seed.tag(TEST_TAG)
    seed.push("origin", DEFAULT_BRANCH, TEST_BRANCH)
    seed.push_tags()

    logger.debug("Created bare repository %s", repo.get_directory())
    return repo


@pytest.fixture
def remote_repo(
    git_wrapper: GitWrapper,
    bare_repo: GitWorkingCopy,
    tmp_path: pathlib.Path,
) -> GitWorkingCopy:
    """Return a second bare repository, cloned from :func:`bare_repo`."""
    return git_wrapper.clone_repository(
        bare_repo.get_directory(),
        tmp_path / "remote_repo",
        bare=True,
    )


@pytest.fixture
def working_copy(
    git_wrapper: GitWrapper,
    bare_repo: GitWorkingCopy,
    tmp_path: pathlib.Path,
) -> GitWorkingCopy:
    """Return a clone of :func:`bare_repo`, on ``master`` tracking ``origin``.

    >>> from gitwrapper.working_copy import GitWorkingCopy

    >>> def test_example(working_copy: GitWorkingCopy) -> None:
    ...     assert working_copy.is_tracking()
    ...     assert not working_copy.has_changes()

    .. ::
        >>> locals().keys()
        dict_keys(...)

        >>> source = ''.join([e.source for e in request._pyfuncitem.dtest.examples][:2])
        >>> pytester = request.getfixturevalue('pytester')

        >>> pytester.makepyfile(**{'whatever.py': source})
        PosixPath(...)

        >>> result = pytester.runpytest('whatever.py', '--disable-warnings')
        ===...

        >>> result.assert_outcomes(passed=1)
    """
    return git_wrapper.clone_repository(
        bare_repo.get_directory(),
        tmp_path / "working_copy",
    )
