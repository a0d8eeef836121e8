"""Conftest.py (root-level).

We keep this in root pytest fixtures in pytest's doctest plugin to be available, as well
as avoiding conftest.py from being included in the wheel, in addition to pytest_plugin
for pytester only being available via the root directory.

See "pytest_plugins in non-top-level conftest files" in
https://docs.pytest.org/en/stable/deprecations.html
"""

from __future__ import annotations

import shutil
import typing as t

import pytest
from _pytest.doctest import DoctestItem

from gitwrapper.command import GitCommand
from gitwrapper.working_copy import GitWorkingCopy
from gitwrapper.wrapper import GitWrapper

pytest_plugins = ["pytester"]


@pytest.fixture(autouse=True)
def add_doctest_fixtures(
    request: pytest.FixtureRequest,
    doctest_namespace: dict[str, t.Any],
) -> None:
    """Configure doctest fixtures for pytest-doctest."""
    if isinstance(request._pyfuncitem, DoctestItem) and shutil.which("git"):
        doctest_namespace["GitCommand"] = GitCommand
        doctest_namespace["GitWorkingCopy"] = GitWorkingCopy
        doctest_namespace["GitWrapper"] = GitWrapper
        doctest_namespace["git_wrapper"] = request.getfixturevalue("git_wrapper")
        doctest_namespace["working_copy"] = request.getfixturevalue("working_copy")
        doctest_namespace["request"] = request


@pytest.fixture(autouse=True)
def setup_fn(
    set_home: None,
) -> None:
    """Function-level test configuration fixtures for pytest."""
