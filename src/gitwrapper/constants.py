"""Constant variables for gitwrapper."""

from __future__ import annotations

import pathlib

#: Default timeout, in seconds, for a git subprocess
DEFAULT_TIMEOUT = 60

#: Default port passed to the ``GIT_SSH`` wrapper script
DEFAULT_SSH_PORT = 22

#: Environment variable pointing git at the ssh wrapper script
GIT_SSH = "GIT_SSH"

#: Private key read by the bundled ssh wrapper script
GIT_SSH_KEY = "GIT_SSH_KEY"

#: Port read by the bundled ssh wrapper script
GIT_SSH_PORT = "GIT_SSH_PORT"

#: ssh wrapper script shipped with the package
DEFAULT_SSH_WRAPPER = pathlib.Path(__file__).parent / "bin" / "git-ssh-wrapper.sh"

#: Operations accepted by :meth:`GitWorkingCopy.get_remote_url`
REMOTE_URL_OPERATIONS = ("fetch", "push")
