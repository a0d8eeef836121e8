"""Tests for running git commands through GitProcess."""

from __future__ import annotations

import signal
import time
import typing as t

import pytest

from gitwrapper import exc
from gitwrapper.command import GitCommand
from gitwrapper.events import (
    EventKind,
    GitErrorEvent,
    GitEvent,
    GitOutputEvent,
    PrepareOutcome,
)
from gitwrapper.process import GitProcess, ProcessState
from gitwrapper.wrapper import GitWrapper

if t.TYPE_CHECKING:
    import pathlib

    from gitwrapper.working_copy import GitWorkingCopy


def record_events(wrapper: GitWrapper) -> list[GitEvent]:
    """Register a listener for every event kind, return the event log."""
    events: list[GitEvent] = []
    for kind in EventKind:
        wrapper.get_dispatcher().add_listener(kind, events.append)
    return events


def test_success_lifecycle(working_copy: GitWorkingCopy) -> None:
    """A successful command dispatches prepare, output and success."""
    wrapper = working_copy.get_wrapper()
    events = record_events(wrapper)

    command = GitCommand("rev-parse", "HEAD", abbrev_ref=True)
    command.set_directory(working_copy.get_directory())
    process = GitProcess(wrapper, command)

    assert process.run() == "master\n"
    assert process.state is ProcessState.Succeeded
    assert process.returncode == 0
    assert command.executed

    kinds = [event.kind for event in events]
    assert kinds[0] is EventKind.Prepare
    assert kinds[-1] is EventKind.Success
    assert set(kinds[1:-1]) == {EventKind.Output}

    output = "".join(
        event.buffer for event in events if isinstance(event, GitOutputEvent)
    )
    assert output == "master\n"
    assert all(event.process is process for event in events)


def test_failure_lifecycle(working_copy: GitWorkingCopy) -> None:
    """A failing command dispatches an error event, then raises."""
    wrapper = working_copy.get_wrapper()
    events = record_events(wrapper)

    with pytest.raises(exc.GitExecutionError) as excinfo:
        working_copy.run("rev-parse", "no-such-ref", verify=True)

    error = excinfo.value
    assert error.returncode != 0
    assert "fatal" in error.stderr
    assert str(error) == error.stderr
    assert error.command_line[1:] == ["rev-parse", "--verify", "no-such-ref"]

    assert events[0].kind is EventKind.Prepare
    assert events[-1].kind is EventKind.Error
    assert isinstance(events[-1], GitErrorEvent)
    assert events[-1].exception is error
    assert EventKind.Success not in [event.kind for event in events]

    error_chunks = [
        event for event in events if isinstance(event, GitOutputEvent)
    ]
    assert error_chunks
    assert all(event.is_error() for event in error_chunks)


def test_error_output_falls_back_to_stdout(working_copy: GitWorkingCopy) -> None:
    """git reports 'nothing to commit' on stdout, which becomes the error."""
    with pytest.raises(exc.GitExecutionError) as excinfo:
        working_copy.commit("Nothing changed")

    error = excinfo.value
    assert error.stderr == ""
    assert "nothing to commit" in error.stdout
    assert error.error_output == error.stdout
    assert "nothing to commit" in str(error)


class BypassFixture(t.NamedTuple):
    """Test fixture for test_bypass()."""

    test_id: str
    listener: t.Callable[[t.Any], t.Any]


BYPASS_FIXTURES: list[BypassFixture] = [
    BypassFixture(
        test_id="prepare_outcome",
        listener=lambda event: PrepareOutcome.Bypass,
    ),
    BypassFixture(
        test_id="command_bypass",
        listener=lambda event: event.command.bypass(),
    ),
]


@pytest.mark.parametrize(
    list(BypassFixture._fields),
    BYPASS_FIXTURES,
    ids=[test.test_id for test in BYPASS_FIXTURES],
)
def test_bypass(
    test_id: str,
    listener: t.Callable[[t.Any], t.Any],
    git_wrapper: GitWrapper,
    tmp_path: pathlib.Path,
) -> None:
    """A prepare listener can skip the subprocess."""
    git_wrapper.get_dispatcher().add_listener(EventKind.Prepare, listener)
    events = record_events(git_wrapper)

    command = GitCommand("init", tmp_path / "not-created")
    process = GitProcess(git_wrapper, command)

    assert process.run() == ""
    assert process.state is ProcessState.Bypassed
    assert process.popen is None
    assert command.is_bypassed()
    assert command.executed
    assert not (tmp_path / "not-created").exists()
    assert [event.kind for event in events] == [EventKind.Prepare, EventKind.Bypass]


def test_proceed_outcome_runs(git_wrapper: GitWrapper) -> None:
    """Returning PrepareOutcome.Proceed lets the command run."""
    git_wrapper.get_dispatcher().add_listener(
        EventKind.Prepare,
        lambda event: PrepareOutcome.Proceed,
    )
    assert git_wrapper.version().startswith("git version")


def test_missing_binary(tmp_path: pathlib.Path) -> None:
    """A missing binary fails before any event is dispatched."""
    wrapper = GitWrapper(git_binary=str(tmp_path / "no-such-git"))
    events = record_events(wrapper)

    with pytest.raises(exc.BinaryNotFound) as excinfo:
        wrapper.version()

    assert isinstance(excinfo.value, exc.CommandSetupError)
    assert events == []


def test_missing_directory(git_wrapper: GitWrapper, tmp_path: pathlib.Path) -> None:
    """A missing working directory fails before any event is dispatched."""
    events = record_events(git_wrapper)
    command = GitCommand("status").set_directory(tmp_path / "missing")

    with pytest.raises(exc.CommandSetupError) as excinfo:
        git_wrapper.run(command)

    assert excinfo.value.command_line[1:] == ["status"]
    assert events == []
    assert not command.executed


def test_timeout(tmp_path: pathlib.Path) -> None:
    """A command running past the timeout is killed, its output kept."""
    slow_git = tmp_path / "slow-git"
    slow_git.write_text("#!/bin/sh\necho started\nexec sleep 30\n", encoding="utf-8")
    slow_git.chmod(0o755)

    wrapper = GitWrapper(git_binary=str(slow_git), timeout=0.5)
    events = record_events(wrapper)
    process = GitProcess(wrapper, GitCommand("status"))

    with pytest.raises(exc.GitCommandTimeout) as excinfo:
        process.run()

    error = excinfo.value
    assert isinstance(error, TimeoutError)
    assert error.timeout == 0.5
    assert process.state is ProcessState.Failed
    assert process.popen is not None
    assert process.popen.poll() is not None
    assert process.returncode == -signal.SIGKILL
    assert error.returncode == process.returncode
    assert error.stdout == "started\n"
    assert events[-1].kind is EventKind.Error
    assert isinstance(events[-1], GitErrorEvent)
    assert events[-1].exception is error


def test_timeout_with_continuous_output(tmp_path: pathlib.Path) -> None:
    """A command that never stops writing is still killed at the deadline."""
    chatty_git = tmp_path / "chatty-git"
    chatty_git.write_text("#!/bin/sh\nexec yes\n", encoding="utf-8")
    chatty_git.chmod(0o755)

    wrapper = GitWrapper(git_binary=str(chatty_git), timeout=0.5)
    process = GitProcess(wrapper, GitCommand("status"))

    started = time.monotonic()
    with pytest.raises(exc.GitCommandTimeout) as excinfo:
        process.run()

    assert time.monotonic() - started < 10
    assert excinfo.value.stdout.startswith("y\ny\n")
    assert excinfo.value.returncode == -signal.SIGKILL


def test_unicode_output(working_copy: GitWorkingCopy, tmp_path: pathlib.Path) -> None:
    """Multibyte output is decoded as UTF-8."""
    readme = tmp_path / "working_copy" / "README"
    readme.write_text("Ελληνικά\n", encoding="utf-8")
    working_copy.commit("юникод")

    assert working_copy.log("--format=%s", n=1) == "юникод\n"


def test_environment_overrides(tmp_path: pathlib.Path) -> None:
    """Wrapper env vars reach the subprocess, stringified."""
    echo_git = tmp_path / "echo-git"
    echo_git.write_text(
        "#!/bin/sh\nprintf '%s %s' \"$GITWRAPPER_TEST\" \"$GITWRAPPER_PORT\"\n",
        encoding="utf-8",
    )
    echo_git.chmod(0o755)

    wrapper = GitWrapper(git_binary=str(echo_git), env={"GITWRAPPER_TEST": "yes"})
    wrapper.set_env_var("GITWRAPPER_PORT", 2222)

    assert wrapper.run(GitCommand("status")) == "yes 2222"


def test_prepare_listener_changes_not_spawned(tmp_path: pathlib.Path) -> None:
    """The command line is fixed before prepare listeners run."""
    args_git = tmp_path / "args-git"
    args_git.write_text("#!/bin/sh\nprintf '%s ' \"$@\"\n", encoding="utf-8")
    args_git.chmod(0o755)

    wrapper = GitWrapper(git_binary=str(args_git))
    wrapper.get_dispatcher().add_listener(
        EventKind.Prepare,
        lambda event: event.command.set_flag("verbose"),
    )
    command = GitCommand("status")
    process = GitProcess(wrapper, command)

    assert process.run() == "status "
    assert process.command_line == [str(args_git), "status"]
    assert command.get_command_line() == ["status", "--verbose"]
