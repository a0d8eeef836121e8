"""Tests for gitwrapper.subscribers."""

from __future__ import annotations

import logging
import typing as t

import pytest

from gitwrapper import exc
from gitwrapper.events import EventKind, PrepareOutcome
from gitwrapper.subscribers import GitLoggerEventSubscriber

if t.TYPE_CHECKING:
    from gitwrapper.working_copy import GitWorkingCopy
    from gitwrapper.wrapper import GitWrapper


def test_logs_success(
    working_copy: GitWorkingCopy,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A successful command logs prepare, output and success."""
    wrapper = working_copy.get_wrapper()
    wrapper.add_logger_event_subscriber(GitLoggerEventSubscriber())

    with caplog.at_level(logging.DEBUG, logger="gitwrapper.subscribers"):
        working_copy.run("rev-parse", "HEAD", abbrev_ref=True)

    records = [r for r in caplog.records if r.name == "gitwrapper.subscribers"]
    messages = [r.getMessage() for r in records]

    assert messages == [
        "Git command preparing to run",
        "master\n",
        "Git command successfully run",
    ]
    assert [r.levelno for r in records] == [logging.INFO, logging.DEBUG, logging.INFO]

    for record in records:
        assert record.command.endswith("rev-parse --abbrev-ref HEAD")

    output = next(r for r in records if r.getMessage() == "master\n")
    assert output.levelno == logging.DEBUG
    assert output.error is False


def test_logs_error(
    working_copy: GitWorkingCopy,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A failing command logs its stderr chunks and an error."""
    wrapper = working_copy.get_wrapper()
    wrapper.add_logger_event_subscriber(GitLoggerEventSubscriber())

    with caplog.at_level(logging.DEBUG, logger="gitwrapper.subscribers"):
        with pytest.raises(exc.GitExecutionError):
            working_copy.run("rev-parse", "no-such-ref", verify=True)

    records = [r for r in caplog.records if r.name == "gitwrapper.subscribers"]
    assert records[-1].getMessage() == "Error running Git command"
    assert records[-1].levelno == logging.ERROR
    assert any(getattr(r, "error", False) for r in records)


def test_logs_bypass(
    git_wrapper: GitWrapper,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A bypassed command logs prepare and bypass only."""
    git_wrapper.get_dispatcher().add_listener(
        EventKind.Prepare,
        lambda event: PrepareOutcome.Bypass,
    )
    git_wrapper.add_logger_event_subscriber(GitLoggerEventSubscriber())

    with caplog.at_level(logging.DEBUG, logger="gitwrapper.subscribers"):
        assert git_wrapper.git("status") == ""

    messages = [
        r.getMessage() for r in caplog.records if r.name == "gitwrapper.subscribers"
    ]
    assert messages == ["Git command preparing to run", "Git command bypassed"]


def test_custom_logger_and_levels(
    git_wrapper: GitWrapper,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Records go to the configured logger at the configured levels."""
    logger = logging.getLogger("gitwrapper.tests.custom")
    subscriber = GitLoggerEventSubscriber(
        logger=logger,
        level_mapping={EventKind.Prepare: logging.WARNING},
    )
    subscriber.set_log_level_mapping(EventKind.Success, logging.WARNING)
    git_wrapper.add_logger_event_subscriber(subscriber)

    with caplog.at_level(logging.WARNING, logger="gitwrapper.tests.custom"):
        git_wrapper.version()

    records = [r for r in caplog.records if r.name == "gitwrapper.tests.custom"]
    assert [r.getMessage() for r in records] == [
        "Git command preparing to run",
        "Git command successfully run",
    ]


def test_level_mapping_is_per_instance() -> None:
    """Changing one subscriber's levels leaves others alone."""
    first = GitLoggerEventSubscriber()
    second = GitLoggerEventSubscriber()
    first.set_log_level_mapping(EventKind.Output, logging.INFO)

    assert first.get_log_level_mapping(EventKind.Output) == logging.INFO
    assert second.get_log_level_mapping(EventKind.Output) == logging.DEBUG
    assert second.get_log_level_mapping(EventKind.Error) == logging.ERROR


def test_unknown_event_kind() -> None:
    """Unmapped kinds raise UnknownEventKind, a LookupError."""
    subscriber = GitLoggerEventSubscriber()
    with pytest.raises(exc.UnknownEventKind):
        subscriber.get_log_level_mapping("not-an-event")
    with pytest.raises(LookupError):
        subscriber.get_log_level_mapping(None)


def test_set_logger() -> None:
    """The logger can be swapped after construction."""
    subscriber = GitLoggerEventSubscriber()
    logger = logging.getLogger("gitwrapper.tests.other")
    subscriber.set_logger(logger)
    assert subscriber.logger is logger
