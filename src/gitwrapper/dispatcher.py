"""Priority-ordered, synchronous event dispatch.

gitwrapper.dispatcher
~~~~~~~~~~~~~~~~~~~~~

Each :class:`~gitwrapper.wrapper.GitWrapper` owns one
:class:`EventDispatcher`. Dispatch is single-threaded: listeners run on the
calling thread, highest priority first, and an exception raised by a listener
propagates to the caller immediately, skipping the remaining listeners.
"""

from __future__ import annotations

import itertools
import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Mapping

    from typing_extensions import TypeAlias

    from gitwrapper.events import EventKind, GitEvent

    Listener: TypeAlias = t.Callable[[GitEvent], t.Any]
    SubscriptionSpec: TypeAlias = "str | tuple[str, int]"


class EventSubscriber(t.Protocol):
    """Object bundling several listeners, e.g. a logger.

    :meth:`get_subscribed_events` maps an event kind to the name of a method,
    or to a ``(method name, priority)`` pair.
    """

    def get_subscribed_events(self) -> Mapping[EventKind, SubscriptionSpec]:
        """Return the event kinds this subscriber listens to."""
        ...


def _parse_subscription(subscription: SubscriptionSpec) -> tuple[str, int]:
    if isinstance(subscription, str):
        return subscription, 0
    method, priority = subscription
    return method, priority


class EventDispatcher:
    """Publish :class:`~gitwrapper.events.GitEvent` objects to listeners.

    Examples
    --------
    >>> from gitwrapper.events import EventKind
    >>> dispatcher = EventDispatcher()
    >>> calls = []
    >>> dispatcher.add_listener(EventKind.Prepare, lambda e: calls.append('low'))
    >>> dispatcher.add_listener(
    ...     EventKind.Prepare, lambda e: calls.append('high'), priority=10
    ... )
    >>> len(dispatcher.get_listeners(EventKind.Prepare))
    2
    >>> dispatcher.has_listeners(EventKind.Output)
    False
    """

    def __init__(self) -> None:
        self._listeners: dict[EventKind, list[tuple[int, int, Listener]]] = {}
        self._counter = itertools.count()

    def add_listener(
        self,
        kind: EventKind,
        listener: Listener,
        priority: int = 0,
    ) -> None:
        """Register ``listener`` for ``kind``.

        Higher priorities run first. Listeners of equal priority run in
        registration order.
        """
        self._listeners.setdefault(kind, []).append(
            (priority, next(self._counter), listener),
        )

    def remove_listener(
        self,
        listener: Listener,
        kind: EventKind | None = None,
    ) -> None:
        """Unregister ``listener`` from ``kind``, or from every kind."""
        kinds = [kind] if kind is not None else list(self._listeners)
        for _kind in kinds:
            registered = self._listeners.get(_kind)
            if not registered:
                continue
            registered[:] = [entry for entry in registered if entry[2] != listener]
            if not registered:
                del self._listeners[_kind]

    def add_subscriber(self, subscriber: EventSubscriber) -> None:
        """Register every listener method declared by ``subscriber``."""
        for kind, subscription in subscriber.get_subscribed_events().items():
            method, priority = _parse_subscription(subscription)
            self.add_listener(kind, getattr(subscriber, method), priority)

    def remove_subscriber(self, subscriber: EventSubscriber) -> None:
        """Unregister every listener method declared by ``subscriber``."""
        for kind, subscription in subscriber.get_subscribed_events().items():
            method, _ = _parse_subscription(subscription)
            self.remove_listener(getattr(subscriber, method), kind)

    def get_listeners(self, kind: EventKind) -> list[Listener]:
        """Return the listeners for ``kind`` in call order."""
        registered = sorted(
            self._listeners.get(kind, []),
            key=lambda entry: (-entry[0], entry[1]),
        )
        return [listener for _, _, listener in registered]

    def has_listeners(self, kind: EventKind | None = None) -> bool:
        """Return True if any listener is registered (for ``kind``)."""
        if kind is None:
            return any(self._listeners.values())
        return bool(self._listeners.get(kind))

    def dispatch(self, event: GitEvent) -> list[t.Any]:
        """Call the listeners for ``event.kind`` and return their results."""
        return [listener(event) for listener in self.get_listeners(event.kind)]
