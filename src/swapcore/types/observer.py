from typing import Protocol
from weakref import WeakSet


class AbstractPublisherMessage:
    """
    Base class for messages delivered from a `Publisher` to its subscribers.
    """


class Publisher(Protocol):
    """
    Holds weak references to subscribers and delivers messages to them.
    """

    _subscribers: WeakSet["Subscriber"]

    def subscribe(self, subscriber: "Subscriber") -> None: ...

    def unsubscribe(self, subscriber: "Subscriber") -> None: ...


class PublisherMixin:
    """
    Default subscribe & unsubscribe methods for classes meeting the `Publisher` protocol.
    """

    def subscribe(self: Publisher, subscriber: "Subscriber") -> None:
        self._subscribers.add(subscriber)

    def unsubscribe(self: Publisher, subscriber: "Subscriber") -> None:
        self._subscribers.discard(subscriber)

    def _notify_subscribers(self: Publisher, message: AbstractPublisherMessage) -> None:
        # Copy first, a subscriber may unsubscribe while being notified
        for subscriber in tuple(self._subscribers):
            subscriber.notify(publisher=self, message=message)


class Subscriber(Protocol):
    def notify(self, publisher: "Publisher", message: AbstractPublisherMessage) -> None:
        """
        Deliver `message` to the subscriber.
        """
