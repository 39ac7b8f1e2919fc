"""
Event Handling Module
=====================

Observers can be attached to the events of the payment flows,
e.g. to mark a booking as paid after a terminal charge or to
send a notification once a webhook arrived.
Observers cannot influence the flow; errors raised by them are logged
and suppressed unless ``_raise_errors`` is set.

Usage
-----

.. code-block:: python

   from viur.wallee.services import EVENT_SERVICE, Event, on_event

   # Using the decorator
   @on_event(Event.TRANSACTION_STATE_CHANGED)
   def on_state(transaction, flow):
       print(f"{flow}: {transaction.id} is {transaction.state}")

   # Registering manually
   EVENT_SERVICE.register(Event.TOKEN_STORED, remember_card)

   # Triggering
   EVENT_SERVICE.call(Event.TOKEN_STORED, token=token)
"""

import collections
import enum
import typing as t

from ..globals import WALLEE_LOGGER

logger = WALLEE_LOGGER.getChild(__name__)


class Event(enum.IntEnum):
    """
    Defines the available events used within the system.
    """

    TRANSACTION_CREATED = enum.auto()
    """Triggered after a transaction has been created at the gateway."""

    TRANSACTION_STATE_CHANGED = enum.auto()
    """Triggered when a terminal or a token charge reported the state of a transaction."""

    FLOW_FAILED = enum.auto()
    """Triggered when a payment flow ended with a failure result."""

    TOKEN_STORED = enum.auto()
    """Triggered when a token has been created and stored locally."""

    TOKEN_DELETED = enum.auto()
    """Triggered when a token has been revoked at the gateway and removed locally."""

    WEBHOOK_RECEIVED = enum.auto()
    """Triggered when a webhook payload has been appended to the transaction log."""


class EventService:
    observer: t.Final[dict[Event, list[t.Callable]]] = collections.defaultdict(list)

    def register(self, event: Event, func: t.Callable) -> t.Callable:
        if not isinstance(event, Event):
            raise TypeError(f"event must be of type Event")
        EventService.observer[event].append(func)
        return func

    def unregister(self, func: t.Callable, event: Event | None = None) -> None:
        for event_, funcs in EventService.observer.items():
            if event is None or event_ is event:
                try:
                    funcs.remove(func)
                except ValueError:
                    pass

    def call(
        self,
        _event: Event,
        _raise_errors: bool = False,
        *args, **kwargs
    ) -> None:
        for func in EventService.observer[_event]:
            try:
                func(*args, **kwargs)
            except Exception as e:
                logger.exception(f"Error while calling {func} at event {_event!r}: {e}")
                if _raise_errors:
                    raise e


EVENT_SERVICE = EventService()


def on_event(event: Event) -> t.Callable:
    if not isinstance(event, Event):
        raise TypeError

    def outer_wrapper(func: t.Callable) -> t.Callable:
        EVENT_SERVICE.register(event, func)
        return func

    return outer_wrapper
