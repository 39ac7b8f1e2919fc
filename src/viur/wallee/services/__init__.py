from .events import EVENT_SERVICE, Event, EventService, on_event
from .hooks import Customization, HOOK_SERVICE, Hook, HookService

__all__ = [
    # .event
    "EVENT_SERVICE",
    "Event",
    "EventService",
    "on_event",
    # .hooks
    "Customization",
    "HOOK_SERVICE",
    "Hook",
    "HookService",
]
