"""
AccountHub Backend — Event Dispatcher
=======================================

What:  Minimal in-process event dispatcher used by the registration flow.
How:   Listeners are registered per event name (directly, or through a
       subscriber's get_subscribed_events() mapping) and called in
       registration order. Coroutine results are awaited.

Unlike a fire-and-forget audit bus, listener exceptions propagate: a
registration that fails to persist must fail the request.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

REGISTRATION_INITIALIZE = "registration.initialize"
REGISTRATION_SUCCESS = "registration.success"


@dataclass
class FormEvent:
    """
    Carries one registration request through its listeners.

    Attributes:
        method: HTTP method of the request; only POST submits the form
        payload: submitted JSON body (normally an object)
        form: the form being handled (set by the initialize listener)
        user: the registered user once the form was valid
        response: what the route returns (set by the success listener)
    """

    method: str
    payload: Any = field(default_factory=dict)
    form: Optional[Any] = None
    user: Optional[Any] = None
    response: Optional[Any] = None


class EventDispatcher:
    """Maps event names to ordered listener lists."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def add_listener(self, event_name: str, listener: Callable) -> None:
        self._listeners.setdefault(event_name, []).append(listener)
        logger.debug(
            "Registered listener %s for %s",
            getattr(listener, "__name__", repr(listener)),
            event_name,
        )

    def add_subscriber(self, subscriber: Any) -> None:
        """Register every `event name → method name` pair the subscriber declares."""
        for event_name, method_name in subscriber.get_subscribed_events().items():
            self.add_listener(event_name, getattr(subscriber, method_name))

    def get_listeners(self, event_name: str) -> List[Callable]:
        return list(self._listeners.get(event_name, []))

    async def dispatch(self, event_name: str, event: Any) -> List[Any]:
        """Call every listener for `event_name`; returns their results in order."""
        results = []
        for listener in self._listeners.get(event_name, []):
            result = listener(event)
            if inspect.isawaitable(result):
                result = await result
            results.append(result)
        return results
