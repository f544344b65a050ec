"""
Deployment event emission

Stages report progress through a DeploymentEvents channel instead of
printing. Callers subscribe to receive DeploymentEvent objects; every event
is also forwarded to the standard library logger of this module.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from .constants import EventLevel

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    EventLevel.DEBUG: logging.DEBUG,
    EventLevel.INFO: logging.INFO,
    EventLevel.WARNING: logging.WARNING,
    EventLevel.ERROR: logging.ERROR,
}


@dataclass
class DeploymentEvent:
    """A single progress event"""
    name: str
    level: str
    data: Dict[str, Any] = field(default_factory=dict)


Subscriber = Callable[[DeploymentEvent], None]


class DeploymentEvents:
    """
    Per-deployer event channel

    Example:
        events = DeploymentEvents()
        events.subscribe(lambda e: print(e.name, e.data))
        events.info("gas.estimated", gas=21000)
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a subscriber

        Returns:
            A callable that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, name: str, level: str = EventLevel.INFO, **data) -> DeploymentEvent:
        event = DeploymentEvent(name=name, level=level, data=data)
        logger.log(_LOG_LEVELS.get(level, logging.INFO), "%s %s", name, data)

        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                # A broken subscriber must not abort a deployment in flight
                logger.exception("Event subscriber failed for %s", name)

        return event

    def debug(self, name: str, **data) -> DeploymentEvent:
        return self.emit(name, EventLevel.DEBUG, **data)

    def info(self, name: str, **data) -> DeploymentEvent:
        return self.emit(name, EventLevel.INFO, **data)

    def warning(self, name: str, **data) -> DeploymentEvent:
        return self.emit(name, EventLevel.WARNING, **data)

    def error(self, name: str, **data) -> DeploymentEvent:
        return self.emit(name, EventLevel.ERROR, **data)
