"""
Event Bus - Central event dispatching system
Provides decoupled communication between the engine and its observers
"""
from typing import Callable, Dict, List
import logging
import threading

logger = logging.getLogger(__name__)


class EventBus:
    """Thread-safe event bus for component communication"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._lock = threading.RLock()

    def subscribe(self, event_type: str, callback: Callable):
        """Subscribe to an event type"""
        with self._lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []
            if callback not in self._subscribers[event_type]:
                self._subscribers[event_type].append(callback)

    def subscribe_all(self, callback: Callable):
        """Subscribe one callback to every known event type"""
        for event_type in Events.all():
            self.subscribe(event_type, callback)

    def unsubscribe(self, event_type: str, callback: Callable):
        """Unsubscribe from an event type"""
        with self._lock:
            if event_type in self._subscribers:
                if callback in self._subscribers[event_type]:
                    self._subscribers[event_type].remove(callback)

    def emit(self, event_type: str, data=None):
        """Emit an event to all subscribers"""
        with self._lock:
            callbacks = list(self._subscribers.get(event_type, []))
        for callback in callbacks:
            try:
                callback(event_type, data)
            except Exception:
                logger.exception("Error in event handler for %s", event_type)


# Event types
class Events:
    # Authentication events
    LOGIN_STARTED = "login_started"
    LOGIN_SUBMITTED = "login_submitted"
    CHALLENGE_DETECTED = "challenge_detected"
    CHALLENGE_SUBMITTED = "challenge_submitted"
    AUTH_FAILED = "auth_failed"

    # Search events
    SEARCH_CACHE_HIT = "search_cache_hit"
    SEARCH_COMPLETED = "search_completed"

    # Media events
    MEDIA_DOWNLOADED = "media_downloaded"
    MEDIA_REJECTED = "media_rejected"

    @classmethod
    def all(cls) -> List[str]:
        return [value for key, value in vars(cls).items() if key.isupper() and isinstance(value, str)]
