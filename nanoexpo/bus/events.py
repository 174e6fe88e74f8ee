"""
Event Bus - Decoupled Module Communication
The store and exporters announce what they did; anything else may listen.
"""

from typing import Callable, Dict, List, Any
import logging

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple synchronous event bus.
    Handlers run in registration order; a failing handler is logged and skipped.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, handler: Callable):
        """
        Register a handler for an event.

        Args:
            event_name: Name of the event to listen for
            handler: Callable that receives event_data dict
        """
        self._handlers.setdefault(event_name, []).append(handler)
        logger.debug(f"Registered handler for event '{event_name}': {getattr(handler, '__name__', handler)}")

    def emit(self, event_name: str, event_data: Dict[str, Any] = None):
        """
        Emit an event to all registered handlers.

        Args:
            event_name: Name of the event
            event_data: Optional dict of data to pass to handlers
        """
        if event_data is None:
            event_data = {}

        logger.debug(f"Emitting event '{event_name}' with keys: {sorted(event_data)}")

        for handler in list(self._handlers.get(event_name, [])):
            try:
                handler(event_data)
            except Exception as e:
                logger.error(f"Error in handler {getattr(handler, '__name__', handler)} for event '{event_name}': {e}")

    def clear(self):
        """Clear all handlers (useful for testing)."""
        self._handlers.clear()


# Singleton instance
bus = EventBus()


# =============================================================================
# STANDARD EVENTS
# =============================================================================

# Store events (payload carries 'collection' and 'record_id')
EVENT_RECORD_CREATED = 'record_created'
EVENT_RECORD_UPDATED = 'record_updated'
EVENT_RECORD_DELETED = 'record_deleted'

# Aggregate lifecycle
EVENT_DATA_LOADED = 'data_loaded'
EVENT_DATA_SAVED = 'data_saved'
EVENT_DATA_RESET = 'data_reset'

# Export events
EVENT_CSV_EXPORTED = 'csv_exported'
EVENT_BACKUP_WRITTEN = 'backup_written'
EVENT_JSON_COPIED = 'json_copied'
