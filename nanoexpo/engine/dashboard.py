"""
Dashboard figures: collection counts and the latest registrations.
"""

from typing import Dict, List

from nanoexpo.config import config
from nanoexpo.models import Aggregate, Attendee


def overview(aggregate: Aggregate) -> Dict[str, int]:
    return {
        'exhibitors': len(aggregate.exhibitors),
        'booths': len(aggregate.booths),
        'events': len(aggregate.events),
        'attendees': len(aggregate.attendees),
    }


def latest_registrations(aggregate: Aggregate, limit: int = None) -> List[Attendee]:
    """Last `limit` attendees added, newest first."""
    if limit is None:
        limit = config.LATEST_REGISTRATIONS_LIMIT
    if limit <= 0:
        return []
    return list(reversed(aggregate.attendees[-limit:]))
