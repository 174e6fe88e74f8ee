"""
Data Models
Dataclasses for all entities. These are pure Python objects, no storage logic.

Every record is flat: a string id plus string fields that default to ''.
Aggregate is the unit of persistence and maps one-to-one onto the stored JSON.
"""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List

ATTENDEE_TYPES = ('Visitor', 'Exhibitor', 'Speaker', 'Staff')


@dataclass
class Exhibitor:
    """Exhibiting company. `booth` is a free-text Booth code, not checked."""
    id: str = ''
    name: str = ''
    contact: str = ''
    booth: str = ''
    notes: str = ''


@dataclass
class Booth:
    """Floor booth. `code` is meant to be unique but nothing enforces it."""
    id: str = ''
    code: str = ''
    size: str = ''
    notes: str = ''


@dataclass
class Event:
    """Schedule item. start/end are local date-times (YYYY-MM-DDTHH:MM)."""
    id: str = ''
    title: str = ''
    start: str = ''
    end: str = ''
    location: str = ''
    speaker: str = ''


@dataclass
class Attendee:
    """Registered attendee"""
    id: str = ''
    name: str = ''
    company: str = ''
    email: str = ''
    type: str = 'Visitor'


def field_names(record_cls) -> List[str]:
    """Field names of a record class, in declaration order."""
    return [f.name for f in fields(record_cls)]


def record_from_dict(record_cls, data: Dict[str, Any]):
    """
    Build a record from a stored dict.
    Unknown keys are dropped; None becomes ''; other values are kept as str.
    """
    known = set(field_names(record_cls))
    values = {
        key: '' if value is None else str(value)
        for key, value in data.items()
        if key in known
    }
    return record_cls(**values)


@dataclass
class Aggregate:
    """All four collections. Serialized as a whole on every save."""
    exhibitors: List[Exhibitor] = field(default_factory=list)
    booths: List[Booth] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    attendees: List[Attendee] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Aggregate':
        """
        Rebuild an aggregate from parsed JSON.
        Missing collections come back empty.
        Raises ValueError if the top level or any record is not an object.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Aggregate must be a JSON object, got {type(data).__name__}")

        collections = {}
        for name, record_cls in RECORD_TYPES.items():
            rows = data.get(name) or []
            if not isinstance(rows, list):
                raise ValueError(f"Collection '{name}' must be a list")
            for row in rows:
                if not isinstance(row, dict):
                    raise ValueError(f"Record in '{name}' must be an object: {row!r}")
            collections[name] = [record_from_dict(record_cls, row) for row in rows]
        return cls(**collections)


# Collection name -> record class, in the order collections are stored
RECORD_TYPES = {
    'exhibitors': Exhibitor,
    'booths': Booth,
    'events': Event,
    'attendees': Attendee,
}

SAMPLE_DATA: Dict[str, List[Dict[str, str]]] = {
    'exhibitors': [
        {'id': 'ex-1', 'name': 'NanoTech Lab', 'contact': 'info@nanotech.example', 'booth': 'A1', 'notes': 'Graphene demos'},
        {'id': 'ex-2', 'name': 'Micro Instruments', 'contact': 'sales@micro.example', 'booth': 'B2', 'notes': 'AFM & SEM'},
    ],
    'booths': [
        {'id': 'b-A1', 'code': 'A1', 'size': '3x3', 'notes': 'Near entrance'},
        {'id': 'b-B2', 'code': 'B2', 'size': '3x2', 'notes': 'Corner'},
    ],
    'events': [
        {'id': 'ev-1', 'title': 'Opening Ceremony', 'start': '2025-11-12T10:00', 'end': '2025-11-12T10:30',
         'location': 'Main Hall', 'speaker': 'Dr. A'},
    ],
    'attendees': [
        {'id': 'at-1', 'name': 'Ali Reza', 'company': 'NanoTech Lab', 'type': 'Visitor', 'email': 'ali@example.com'},
    ],
}


def sample_aggregate() -> Aggregate:
    """A fresh copy of the bundled demo data; safe to mutate."""
    return Aggregate.from_dict(SAMPLE_DATA)
