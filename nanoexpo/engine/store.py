"""
Exhibition Store - Core CRUD + Persistence
Pure Python module, no presentation. Owns the aggregate, exposes one typed
repository per collection and writes the whole aggregate back to local
storage after every mutation.

Lifecycle:
    store = ExhibitionStore.open(get_storage(), confirm=click.confirm)
    store.attendees.add({'name': 'Jane Doe', 'company': 'Acme'})
    store.filter('attendees', 'acme')

Destructive operations (remove, reset) ask the injected confirm callback
first; a declined prompt is a no-op.
"""

import dataclasses
import json
import logging
import random
import string
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar, Union

from nanoexpo.bus.events import (
    bus, EVENT_RECORD_CREATED, EVENT_RECORD_UPDATED, EVENT_RECORD_DELETED,
    EVENT_DATA_LOADED, EVENT_DATA_SAVED, EVENT_DATA_RESET,
)
from nanoexpo.config import config
from nanoexpo.db.storage import LocalStorage
from nanoexpo.logging_config import log_call
from nanoexpo.models import Aggregate, RECORD_TYPES, field_names, sample_aggregate

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Fields joined together and searched by filter(), per collection
SEARCH_FIELDS = {
    'exhibitors': ('name', 'contact', 'booth', 'notes'),
    'booths': ('code', 'size', 'notes'),
    'events': ('title', 'location', 'speaker'),
    'attendees': ('name', 'company', 'email', 'type'),
}

# The one field a new record can't be created without
NAME_FIELDS = {
    'exhibitors': 'name',
    'booths': 'code',
    'events': 'title',
    'attendees': 'name',
}

ID_PREFIXES = {
    'exhibitors': 'ex',
    'booths': 'b',
    'events': 'ev',
    'attendees': 'at',
}

SINGULAR = {
    'exhibitors': 'exhibitor',
    'booths': 'booth',
    'events': 'event',
    'attendees': 'attendee',
}

RESET_PROMPT = 'Reset demo data? This will overwrite your current data.'

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id(prefix: str = 'id', taken: Iterable[str] = ()) -> str:
    """
    Return '<prefix>-<random base-36 suffix>'.
    Draws again if the candidate is already in `taken`.
    """
    taken = set(taken)
    while True:
        suffix = ''.join(random.choices(_ID_ALPHABET, k=config.ID_SUFFIX_LENGTH))
        candidate = f"{prefix}-{suffix}"
        if candidate not in taken:
            return candidate
        logger.warning(f"generate_id: collision on {candidate}, drawing again")


def always_confirm(message: str) -> bool:
    return True


def _validate_fields(values: Dict[str, Any], allowed: Iterable[str], entity: str) -> None:
    """Raise ValueError if any key in values is not a field of the entity."""
    invalid = set(values.keys()) - set(allowed)
    if invalid:
        raise ValueError(f"Invalid {entity} fields: {sorted(invalid)}")


def _as_text(value: Any) -> str:
    return '' if value is None else str(value)


class Repository(Generic[T]):
    """
    Typed access to one collection of the store's aggregate.

    add/update/remove persist through the owning store; list/filter are
    recomputed from the current aggregate on every call.
    """

    def __init__(self, store: 'ExhibitionStore', collection: str):
        self.store = store
        self.collection = collection
        self.record_cls = RECORD_TYPES[collection]
        self.search_fields = SEARCH_FIELDS[collection]
        self.name_field = NAME_FIELDS[collection]
        self.id_prefix = ID_PREFIXES[collection]
        self.singular = SINGULAR[collection]

    @property
    def _records(self) -> List[T]:
        return getattr(self.store.data, self.collection)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(list(self._records))

    def list(self) -> List[T]:
        """All records in insertion order."""
        return list(self._records)

    def ids(self) -> List[str]:
        return [r.id for r in self._records]

    def get(self, record_id: str) -> Optional[T]:
        for record in self._records:
            if record.id == record_id:
                return record
        logger.debug(f"get: {self.singular} {record_id} not found")
        return None

    def add(self, item: Union[T, Dict[str, Any]]) -> T:
        """
        Append a new record with a freshly generated id and persist.
        Any id the caller supplied is replaced.
        Returns the stored record.
        """
        if isinstance(item, self.record_cls):
            values = dataclasses.asdict(item)
        else:
            values = dict(item)
        values.pop('id', None)
        _validate_fields(values, field_names(self.record_cls), self.singular)

        values = {k: _as_text(v) for k, v in values.items()}
        if not values.get(self.name_field, '').strip():
            raise ValueError(f"{self.singular.capitalize()} {self.name_field} is required")

        record = self.record_cls(id=generate_id(self.id_prefix, self.ids()), **values)
        self._records.append(record)
        logger.info(f"Created {self.singular} {record.id}: {getattr(record, self.name_field)}")

        self.store.save()
        bus.emit(EVENT_RECORD_CREATED, {'collection': self.collection, 'record_id': record.id, 'record': record})
        return record

    def update(self, record_id: str, patch: Dict[str, Any]) -> bool:
        """
        Merge patch over the record with this id; the id itself never changes.
        Returns: True if updated, False if not found or nothing to change
        """
        patch = {k: v for k, v in patch.items() if k != 'id'}
        if not patch:
            return False

        records = self._records
        index = next((i for i, record in enumerate(records) if record.id == record_id), None)
        if index is None:
            logger.debug(f"update: {self.singular} {record_id} not found, nothing changed")
            return False

        # Guard: only known fields may be patched
        _validate_fields(patch, field_names(self.record_cls), self.singular)

        records[index] = dataclasses.replace(records[index], **{k: _as_text(v) for k, v in patch.items()})
        logger.info(f"Updated {self.singular} {record_id}: {sorted(patch)}")
        self.store.save()
        bus.emit(EVENT_RECORD_UPDATED, {'collection': self.collection, 'record_id': record_id, 'updates': patch})
        return True

    def remove(self, record_id: str) -> bool:
        """
        Delete the record with this id once the store's confirm callback agrees.
        Returns: True if deleted, False if not found or declined
        """
        if self.get(record_id) is None:
            return False

        if not self.store.confirm(f"Delete {self.singular}?"):
            logger.info(f"Delete of {self.singular} {record_id} declined")
            return False

        setattr(self.store.data, self.collection, [r for r in self._records if r.id != record_id])
        logger.info(f"Deleted {self.singular} {record_id}")

        self.store.save()
        bus.emit(EVENT_RECORD_DELETED, {'collection': self.collection, 'record_id': record_id})
        return True

    def filter(self, query: Optional[str] = '') -> List[T]:
        """
        Records whose search fields, joined with spaces, contain query
        (case-insensitive). Blank query returns everything, order preserved.
        """
        needle = (query or '').lower()
        return [
            record for record in self._records
            if needle in ' '.join(_as_text(getattr(record, f)) for f in self.search_fields).lower()
        ]


class ExhibitionStore:
    """
    Holds the aggregate and its four repositories.

    Args:
        storage: key-value backend (LocalStorage or anything with the same methods)
        confirm: callable(message) -> bool, asked before delete and reset
        key: storage key; defaults to STORAGE_KEY from config
    """

    def __init__(self, storage: LocalStorage, confirm: Callable[[str], bool] = None, key: str = None):
        self.storage = storage
        self.confirm = confirm or always_confirm
        self.key = key or config.STORAGE_KEY
        self.data = Aggregate()

        self.exhibitors: Repository = Repository(self, 'exhibitors')
        self.booths: Repository = Repository(self, 'booths')
        self.events: Repository = Repository(self, 'events')
        self.attendees: Repository = Repository(self, 'attendees')
        self._repositories = {
            'exhibitors': self.exhibitors,
            'booths': self.booths,
            'events': self.events,
            'attendees': self.attendees,
        }

    @classmethod
    def open(cls, storage: LocalStorage, confirm: Callable[[str], bool] = None, key: str = None) -> 'ExhibitionStore':
        """Construct and load in one step."""
        store = cls(storage, confirm=confirm, key=key)
        store.load()
        return store

    def repository(self, collection: str) -> Repository:
        try:
            return self._repositories[collection]
        except KeyError:
            raise KeyError(f"Unknown collection '{collection}'. Expected one of: {', '.join(self._repositories)}")

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    @log_call
    def load(self) -> Aggregate:
        """
        Read the persisted aggregate.
        Missing or unreadable data falls back to the sample aggregate; never raises.
        """
        source = 'storage'
        try:
            raw = self.storage.get_item(self.key)
            if raw is None:
                logger.info(f"No saved data under '{self.key}', starting from sample data")
                source = 'sample'
                self.data = sample_aggregate()
            else:
                self.data = Aggregate.from_dict(json.loads(raw))
        except (OSError, ValueError, TypeError, RecursionError) as e:
            logger.error(f"Could not load saved data under '{self.key}', using sample data: {e}")
            source = 'sample'
            self.data = sample_aggregate()

        bus.emit(EVENT_DATA_LOADED, {'source': source, 'counts': self.counts()})
        return self.data

    def save(self, aggregate: Optional[Aggregate] = None) -> None:
        """Write the whole aggregate under the storage key, replacing the old value."""
        if aggregate is not None:
            self.data = aggregate
        self.storage.set_item(self.key, json.dumps(self.data.to_dict()))
        logger.debug(f"Saved aggregate under '{self.key}': {self.counts()}")
        bus.emit(EVENT_DATA_SAVED, {'counts': self.counts()})

    @log_call
    def reset(self) -> bool:
        """
        Throw away saved data and start again from the sample aggregate.
        Returns: True if reset, False if declined
        """
        if not self.confirm(RESET_PROMPT):
            logger.info("Reset to sample data declined")
            return False

        self.storage.remove_item(self.key)
        self.save(sample_aggregate())
        logger.info("Reset to sample data")
        bus.emit(EVENT_DATA_RESET, {'counts': self.counts()})
        return True

    def counts(self) -> Dict[str, int]:
        return {name: len(repo) for name, repo in self._repositories.items()}

    # =========================================================================
    # COLLECTION-NAME OPERATIONS
    # =========================================================================

    def add_item(self, collection: str, item: Union[Any, Dict[str, Any]]) -> Aggregate:
        """Append item (with a new id) to the named collection; returns the aggregate."""
        self.repository(collection).add(item)
        return self.data

    def update_item(self, collection: str, record_id: str, patch: Dict[str, Any]) -> Aggregate:
        """Merge patch into the matching record; no-op if the id is unknown."""
        self.repository(collection).update(record_id, patch)
        return self.data

    def remove_item(self, collection: str, record_id: str) -> Aggregate:
        """Delete the matching record after confirmation; no-op if absent or declined."""
        self.repository(collection).remove(record_id)
        return self.data

    def filter(self, collection: str, query: Optional[str] = '') -> List[Any]:
        return self.repository(collection).filter(query)
