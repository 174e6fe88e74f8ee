"""
Exports - CSV files, JSON backups and clipboard copies.

CSV layout: every cell quoted, embedded quotes doubled, rows separated by
'\\n' with nothing after the last row (a header-only file ends in '\\n'),
header row made of the column labels. Files are named export_<unix-ms>.csv.
"""

import csv
import dataclasses
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd
import pyperclip

from nanoexpo.bus.events import bus, EVENT_CSV_EXPORTED, EVENT_BACKUP_WRITTEN, EVENT_JSON_COPIED
from nanoexpo.config import config
from nanoexpo.models import Aggregate

logger = logging.getLogger(__name__)

Column = Tuple[str, str]  # (record key, header label)

EXHIBITOR_COLUMNS: List[Column] = [
    ('name', 'Name'), ('contact', 'Contact'), ('booth', 'Booth'), ('notes', 'Notes'),
]
ATTENDEE_COLUMNS: List[Column] = [
    ('name', 'Name'), ('company', 'Company'), ('email', 'Email'), ('type', 'Type'),
]

# Collections offered for CSV export, with their column presets
CSV_PRESETS = {
    'exhibitors': EXHIBITOR_COLUMNS,
    'attendees': ATTENDEE_COLUMNS,
}


def _as_dict(record: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(record):
        return dataclasses.asdict(record)
    return dict(record)


def _jsonable(payload: Any) -> Any:
    if isinstance(payload, Aggregate):
        return payload.to_dict()
    if isinstance(payload, (list, tuple)):
        return [_as_dict(r) for r in payload]
    return payload


def to_csv(records: Iterable[Any], columns: Sequence[Column]) -> str:
    """Render records (dataclasses or dicts) as CSV text."""
    labels = [label for _, label in columns]
    rows = []
    for record in records:
        values = _as_dict(record)
        rows.append(['' if values.get(key) is None else str(values.get(key)) for key, _ in columns])

    frame = pd.DataFrame(rows, columns=labels)
    text = frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator='\n')
    # header + '\n' + rows joined by '\n': no terminator after the last row
    return text[:-1] if rows else text


def export_csv(records: Iterable[Any], columns: Sequence[Column],
               directory: Optional[Union[str, Path]] = None) -> Path:
    """
    Write records to export_<unix-ms>.csv in directory (default EXPORT_DIR).
    Returns: path of the written file
    """
    records = list(records)
    out_dir = Path(directory or config.EXPORT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"export_{int(time.time() * 1000)}.csv"

    path.write_text(to_csv(records, columns), encoding='utf-8')
    logger.info(f"Exported {len(records)} rows to {path}")

    bus.emit(EVENT_CSV_EXPORTED, {'path': str(path), 'rows': len(records)})
    return path


def backup_json(aggregate: Aggregate) -> str:
    """Full aggregate as JSON, pretty-printed with 2-space indent."""
    return json.dumps(aggregate.to_dict(), indent=2)


def write_backup(aggregate: Aggregate, directory: Optional[Union[str, Path]] = None) -> Path:
    """
    Write the JSON backup file (BACKUP_FILENAME) into directory.
    An existing backup with the same name is overwritten.
    """
    out_dir = Path(directory or config.EXPORT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / config.BACKUP_FILENAME

    path.write_text(backup_json(aggregate), encoding='utf-8')
    logger.info(f"Wrote JSON backup to {path}")

    bus.emit(EVENT_BACKUP_WRITTEN, {'path': str(path)})
    return path


def copy_json(payload: Union[Aggregate, Sequence[Any]]) -> bool:
    """
    Copy payload (an aggregate or a list of records) to the clipboard as compact JSON.
    Returns: True if copied, False if the clipboard is unavailable
    """
    text = json.dumps(_jsonable(payload))
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.warning(f"Clipboard unavailable, nothing copied: {e}")
        return False

    logger.info(f"Copied {len(text)} chars of JSON to clipboard")
    bus.emit(EVENT_JSON_COPIED, {'chars': len(text)})
    return True
