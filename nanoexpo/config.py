"""
Nano Exhibition Manager Configuration
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).parent.parent

# Load .env file
env_path = _PROJECT_ROOT / '.env'
load_dotenv(env_path)


class Config:
    """Application configuration."""

    # Local key-value storage file and the single key the aggregate lives under
    STORAGE_PATH = os.getenv('STORAGE_PATH', str(_PROJECT_ROOT / 'data' / 'local_storage.json'))
    STORAGE_KEY = os.getenv('STORAGE_KEY', 'nano_exhibition_manager_v1')
    if not STORAGE_KEY:
        _logger.critical("STORAGE_KEY is empty, cannot start. Unset it or give it a value in .env.")
        raise ValueError("STORAGE_KEY environment variable must not be empty.")

    # Exports (CSV files and JSON backups)
    EXPORT_DIR = os.getenv('EXPORT_DIR', '.')
    BACKUP_FILENAME = os.getenv('BACKUP_FILENAME', 'nano_exhibition_data.json')

    # Dashboard
    LATEST_REGISTRATIONS_LIMIT = int(os.getenv('LATEST_REGISTRATIONS_LIMIT', '5'))

    # Random part of generated record ids
    ID_SUFFIX_LENGTH = int(os.getenv('ID_SUFFIX_LENGTH', '7'))


# Singleton instance
config = Config()
