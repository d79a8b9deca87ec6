# classvote/database/kv_store.py
"""Key-value storage contract on top of Flask-SQLAlchemy.

The services only rely on four single-key operations:

- ``get(key)`` returns the stored value or ``None``
- ``set(key, value)`` inserts or overwrites
- ``delete(key)`` removes, and is a no-op when the key is absent
- ``scan_by_prefix(prefix)`` returns every value whose key starts with prefix

Each call commits on its own. There are no multi-key transactions and no
compare-and-swap, so callers order their reads and writes themselves.
Backend failures surface as ``StorageError``.
"""

import copy
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from classvote import db
from classvote.database.models import KeyValueEntry
from classvote.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore:
    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def get(self, key):
        try:
            entry = self.session.get(KeyValueEntry, key)
        except SQLAlchemyError as e:
            self._rollback()
            raise StorageError(f"Failed to read {key}: {e}")
        if entry is None:
            return None
        # Callers mutate what they read; never hand out the identity-mapped value
        return copy.deepcopy(entry.value)

    def set(self, key, value):
        try:
            entry = self.session.get(KeyValueEntry, key)
            if entry is None:
                self.session.add(KeyValueEntry(key=key, value=copy.deepcopy(value)))
            else:
                entry.value = copy.deepcopy(value)
            self.session.commit()
        except SQLAlchemyError as e:
            self._rollback()
            raise StorageError(f"Failed to write {key}: {e}")

    def delete(self, key):
        try:
            entry = self.session.get(KeyValueEntry, key)
            if entry is None:
                return
            self.session.delete(entry)
            self.session.commit()
        except SQLAlchemyError as e:
            self._rollback()
            raise StorageError(f"Failed to delete {key}: {e}")

    def scan_by_prefix(self, prefix):
        return [value for _, value in self.scan_items_by_prefix(prefix)]

    def scan_items_by_prefix(self, prefix):
        """Like scan_by_prefix but yields ``(key, value)`` pairs."""
        try:
            entries = (
                self.session.query(KeyValueEntry)
                .filter(KeyValueEntry.key.startswith(prefix, autoescape=True))
                .all()
            )
        except SQLAlchemyError as e:
            self._rollback()
            raise StorageError(f"Failed to scan {prefix}: {e}")
        return [(entry.key, copy.deepcopy(entry.value)) for entry in entries]

    def ping(self):
        self.session.execute(text("SELECT 1"))

    def _rollback(self):
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after storage failure also failed")
