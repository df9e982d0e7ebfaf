"""
Factory for creating note store backends.
"""

from zettelkb.config import Config
from zettelkb.core.note_store.base import NoteStore
from zettelkb.core.note_store.memory_store import InMemoryNoteStore
from zettelkb.core.note_store.sqlite_store import SQLiteNoteStore
from zettelkb.utils.exceptions import ConfigurationError


class NoteStoreFactory:
    """Factory for creating note store backends from configuration."""

    @staticmethod
    def create(config: Config) -> NoteStore:
        """
        Create note store from configuration.

        Args:
            config: Main configuration object

        Returns:
            Note store instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        backend = config.store.backend
        if backend == "sqlite":
            return SQLiteNoteStore(
                db_path=config.store.db_path,
                busy_timeout_ms=config.store.busy_timeout_ms,
            )
        elif backend == "memory":
            return InMemoryNoteStore()
        else:
            raise ConfigurationError(
                f"Unsupported note store backend: {backend}", {"backend": backend}
            )
