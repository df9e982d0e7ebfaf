"""
Note store implementations for ZettelKB.

Provides abstract base and concrete implementations for note storage.

Available backends:
- SQLiteNoteStore: Durable, shareable between agent processes
- InMemoryNoteStore: Ephemeral, for tests and single-process use
"""

from zettelkb.core.note_store.base import NoteStore
from zettelkb.core.note_store.memory_store import InMemoryNoteStore
from zettelkb.core.note_store.sqlite_store import SQLiteNoteStore

__all__ = [
    "NoteStore",
    "InMemoryNoteStore",
    "SQLiteNoteStore",
]
