"""Fixtures for note store tests.

Every store test runs against both backends.
"""

import pytest

from zettelkb.core.note_store import InMemoryNoteStore, SQLiteNoteStore


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path):
    """Create an initialized note store for each backend."""
    if request.param == "sqlite":
        store = SQLiteNoteStore(db_path=str(tmp_path / "notes.db"))
    else:
        store = InMemoryNoteStore()

    await store.initialize()
    yield store
    await store.close()

