"""Fixtures for service tests.

Fixtures use function scope to avoid event loop issues; each test gets
a fresh store. Knowledge-base tests run against both backends.
"""

import pytest

from zettelkb.config import Config, KnowledgeBaseConfig
from zettelkb.core.note_store import InMemoryNoteStore, SQLiteNoteStore
from zettelkb.services.knowledge_base import KnowledgeBase


@pytest.fixture(params=["memory", "sqlite"])
async def note_store(request, tmp_path):
    """Create an initialized note store for each backend."""
    if request.param == "sqlite":
        store = SQLiteNoteStore(db_path=str(tmp_path / "kb.db"))
    else:
        store = InMemoryNoteStore()

    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def test_config() -> Config:
    """Default configuration for service tests."""
    return Config(kb=KnowledgeBaseConfig(allocation_retries=16))


@pytest.fixture
async def kb(note_store, test_config) -> KnowledgeBase:
    """Knowledge base over a fresh store."""
    return KnowledgeBase(store=note_store, config=test_config)


@pytest.fixture
async def sample_tree(kb):
    """
    Small tree used by relation tests.

    1 Root
    ├── 1a First
    │   └── 1a1 Deep
    └── 1b Second
    2 Other
    """
    await kb.create("Root", "Root body")
    await kb.branch("1", "First", "About apples")
    await kb.branch("1", "Second", "About pears")
    await kb.branch("1a", "Deep", "Deep thoughts")
    await kb.create("Other", "Unrelated")
    return kb
