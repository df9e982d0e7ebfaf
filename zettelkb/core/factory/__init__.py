"""
Factory modules for creating ZettelKB components.
"""

from zettelkb.core.factory.store_factory import NoteStoreFactory

__all__ = [
    "NoteStoreFactory",
]
