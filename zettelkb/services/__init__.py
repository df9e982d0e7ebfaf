"""
Services for ZettelKB.

High-level business logic services:
- KnowledgeBase: Unified interface for all note operations
- NoteWriter: Note creation with race-free address allocation
- RelationGraph: Link and continuation writes
- RelationResolver: Children, backlinks, chains and context bundles
- IndexCardBuilder: Index notes listing a parent's children
- SearchMatcher: Case-insensitive substring search
"""

from zettelkb.services.index_builder import IndexCardBuilder
from zettelkb.services.knowledge_base import KnowledgeBase
from zettelkb.services.note_writer import NoteWriter
from zettelkb.services.relation_graph import RelationGraph
from zettelkb.services.relation_resolver import RelationResolver
from zettelkb.services.search import SearchMatcher

__all__ = [
    "KnowledgeBase",
    "NoteWriter",
    "RelationGraph",
    "RelationResolver",
    "IndexCardBuilder",
    "SearchMatcher",
]
