"""
Data models for ZettelKB.

Core models:
- Address, Segment, SegmentKind: Luhmann addresses and their codec
- Note: Addressed Zettelkasten note
- RelationshipType, EdgeDirection, Edge: Relation models
- ContinuationChain, ContextBundle: Derived relation views
"""

from zettelkb.models.address import (
    Address,
    Segment,
    SegmentKind,
    format_address,
    index_to_letters,
    is_valid_address,
    letters_to_index,
    parse_address,
    to_address,
)
from zettelkb.models.note import Note, normalize_tags
from zettelkb.models.relationships import (
    ContextBundle,
    ContinuationChain,
    Edge,
    EdgeDirection,
    RelationshipType,
)

__all__ = [
    # Address models
    "Address",
    "Segment",
    "SegmentKind",
    "parse_address",
    "format_address",
    "is_valid_address",
    "to_address",
    "letters_to_index",
    "index_to_letters",
    # Note model
    "Note",
    "normalize_tags",
    # Relationship models
    "RelationshipType",
    "EdgeDirection",
    "Edge",
    "ContinuationChain",
    "ContextBundle",
]
