"""
Relationship models and types for the note graph.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from zettelkb.models.address import Address
from zettelkb.models.note import Note


class RelationshipType(str, Enum):
    """Types of relations between notes."""

    # Structural, implied by the address prefix (never stored)
    BRANCH = "BRANCH"

    # Symmetric association
    LINK = "LINK"

    # Directed "next note in this train of thought"
    CONTINUATION = "CONTINUATION"

    @property
    def is_symmetric(self) -> bool:
        return self == RelationshipType.LINK

    @property
    def is_stored(self) -> bool:
        return self != RelationshipType.BRANCH


class EdgeDirection(str, Enum):
    """Which side of an edge an endpoint query matches."""

    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"


class Edge(BaseModel):
    """
    Relationship edge between two notes.

    Links are stored once with the endpoints in address order; readers
    treat them as undirected.
    """

    source: Address
    target: Address
    type: RelationshipType
    context: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    def other(self, address: Address) -> Address:
        """The endpoint opposite to address."""
        return self.target if self.source == address else self.source

    def touches(self, address: Address) -> bool:
        return self.source == address or self.target == address

    def oriented_from(self, address: Address) -> "Edge":
        """Return this edge with source == address (links only)."""
        if self.source == address:
            return self
        return self.model_copy(update={"source": self.target, "target": self.source})


class ContinuationChain(BaseModel):
    """
    Result of walking outgoing continuation edges.

    Traversal stops at the first note without a continuation or at the
    first address that was already visited.
    """

    start: Address
    addresses: list[Address] = Field(default_factory=list)
    cycle_detected: bool = False
    cycle_at: Address | None = None

    def __len__(self) -> int:
        return len(self.addresses)


class ContextBundle(BaseModel):
    """Everything directly related to a note, computed on demand."""

    note: Note
    parent: Note | None = None
    children: list[Note] = Field(default_factory=list)
    links: list[Note] = Field(default_factory=list)
    continuation_out: Note | None = None
    continuation_in: list[Note] = Field(default_factory=list)
    backlinks: list[Note] = Field(default_factory=list)

    @property
    def backlink_addresses(self) -> list[Address]:
        return [note.address for note in self.backlinks]
