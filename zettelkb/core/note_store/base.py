"""
Base interface for note storage.

The engine only relies on the primitives below. Each one must be atomic
on its own; in particular insert_if_absent is the compare-and-insert that
makes concurrent address allocation race-free.
"""

from abc import ABC, abstractmethod

from zettelkb.models.address import Address
from zettelkb.models.note import Note
from zettelkb.models.relationships import Edge, EdgeDirection, RelationshipType


class NoteStore(ABC):
    """Abstract base class for note storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    # ═══════════════════════════════════════════════════════════
    # NOTE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def insert_if_absent(self, note: Note) -> bool:
        """
        Insert a note unless its address is already taken.

        Args:
            note: Note to store

        Returns:
            True if inserted, False if the address was occupied
        """
        pass

    @abstractmethod
    async def get(self, address: Address) -> Note | None:
        """
        Retrieve a note by address.

        Args:
            address: Note address

        Returns:
            Note or None if not found
        """
        pass

    @abstractmethod
    async def update(self, note: Note) -> None:
        """
        Overwrite title, body, tags and updated_at of an existing note.

        Args:
            note: Updated note (address must exist)
        """
        pass

    @abstractmethod
    async def scan_prefix(self, prefix: Address | None = None) -> list[Note]:
        """
        Notes equal to or descending from prefix.

        Args:
            prefix: Subtree root, or None for every note

        Returns:
            Notes in address order
        """
        pass

    @abstractmethod
    async def scan_children(self, parent: Address | None = None) -> list[Note]:
        """
        Direct children of parent.

        Args:
            parent: Parent address, or None for root notes

        Returns:
            Notes in address order
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def insert_edge(self, edge: Edge) -> bool:
        """
        Store a link or continuation edge.

        Links are normalised so (a, b) and (b, a) are the same edge.
        A note keeps at most one outgoing continuation.

        Args:
            edge: Edge to store

        Returns:
            True if stored, False if an identical edge already existed
            or the source already has an outgoing continuation
        """
        pass

    @abstractmethod
    async def scan_edges(
        self,
        relationship_type: RelationshipType,
        endpoint: Address,
        direction: EdgeDirection = EdgeDirection.BOTH,
    ) -> list[Edge]:
        """
        Edges of one type touching endpoint.

        Args:
            relationship_type: LINK or CONTINUATION
            endpoint: Address to match
            direction: Match as source, target, or either

        Returns:
            Matching edges in insertion order
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # UTILITY METHODS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def count_notes(self) -> int:
        """Count all notes."""
        pass

    @abstractmethod
    async def count_edges(self, relationship_type: RelationshipType | None = None) -> int:
        """
        Count edges.

        Args:
            relationship_type: Optional filter by type

        Returns:
            Count of edges
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection to the store."""
        pass


def normalize_edge(edge: Edge) -> Edge:
    """Order link endpoints so each undirected link has one stored form."""
    if edge.type.is_symmetric and edge.target < edge.source:
        return edge.model_copy(update={"source": edge.target, "target": edge.source})
    return edge
