"""
In-memory note store.

Ephemeral backend for tests and single-process use. A parent index keeps
children lookups proportional to the number of children, and one
asyncio.Lock makes insert_if_absent an atomic compare-and-insert within
the event loop.
"""

import asyncio
from collections import defaultdict

from zettelkb.core.address.comparator import sort_notes
from zettelkb.core.note_store.base import NoteStore, normalize_edge
from zettelkb.models.address import Address
from zettelkb.models.note import Note
from zettelkb.models.relationships import Edge, EdgeDirection, RelationshipType
from zettelkb.utils.exceptions import NoteStoreError


class InMemoryNoteStore(NoteStore):
    """Dictionary-backed note store."""

    def __init__(self):
        """Initialize empty store."""
        self.notes: dict[Address, Note] = {}
        self.children: dict[Address | None, set[Address]] = defaultdict(set)
        self.edges: list[Edge] = []
        self._edge_keys: set[tuple[str, Address, Address]] = set()
        self._lock = asyncio.Lock()
        self.initialized = False

    async def initialize(self) -> None:
        self.initialized = True

    async def insert_if_absent(self, note: Note) -> bool:
        async with self._lock:
            if note.address in self.notes:
                return False
            self.notes[note.address] = note.model_copy(deep=True)
            self.children[note.address.parent].add(note.address)
            return True

    async def get(self, address: Address) -> Note | None:
        note = self.notes.get(address)
        return note.model_copy(deep=True) if note else None

    async def update(self, note: Note) -> None:
        async with self._lock:
            current = self.notes.get(note.address)
            if current is None:
                raise NoteStoreError(
                    f"Cannot update missing note {note.address}",
                    {"address": str(note.address), "operation": "update"},
                )
            self.notes[note.address] = current.model_copy(
                update={
                    "title": note.title,
                    "body": note.body,
                    "tags": list(note.tags),
                    "updated_at": note.updated_at,
                }
            )

    async def scan_prefix(self, prefix: Address | None = None) -> list[Note]:
        if prefix is None:
            matches = self.notes.values()
        else:
            matches = [
                note for note in self.notes.values() if note.address.is_self_or_descendant_of(prefix)
            ]
        return sort_notes(note.model_copy(deep=True) for note in matches)

    async def scan_children(self, parent: Address | None = None) -> list[Note]:
        return sort_notes(
            self.notes[address].model_copy(deep=True) for address in self.children.get(parent, ())
        )

    async def insert_edge(self, edge: Edge) -> bool:
        if not edge.type.is_stored:
            raise NoteStoreError(
                f"{edge.type.value} relations are derived and cannot be stored",
                {"operation": "insert_edge", "type": edge.type.value},
            )

        edge = normalize_edge(edge)
        async with self._lock:
            if edge.source not in self.notes or edge.target not in self.notes:
                raise NoteStoreError(
                    f"Edge endpoint missing: {edge.source} -> {edge.target}",
                    {"source": str(edge.source), "target": str(edge.target), "operation": "insert_edge"},
                )
            key = (edge.type.value, edge.source, edge.target)
            if key in self._edge_keys:
                return False
            if edge.type == RelationshipType.CONTINUATION and any(
                existing.type == RelationshipType.CONTINUATION and existing.source == edge.source
                for existing in self.edges
            ):
                return False
            self._edge_keys.add(key)
            self.edges.append(edge)
            return True

    async def scan_edges(
        self,
        relationship_type: RelationshipType,
        endpoint: Address,
        direction: EdgeDirection = EdgeDirection.BOTH,
    ) -> list[Edge]:
        results = []
        for edge in self.edges:
            if edge.type != relationship_type:
                continue
            if direction == EdgeDirection.OUTGOING and edge.source != endpoint:
                continue
            if direction == EdgeDirection.INCOMING and edge.target != endpoint:
                continue
            if direction == EdgeDirection.BOTH and not edge.touches(endpoint):
                continue
            results.append(edge)
        return results

    async def count_notes(self) -> int:
        return len(self.notes)

    async def count_edges(self, relationship_type: RelationshipType | None = None) -> int:
        if relationship_type is None:
            return len(self.edges)
        return sum(1 for edge in self.edges if edge.type == relationship_type)

    async def close(self) -> None:
        pass
