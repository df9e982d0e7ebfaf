"""
Read side of the note graph.

Computes children, backlinks, continuation chains, subtrees and the full
context bundle of a note. Nothing here is cached; every call reads the
store, so results reflect writes made by other agents in the meantime.
"""

from zettelkb.core.address.comparator import sort_addresses
from zettelkb.core.note_store.base import NoteStore
from zettelkb.models.address import Address
from zettelkb.models.note import Note
from zettelkb.models.relationships import (
    ContextBundle,
    ContinuationChain,
    Edge,
    EdgeDirection,
    RelationshipType,
)
from zettelkb.utils.exceptions import CycleDetectedError, NotFoundError
from zettelkb.utils.logger import get_logger

logger = get_logger(__name__)


class RelationResolver:
    """Resolves branch, link and continuation relations for an address."""

    def __init__(self, store: NoteStore):
        """
        Initialize relation resolver.

        Args:
            store: Note store to read from
        """
        self.store = store

    async def _require_note(self, address: Address, operation: str) -> Note:
        note = await self.store.get(address)
        if note is None:
            raise NotFoundError(
                f"Note {address} not found", {"address": str(address), "operation": operation}
            )
        return note

    async def _notes_for(self, addresses: list[Address]) -> list[Note]:
        notes = []
        for address in sort_addresses(addresses):
            note = await self.store.get(address)
            if note is not None:
                notes.append(note)
        return notes

    # ═══════════════════════════════════════════════════════════
    # BRANCHES
    # ═══════════════════════════════════════════════════════════

    async def children_of(self, parent: Address) -> list[Address]:
        """Direct children of parent in address order."""
        return [note.address for note in await self.store.scan_children(parent)]

    async def parent_of(self, address: Address) -> Note | None:
        """Parent note, or None for roots and orphans created with explicit addresses."""
        parent = address.parent
        if parent is None:
            return None
        return await self.store.get(parent)

    async def tree(self, prefix: Address) -> list[Note]:
        """Notes at prefix and below, in address order."""
        return await self.store.scan_prefix(prefix)

    # ═══════════════════════════════════════════════════════════
    # LINKS & CONTINUATIONS
    # ═══════════════════════════════════════════════════════════

    async def links_of(self, address: Address) -> list[Edge]:
        """Link edges touching address, each oriented so source == address."""
        edges = await self.store.scan_edges(RelationshipType.LINK, address, EdgeDirection.BOTH)
        oriented = [edge.oriented_from(address) for edge in edges]
        return sorted(oriented, key=lambda edge: edge.target.sort_key)

    async def continuation_out(self, address: Address) -> Address | None:
        edges = await self.store.scan_edges(
            RelationshipType.CONTINUATION, address, EdgeDirection.OUTGOING
        )
        return edges[0].target if edges else None

    async def continuation_in(self, address: Address) -> list[Address]:
        edges = await self.store.scan_edges(
            RelationshipType.CONTINUATION, address, EdgeDirection.INCOMING
        )
        return sort_addresses(edge.source for edge in edges)

    async def backlinks_of(self, address: Address) -> set[Address]:
        """
        Every address with a relation pointing at address.

        Union of link partners, the parent note (Branch) and the sources
        of continuations ending here.
        """
        backlinks = {edge.target for edge in await self.links_of(address)}

        parent = await self.parent_of(address)
        if parent is not None:
            backlinks.add(parent.address)

        backlinks.update(await self.continuation_in(address))
        return backlinks

    async def continuation_chain_from(
        self, address: Address, strict: bool = False
    ) -> ContinuationChain:
        """
        Follow outgoing continuations starting at address.

        Args:
            address: First note of the chain
            strict: Raise instead of reporting when the chain loops

        Returns:
            ContinuationChain starting with address itself

        Raises:
            NotFoundError: If address has no note
            CycleDetectedError: If strict and an address recurs
        """
        await self._require_note(address, "chain")

        chain = ContinuationChain(start=address, addresses=[address])
        visited = {address}
        current = address

        while True:
            following = await self.continuation_out(current)
            if following is None:
                return chain
            if following in visited:
                logger.warning(
                    f"Continuation cycle from {address} returns to {following}",
                    extra={"address": str(address), "cycle_at": str(following)},
                )
                if strict:
                    raise CycleDetectedError(
                        f"Continuation chain from {address} loops back to {following}",
                        {"address": str(address), "cycle_at": str(following)},
                    )
                chain.cycle_detected = True
                chain.cycle_at = following
                return chain
            chain.addresses.append(following)
            visited.add(following)
            current = following

    # ═══════════════════════════════════════════════════════════
    # CONTEXT
    # ═══════════════════════════════════════════════════════════

    async def context(self, address: Address) -> ContextBundle:
        """
        Full context bundle of a note.

        Raises:
            NotFoundError: If address has no note
        """
        note = await self._require_note(address, "context")

        children = await self.store.scan_children(address)
        links = await self.links_of(address)
        out_address = await self.continuation_out(address)
        in_addresses = await self.continuation_in(address)

        return ContextBundle(
            note=note,
            parent=await self.parent_of(address),
            children=children,
            links=await self._notes_for([edge.target for edge in links]),
            continuation_out=await self.store.get(out_address) if out_address else None,
            continuation_in=await self._notes_for(in_addresses),
            backlinks=await self._notes_for(list(await self.backlinks_of(address))),
        )
