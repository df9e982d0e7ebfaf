"""
Typed edge writes: links and continuations.

Branches are not written here; they exist as soon as a note exists at an
address whose parent exists (see core.address.allocator.is_branch).
"""

from zettelkb.core.note_store.base import NoteStore
from zettelkb.models.address import Address
from zettelkb.models.relationships import Edge, EdgeDirection, RelationshipType
from zettelkb.utils.exceptions import (
    ContinuationConflictError,
    SelfLinkError,
    UnknownAddressError,
)
from zettelkb.utils.logger import get_logger

logger = get_logger(__name__)


class RelationGraph:
    """Validates and stores link and continuation edges."""

    def __init__(self, store: NoteStore):
        """
        Initialize relation graph.

        Args:
            store: Note store holding notes and edges
        """
        self.store = store

    async def _require_endpoints(self, source: Address, target: Address, operation: str) -> None:
        if source == target:
            raise SelfLinkError(
                f"Cannot relate note {source} to itself",
                {"address": str(source), "operation": operation},
            )
        for address in (source, target):
            if await self.store.get(address) is None:
                raise UnknownAddressError(
                    f"No note at {address}",
                    {"address": str(address), "operation": operation},
                )

    async def add_link(self, a: Address, b: Address, context: str | None = None) -> bool:
        """
        Store a symmetric link between a and b.

        Args:
            a: One endpoint
            b: Other endpoint
            context: Optional note on why the two are linked

        Returns:
            True if the link is new, False if it already existed

        Raises:
            SelfLinkError: If a == b
            UnknownAddressError: If either endpoint has no note
        """
        await self._require_endpoints(a, b, "link")

        created = await self.store.insert_edge(
            Edge(source=a, target=b, type=RelationshipType.LINK, context=context)
        )
        if created:
            logger.info(f"Linked {a} <-> {b}", extra={"operation": "link", "source": str(a), "target": str(b)})
        return created

    async def add_continuation(self, source: Address, target: Address) -> bool:
        """
        Mark target as the next note after source.

        Args:
            source: Note that continues
            target: The continuation

        Returns:
            True if stored, False if source already continued to target

        Raises:
            SelfLinkError: If source == target
            UnknownAddressError: If either endpoint has no note
            ContinuationConflictError: If source already continues elsewhere
        """
        await self._require_endpoints(source, target, "continuation")

        created = await self.store.insert_edge(
            Edge(source=source, target=target, type=RelationshipType.CONTINUATION)
        )
        if created:
            logger.info(
                f"Continuation {source} -> {target}",
                extra={"operation": "continuation", "source": str(source), "target": str(target)},
            )
            return True

        existing = await self.store.scan_edges(
            RelationshipType.CONTINUATION, source, EdgeDirection.OUTGOING
        )
        if existing and existing[0].target != target:
            raise ContinuationConflictError(
                f"{source} already continues to {existing[0].target}",
                {
                    "address": str(source),
                    "existing": str(existing[0].target),
                    "requested": str(target),
                },
            )
        return False
