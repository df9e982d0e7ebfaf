"""
Knowledge Base - the public face of the engine.

Brings together:
- Address allocation and note creation (NoteWriter)
- Link and continuation writes (RelationGraph)
- Derived relations and context bundles (RelationResolver)
- Index cards (IndexCardBuilder) and substring search (SearchMatcher)

Every call reads current state from the note store, so several agents
can share one store without an in-process cache going stale.
"""

from datetime import datetime
from typing import Any

from zettelkb.config import Config
from zettelkb.core.address.allocator import AddressAllocator
from zettelkb.core.note_store.base import NoteStore
from zettelkb.models.address import Address, to_address
from zettelkb.models.note import Note, normalize_tags
from zettelkb.models.relationships import (
    ContextBundle,
    ContinuationChain,
    Edge,
    RelationshipType,
)
from zettelkb.services.index_builder import IndexCardBuilder
from zettelkb.services.note_writer import NoteWriter
from zettelkb.services.relation_graph import RelationGraph
from zettelkb.services.relation_resolver import RelationResolver
from zettelkb.services.search import SearchMatcher
from zettelkb.utils.exceptions import NotFoundError
from zettelkb.utils.logger import get_logger

logger = get_logger(__name__)


class KnowledgeBase:
    """
    Zettelkasten knowledge base over a shared note store.

    Features:
    - Luhmann addresses allocated race-free under concurrent writers
    - Derived branches, stored links and continuations
    - Backlinks, continuation chains and context bundles
    - Index cards and case-insensitive search
    """

    def __init__(self, store: NoteStore, config: Config | None = None):
        """
        Initialize Knowledge Base.

        Args:
            store: Note store backend
            config: Configuration object (default: Config())
        """
        self.store = store
        self.config = config or Config()

        self.writer = NoteWriter(
            store=store,
            allocator=AddressAllocator(),
            allocation_retries=self.config.kb.allocation_retries,
            retry_delay=self.config.kb.allocation_retry_delay,
            max_retry_delay=self.config.kb.allocation_max_retry_delay,
        )
        self.graph = RelationGraph(store=store)
        self.resolver = RelationResolver(store=store)
        self.index_builder = IndexCardBuilder(
            store=store,
            writer=self.writer,
            title_prefix=self.config.kb.index_title_prefix,
            allow_empty=self.config.kb.allow_empty_index,
        )

    async def initialize(self) -> None:
        """Initialize the note store."""
        logger.info("Initializing Knowledge Base")
        await self.store.initialize()
        logger.info("Knowledge Base ready")

    async def close(self) -> None:
        """Close the note store."""
        logger.info("Shutting down Knowledge Base")
        await self.store.close()

    # ═══════════════════════════════════════════════════════════
    # NOTES
    # ═══════════════════════════════════════════════════════════

    async def create(
        self,
        title: str,
        body: str = "",
        explicit_id: Address | str | None = None,
        tags: list[str] | None = None,
        created_by: str | None = None,
    ) -> Note:
        """
        Create a note at the next free root address or at explicit_id.

        Args:
            title: Note title
            body: Markdown body
            explicit_id: Address to use instead of allocating one
            tags: Optional tags
            created_by: Optional author or agent id

        Returns:
            Created note

        Raises:
            InvalidAddressError: If explicit_id is malformed
            DuplicateAddressError: If explicit_id is occupied
            AllocationConflictError: If allocation keeps losing races
        """
        if explicit_id is not None:
            address = to_address(explicit_id)
            note = await self.writer.create_at(address, title, body, tags, created_by)
        else:
            note = await self.writer.create_root(title, body, tags, created_by)

        logger.info(
            f"Created note {note.address}",
            extra={"address": str(note.address), "operation": "create"},
        )
        return note

    async def branch(
        self,
        parent_id: Address | str,
        title: str,
        body: str = "",
        tags: list[str] | None = None,
        created_by: str | None = None,
    ) -> Note:
        """
        Create a note at the next free child address of parent_id.

        Raises:
            InvalidAddressError: If parent_id is malformed
            NotFoundError: If the parent has no note
            AllocationConflictError: If allocation keeps losing races
        """
        parent = to_address(parent_id)
        note = await self.writer.create_child(parent, title, body, tags, created_by)

        logger.info(
            f"Branched {note.address} from {parent}",
            extra={"address": str(note.address), "parent": str(parent), "operation": "branch"},
        )
        return note

    async def get(self, address: Address | str) -> Note:
        """
        Retrieve a note.

        Raises:
            NotFoundError: If no note has this address
        """
        address = to_address(address)
        note = await self.store.get(address)
        if note is None:
            raise NotFoundError(
                f"Note {address} not found", {"address": str(address), "operation": "get"}
            )
        return note

    async def update(
        self,
        address: Address | str,
        title: str | None = None,
        body: str | None = None,
        tags: list[str] | None = None,
    ) -> Note:
        """
        Edit the content of a note. The address never changes.

        Args:
            address: Note to edit
            title: New title (None keeps the current one)
            body: New body (None keeps the current one)
            tags: Replacement tag list (None keeps the current one)

        Returns:
            Updated note

        Raises:
            NotFoundError: If no note has this address
        """
        note = await self.get(address)

        if title is not None:
            note.title = title
        if body is not None:
            note.body = body
        if tags is not None:
            note.tags = normalize_tags(tags)
        note.updated_at = datetime.now()

        await self.store.update(note)
        logger.info(
            f"Updated note {note.address}",
            extra={"address": str(note.address), "operation": "update"},
        )
        return note

    # ═══════════════════════════════════════════════════════════
    # RELATIONS
    # ═══════════════════════════════════════════════════════════

    async def link(self, a: Address | str, b: Address | str, context: str | None = None) -> None:
        """
        Link two notes. Idempotent in both directions.

        Raises:
            SelfLinkError: If a == b
            UnknownAddressError: If either note is missing
        """
        await self.graph.add_link(to_address(a), to_address(b), context)

    async def cont(self, a: Address | str, b: Address | str) -> None:
        """
        Mark b as the continuation of a.

        Raises:
            SelfLinkError: If a == b
            UnknownAddressError: If either note is missing
            ContinuationConflictError: If a already continues to another note
        """
        await self.graph.add_continuation(to_address(a), to_address(b))

    async def children(self, address: Address | str) -> list[Address]:
        return await self.resolver.children_of(to_address(address))

    async def backlinks(self, address: Address | str) -> list[Address]:
        """Backlink addresses in address order."""
        return sorted(await self.resolver.backlinks_of(to_address(address)))

    async def links(self, address: Address | str) -> list[Edge]:
        return await self.resolver.links_of(to_address(address))

    async def chain(self, address: Address | str, strict: bool = False) -> ContinuationChain:
        """
        Follow continuations from address.

        Raises:
            NotFoundError: If the start note is missing
            CycleDetectedError: If strict and the chain loops
        """
        return await self.resolver.continuation_chain_from(to_address(address), strict=strict)

    async def context(self, address: Address | str) -> ContextBundle:
        """
        Parent, children, links, continuations and backlinks of a note.

        Raises:
            NotFoundError: If no note has this address
        """
        return await self.resolver.context(to_address(address))

    # ═══════════════════════════════════════════════════════════
    # TREE, INDEX & SEARCH
    # ═══════════════════════════════════════════════════════════

    async def tree(self, prefix: Address | str) -> list[Note]:
        """
        Notes equal to or below prefix, in address order.

        Raises:
            InvalidAddressError: If prefix is empty or malformed
        """
        return await self.resolver.tree(to_address(prefix))

    async def index(self, parent: Address | str, created_by: str | None = None) -> Note:
        """
        Create an index card listing the children of parent.

        Raises:
            NotFoundError: If parent has no note
            EmptyIndexError: If parent has no children and empty indexes are disabled
        """
        return await self.index_builder.build_index(to_address(parent), created_by=created_by)

    async def search(self, query: str, limit: int | None = None) -> list[Note]:
        """
        Case-insensitive substring search over title, body and tags.

        Args:
            query: Search text
            limit: Maximum results (default: config kb.search_limit)

        Returns:
            Matching notes in address order

        Raises:
            EmptyQueryError: If query is the empty string
        """
        matcher = SearchMatcher(query)
        if limit is None:
            limit = self.config.kb.search_limit

        results = matcher.filter(await self.store.scan_prefix(None), limit=limit)
        logger.debug(
            f"Search matched {len(results)} notes",
            extra={"operation": "search", "results": len(results)},
        )
        return results

    # ═══════════════════════════════════════════════════════════
    # STATISTICS
    # ═══════════════════════════════════════════════════════════

    async def stats(self) -> dict[str, Any]:
        """
        Get knowledge base statistics.

        Returns:
            Statistics dictionary
        """
        links = await self.store.count_edges(RelationshipType.LINK)
        continuations = await self.store.count_edges(RelationshipType.CONTINUATION)

        return {
            "notes": await self.store.count_notes(),
            "relationships": {
                "links": links,
                "continuations": continuations,
                "total": links + continuations,
            },
            "store": self.config.store.backend,
        }

    # Defined last: the method name shadows the builtin inside the class body.
    async def list(self) -> list[Note]:
        """All notes in address order."""
        return await self.store.scan_prefix(None)
