"""
Note creation with race-free address allocation.

Allocation is optimistic: read the current siblings, pick the smallest
free address, then insert_if_absent. Losing the insert means another
writer claimed that address first, so the writer backs off (exponential
delay with jitter, so racing writers fall out of step), re-reads the
siblings and picks again, up to a fixed number of retries. Nothing is locked across
calls, so writers in unrelated subtrees never wait on each other.
"""

import asyncio
import random
from datetime import datetime

from zettelkb.core.address.allocator import AddressAllocator
from zettelkb.core.note_store.base import NoteStore
from zettelkb.models.address import Address
from zettelkb.models.note import Note
from zettelkb.utils.exceptions import (
    AllocationConflictError,
    DuplicateAddressError,
    NotFoundError,
)
from zettelkb.utils.logger import get_logger

logger = get_logger(__name__)


class NoteWriter:
    """Creates notes at allocated or explicit addresses."""

    def __init__(
        self,
        store: NoteStore,
        allocator: AddressAllocator | None = None,
        allocation_retries: int = 16,
        retry_delay: float = 0.005,
        max_retry_delay: float = 0.5,
    ):
        """
        Initialize note writer.

        Args:
            store: Note store to write into
            allocator: Address allocator (default: AddressAllocator())
            allocation_retries: Retries after a lost insert race before giving up
            retry_delay: Base backoff in seconds, doubled after each lost race
            max_retry_delay: Upper bound on the backoff before jitter
        """
        self.store = store
        self.allocator = allocator or AddressAllocator()
        self.allocation_retries = allocation_retries
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay

    def _backoff_delay(self, attempt: int) -> float:
        delay = min(self.retry_delay * (2**attempt), self.max_retry_delay)
        return delay * (0.5 + random.random())

    @staticmethod
    def _build_note(
        address: Address,
        title: str,
        body: str,
        tags: list[str] | None,
        created_by: str | None,
    ) -> Note:
        now = datetime.now()
        return Note(
            address=address,
            title=title,
            body=body or "",
            tags=tags or [],
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )

    async def create_at(
        self,
        address: Address,
        title: str,
        body: str,
        tags: list[str] | None = None,
        created_by: str | None = None,
    ) -> Note:
        """
        Create a note at an explicit address, bypassing allocation.

        Raises:
            DuplicateAddressError: If the address is occupied
        """
        note = self._build_note(address, title, body, tags, created_by)
        if not await self.store.insert_if_absent(note):
            raise DuplicateAddressError(
                f"Note {address} already exists",
                {"address": str(address), "operation": "create"},
            )
        return note

    async def create_root(
        self,
        title: str,
        body: str,
        tags: list[str] | None = None,
        created_by: str | None = None,
    ) -> Note:
        """Create a note at the next free root address."""
        return await self._insert_allocated(None, title, body, tags, created_by)

    async def create_child(
        self,
        parent: Address,
        title: str,
        body: str,
        tags: list[str] | None = None,
        created_by: str | None = None,
    ) -> Note:
        """
        Create a note at the next free child address of parent.

        Raises:
            NotFoundError: If parent has no note
        """
        if await self.store.get(parent) is None:
            raise NotFoundError(
                f"Parent note {parent} not found",
                {"address": str(parent), "operation": "branch"},
            )
        return await self._insert_allocated(parent, title, body, tags, created_by)

    async def _insert_allocated(
        self,
        parent: Address | None,
        title: str,
        body: str,
        tags: list[str] | None,
        created_by: str | None,
    ) -> Note:
        operation = "create" if parent is None else "branch"

        for attempt in range(self.allocation_retries + 1):
            siblings = [note.address for note in await self.store.scan_children(parent)]
            if parent is None:
                address = self.allocator.next_root(siblings)
            else:
                address = self.allocator.next_child(parent, siblings)

            note = self._build_note(address, title, body, tags, created_by)
            if await self.store.insert_if_absent(note):
                if attempt:
                    logger.debug(
                        f"Allocated {address} after {attempt} retries",
                        extra={"address": str(address), "operation": operation},
                    )
                return note

            if attempt < self.allocation_retries:
                delay = self._backoff_delay(attempt)
                logger.debug(
                    f"Lost allocation race for {address}, retrying in {delay:.3f}s",
                    extra={"address": str(address), "operation": operation, "attempt": attempt + 1},
                )
                await asyncio.sleep(delay)

        logger.warning(
            f"Allocation retry budget exhausted under {parent or 'root'}",
            extra={"parent": str(parent) if parent else None, "operation": operation},
        )
        raise AllocationConflictError(
            f"Could not allocate an address under {parent or 'root'} "
            f"after {self.allocation_retries} retries",
            {
                "parent": str(parent) if parent else None,
                "retries": self.allocation_retries,
                "operation": operation,
            },
        )
