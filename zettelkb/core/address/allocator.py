"""
Address allocation for new notes.

Allocation always picks the smallest value not yet taken among the
relevant siblings, so sibling sequences stay dense even when some notes
were created with explicit addresses out of order. The allocator is pure:
it only sees the addresses it is given. Making the pick stick under
concurrency is the job of the caller (optimistic insert plus retry in
services.knowledge_base).
"""

from collections.abc import Iterable

from zettelkb.models.address import Address, Segment, SegmentKind
from zettelkb.utils.exceptions import ValidationError


class AddressAllocator:
    """Computes the next free root or child address."""

    @staticmethod
    def _smallest_unused(taken: set[str], kind: SegmentKind) -> Segment:
        ordinal = 1
        while True:
            candidate = Segment.digits(ordinal) if kind == SegmentKind.DIGITS else Segment.letters(ordinal)
            if candidate.value not in taken:
                return candidate
            ordinal += 1

    def next_root(self, existing_roots: Iterable[Address]) -> Address:
        """
        Smallest unused depth-0 address, starting from "1".

        Args:
            existing_roots: Root addresses already present

        Returns:
            New root address

        Raises:
            ValidationError: If a non-root address is passed in
        """
        taken = set()
        for address in existing_roots:
            if not address.is_root:
                raise ValidationError(
                    f"{address} is not a root address",
                    {"address": str(address), "operation": "next_root"},
                )
            taken.add(address.last_segment.value)

        segment = self._smallest_unused(taken, SegmentKind.DIGITS)
        return Address(segments=(segment,))

    def next_child(self, parent: Address, existing_children: Iterable[Address]) -> Address:
        """
        Smallest unused direct child of parent.

        A digit-terminated parent gets letter children (a, b, ..., z, aa),
        a letter-terminated parent gets digit children (1, 2, ...).

        Args:
            parent: Parent address
            existing_children: Direct children already present

        Returns:
            New child address

        Raises:
            ValidationError: If an address that is not a direct child is passed in
        """
        taken = set()
        for address in existing_children:
            if address.parent != parent:
                raise ValidationError(
                    f"{address} is not a direct child of {parent}",
                    {"address": str(address), "parent": str(parent), "operation": "next_child"},
                )
            taken.add(address.last_segment.value)

        segment = self._smallest_unused(taken, parent.next_child_kind)
        return parent.child(segment)


def branch_parent(address: Address) -> Address | None:
    """Parent implied by the Branch relation (address minus last segment)."""
    return address.parent


def is_branch(parent: Address, child: Address) -> bool:
    """True when Branch(parent, child) holds."""
    return child.parent == parent
