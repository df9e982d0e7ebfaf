"""
Luhmann address ordering and allocation.

- comparator: total order over addresses
- allocator: next free root/child address, branch relation helpers
"""

from zettelkb.core.address.allocator import AddressAllocator, branch_parent, is_branch
from zettelkb.core.address.comparator import (
    Ordering,
    compare,
    sort_addresses,
    sort_key,
    sort_notes,
)

__all__ = [
    "AddressAllocator",
    "branch_parent",
    "is_branch",
    "Ordering",
    "compare",
    "sort_addresses",
    "sort_key",
    "sort_notes",
]
