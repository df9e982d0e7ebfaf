"""
Total order over Luhmann addresses.

Segments are compared from depth 0: digit blocks numerically (9 < 10),
letter blocks spreadsheet-style (z < aa), and an ancestor sorts before
all of its descendants. This gives 1 < 1a < 1a1 < 1a2 < 1b < 2 < 2a.
"""

from collections.abc import Iterable
from enum import IntEnum

from zettelkb.models.address import Address, Segment
from zettelkb.models.note import Note


class Ordering(IntEnum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


def compare_segments(a: Segment, b: Segment) -> Ordering:
    if a.sort_key < b.sort_key:
        return Ordering.LESS
    if a.sort_key > b.sort_key:
        return Ordering.GREATER
    return Ordering.EQUAL


def compare(a: Address, b: Address) -> Ordering:
    """
    Three-way comparison of two addresses.

    Args:
        a: Left address
        b: Right address

    Returns:
        Ordering.LESS, Ordering.EQUAL or Ordering.GREATER
    """
    for left, right in zip(a.segments, b.segments):
        result = compare_segments(left, right)
        if result != Ordering.EQUAL:
            return result

    # All shared segments equal: the shorter one is the ancestor
    if a.depth < b.depth:
        return Ordering.LESS
    if a.depth > b.depth:
        return Ordering.GREATER
    return Ordering.EQUAL


def sort_key(address: Address) -> tuple[tuple[int, int], ...]:
    return address.sort_key


def sort_addresses(addresses: Iterable[Address]) -> list[Address]:
    return sorted(addresses, key=sort_key)


def sort_notes(notes: Iterable[Note]) -> list[Note]:
    return sorted(notes, key=lambda note: note.address.sort_key)
