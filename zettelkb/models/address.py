"""
Luhmann address model and codec.

An address is an alternating sequence of digit and letter blocks
encoding a position in the note tree: 1, 1a, 1a1, 1a2a, 12ab3.
Depth 0 is always a digit block, depth 1 a letter block, and so on.

Strings are parsed once at the boundary into structured segments;
everything past the boundary works on Address values, which are
immutable, hashable and totally ordered (see core.address.comparator).
"""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_serializer, model_validator

from zettelkb.utils.exceptions import InvalidAddressError

ADDRESS_PATTERN = re.compile(r"[0-9]+(?:[a-z]+[0-9]+)*[a-z]*")
SEGMENT_PATTERN = re.compile(r"[0-9]+|[a-z]+")


class SegmentKind(str, Enum):
    """Kind of a single address block."""

    DIGITS = "digits"
    LETTERS = "letters"

    @property
    def opposite(self) -> "SegmentKind":
        return SegmentKind.LETTERS if self == SegmentKind.DIGITS else SegmentKind.DIGITS

    @classmethod
    def for_depth(cls, depth: int) -> "SegmentKind":
        """Kind required at the given zero-based depth."""
        return cls.DIGITS if depth % 2 == 0 else cls.LETTERS


def letters_to_index(letters: str) -> int:
    """
    Convert a letter block to its spreadsheet-column value.

    a=1, z=26, aa=27, az=52, ba=53.
    """
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("a") + 1)
    return index


def index_to_letters(index: int) -> str:
    """Inverse of letters_to_index for index >= 1."""
    if index < 1:
        raise ValueError(f"Letter index must be >= 1, got {index}")

    chars = []
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        chars.append(chr(ord("a") + remainder))
    return "".join(reversed(chars))


class Segment(BaseModel):
    """One digit block or letter block of an address."""

    model_config = ConfigDict(frozen=True)

    kind: SegmentKind
    value: str

    @model_validator(mode="after")
    def _check_value(self) -> "Segment":
        if self.kind == SegmentKind.DIGITS:
            if not self.value or not all("0" <= c <= "9" for c in self.value):
                raise ValueError(f"Digit segment must be one or more digits: {self.value!r}")
        elif not self.value or not all("a" <= c <= "z" for c in self.value):
            raise ValueError(f"Letter segment must be one or more lowercase letters: {self.value!r}")
        return self

    @classmethod
    def digits(cls, number: int) -> "Segment":
        return cls(kind=SegmentKind.DIGITS, value=str(number))

    @classmethod
    def letters(cls, index: int) -> "Segment":
        return cls(kind=SegmentKind.LETTERS, value=index_to_letters(index))

    @property
    def ordinal(self) -> int:
        """Numeric position among siblings (digits as-is, letters spreadsheet-style)."""
        if self.kind == SegmentKind.DIGITS:
            return int(self.value)
        return letters_to_index(self.value)

    @property
    def sort_key(self) -> tuple[int, int]:
        # Length breaks ties between zero-padded digit blocks ("1" < "01").
        return (self.ordinal, len(self.value))


class Address(BaseModel):
    """
    Hierarchical Luhmann address.

    Accepts either a canonical string or a segment tuple on validation
    and serialises back to the canonical string, so it can be used
    directly as a field type in other models and in API payloads.
    """

    model_config = ConfigDict(frozen=True)

    segments: tuple[Segment, ...]

    @model_validator(mode="before")
    @classmethod
    def _coerce_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            if not ADDRESS_PATTERN.fullmatch(data):
                raise ValueError(f"Invalid Luhmann address: {data!r}")
            return {"segments": _split_segments(data)}
        return data

    @model_validator(mode="after")
    def _check_alternation(self) -> "Address":
        if not self.segments:
            raise ValueError("Address must have at least one segment")
        for depth, segment in enumerate(self.segments):
            if segment.kind != SegmentKind.for_depth(depth):
                raise ValueError(
                    f"Segment {segment.value!r} at depth {depth} must be "
                    f"{SegmentKind.for_depth(depth).value}"
                )
        return self

    @model_serializer(mode="plain")
    def _serialize(self) -> str:
        return format_address(self)

    @classmethod
    def parse(cls, text: str) -> "Address":
        return parse_address(text)

    # ═══════════════════════════════════════════════════════════
    # STRUCTURE
    # ═══════════════════════════════════════════════════════════

    @property
    def depth(self) -> int:
        """Number of segments (a root like "3" has depth 1)."""
        return len(self.segments)

    @property
    def is_root(self) -> bool:
        return len(self.segments) == 1

    @property
    def last_segment(self) -> Segment:
        return self.segments[-1]

    @property
    def parent(self) -> "Address | None":
        """The address with the last segment removed, or None for a root."""
        if self.is_root:
            return None
        return Address(segments=self.segments[:-1])

    @property
    def next_child_kind(self) -> SegmentKind:
        return self.last_segment.kind.opposite

    def child(self, segment: Segment) -> "Address":
        """Extend this address by one segment of the alternate kind."""
        if segment.kind != self.next_child_kind:
            raise InvalidAddressError(
                f"Child of {self} must be a {self.next_child_kind.value} segment",
                {"address": str(self), "segment": segment.value},
            )
        return Address(segments=self.segments + (segment,))

    def is_ancestor_of(self, other: "Address") -> bool:
        return self.depth < other.depth and other.segments[: self.depth] == self.segments

    def is_descendant_of(self, other: "Address") -> bool:
        return other.is_ancestor_of(self)

    def is_self_or_descendant_of(self, other: "Address") -> bool:
        return self == other or self.is_descendant_of(other)

    # ═══════════════════════════════════════════════════════════
    # ORDERING
    # ═══════════════════════════════════════════════════════════

    @property
    def sort_key(self) -> tuple[tuple[int, int], ...]:
        """
        Key realising the hierarchical order.

        Tuple comparison walks segments from depth 0 and places a strict
        prefix before its extensions, which is exactly ancestor-first order.
        """
        return tuple(segment.sort_key for segment in self.segments)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.sort_key <= other.sort_key

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.sort_key > other.sort_key

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.sort_key >= other.sort_key

    def __str__(self) -> str:
        return format_address(self)

    def __repr__(self) -> str:
        return f"Address('{self}')"


def _split_segments(text: str) -> list[Segment]:
    segments = []
    for depth, block in enumerate(SEGMENT_PATTERN.findall(text)):
        segments.append(Segment(kind=SegmentKind.for_depth(depth), value=block))
    return segments


def parse_address(text: str) -> Address:
    """
    Parse a canonical address string.

    Args:
        text: Address string such as "1a2"

    Returns:
        Parsed Address

    Raises:
        InvalidAddressError: If the string is empty or breaks the grammar
    """
    if not isinstance(text, str) or not text:
        raise InvalidAddressError("Address must be a non-empty string", {"address": text})
    if not ADDRESS_PATTERN.fullmatch(text):
        raise InvalidAddressError(f"Invalid Luhmann address: {text!r}", {"address": text})
    return Address(segments=tuple(_split_segments(text)))


def format_address(address: Address) -> str:
    """Exact inverse of parse_address."""
    return "".join(segment.value for segment in address.segments)


def is_valid_address(text: str) -> bool:
    return isinstance(text, str) and ADDRESS_PATTERN.fullmatch(text) is not None


def to_address(value: "Address | str") -> Address:
    """Accept either form at API boundaries."""
    if isinstance(value, Address):
        return value
    return parse_address(value)
