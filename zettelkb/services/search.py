"""Case-insensitive substring search over notes."""

from collections.abc import Iterable

from zettelkb.core.address.comparator import sort_notes
from zettelkb.models.note import Note
from zettelkb.utils.exceptions import EmptyQueryError


class SearchMatcher:
    """
    Matches a query against title, body and tags.

    No ranking: results come back in address order so repeated searches
    are deterministic.
    """

    def __init__(self, query: str):
        if not query:
            raise EmptyQueryError("Search query cannot be empty", {"query": query})
        self.query = query
        self._needle = query.casefold()

    def matches(self, note: Note) -> bool:
        if self._needle in note.title.casefold():
            return True
        if self._needle in note.body.casefold():
            return True
        return any(self._needle in tag.casefold() for tag in note.tags)

    def filter(self, notes: Iterable[Note], limit: int | None = None) -> list[Note]:
        results = sort_notes(note for note in notes if self.matches(note))
        if limit is not None:
            return results[:limit]
        return results
