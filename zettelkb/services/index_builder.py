"""
Index cards: synthetic notes that list the children of a note.

An index card is an ordinary note created as the next child of its
target, so it is itself addressable, linkable and indexable. Its body is
a snapshot of the children that existed when it was built.
"""

from zettelkb.core.note_store.base import NoteStore
from zettelkb.models.address import Address
from zettelkb.models.note import Note
from zettelkb.services.note_writer import NoteWriter
from zettelkb.utils.exceptions import EmptyIndexError, NotFoundError
from zettelkb.utils.logger import get_logger

logger = get_logger(__name__)


class IndexCardBuilder:
    """Materializes index notes for a parent address."""

    def __init__(
        self,
        store: NoteStore,
        writer: NoteWriter,
        title_prefix: str = "Index",
        allow_empty: bool = True,
    ):
        """
        Initialize index card builder.

        Args:
            store: Note store to read the parent and its children from
            writer: Note writer used to allocate the index card
            title_prefix: Title prefix of generated cards ("Index: <parent title>")
            allow_empty: Whether a parent without children may be indexed
        """
        self.store = store
        self.writer = writer
        self.title_prefix = title_prefix
        self.allow_empty = allow_empty

    def render(self, parent: Note, children: list[Note]) -> tuple[str, str]:
        """
        Render title and Markdown body of an index card.

        Args:
            parent: Indexed note
            children: Its direct children in address order

        Returns:
            (title, body)
        """
        title = f"{self.title_prefix}: {parent.title}"

        lines = [f"# {title}", "", f"Parent note: [[{parent.address}]]", "", "Children:", ""]
        if children:
            lines.extend(f"- [[{child.address}]]: {child.title}" for child in children)
        else:
            lines.append("(No children)")

        return title, "\n".join(lines) + "\n"

    async def build_index(self, parent: Address, created_by: str | None = None) -> Note:
        """
        Create an index card as the next child of parent.

        Args:
            parent: Address to index
            created_by: Optional author recorded on the card

        Returns:
            The new index note

        Raises:
            NotFoundError: If parent has no note
            EmptyIndexError: If parent has no children and empty indexes are disabled
        """
        parent_note = await self.store.get(parent)
        if parent_note is None:
            raise NotFoundError(
                f"Note {parent} not found", {"address": str(parent), "operation": "index"}
            )

        children = await self.store.scan_children(parent)
        if not children and not self.allow_empty:
            raise EmptyIndexError(
                f"Note {parent} has no children to index",
                {"address": str(parent), "operation": "index"},
            )

        title, body = self.render(parent_note, children)
        card = await self.writer.create_child(parent, title, body, created_by=created_by)

        logger.info(
            f"Index card {card.address} lists {len(children)} children of {parent}",
            extra={"address": str(card.address), "parent": str(parent), "operation": "index"},
        )
        return card
