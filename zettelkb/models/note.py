"""
Note model for the Zettelkasten store.

A note is the atomic unit of the knowledge base. Its Luhmann address is
its primary key and also encodes its place in the tree, so the address
never changes once assigned; edits only touch title, body and tags.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from zettelkb.models.address import Address


def normalize_tags(tags: list[str]) -> list[str]:
    """Strip tags and drop blanks and duplicates, keeping first-seen order."""
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class Note(BaseModel):
    """
    Atomic Zettelkasten note.

    Storage Architecture:
    - Note store: address (primary key), content and timestamps
    - Relations: links and continuations live in the edge table,
      branches are implied by the address itself
    """

    # Core identity
    address: Address = Field(..., description="Luhmann address (e.g. 1a2)")

    # Content
    title: str = Field(..., description="Note title")
    body: str = Field(default="", description="Markdown body")

    # Metadata
    tags: list[str] = Field(default_factory=list, description="User-defined tags")
    created_by: str | None = Field(default=None, description="Agent or user that wrote the note")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=datetime.now, description="Last update timestamp")

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        return normalize_tags(tags)

    @property
    def parent_address(self) -> Address | None:
        return self.address.parent

    @property
    def body_preview(self) -> str:
        """
        Get a preview of the body for listings.

        Returns:
            First 200 characters of body
        """
        return self.body[:200] if len(self.body) > 200 else self.body

    def add_tag(self, tag: str) -> None:
        tag = tag.strip()
        if tag and tag not in self.tags:
            self.tags.append(tag)
            self.updated_at = datetime.now()

    def remove_tag(self, tag: str) -> None:
        if tag in self.tags:
            self.tags.remove(tag)
            self.updated_at = datetime.now()
