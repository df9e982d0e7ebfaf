"""
SQLite note store implementation.

Durable local storage using aiosqlite. Several agent processes may share
one database file: WAL mode plus INSERT OR IGNORE on the address primary
key gives the atomic compare-and-insert that allocation relies on.
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path

import aiosqlite

from zettelkb.core.address.comparator import sort_notes
from zettelkb.core.note_store.base import NoteStore, normalize_edge
from zettelkb.models.address import Address, format_address, parse_address
from zettelkb.models.note import Note
from zettelkb.models.relationships import Edge, EdgeDirection, RelationshipType
from zettelkb.utils.exceptions import NoteStoreError
from zettelkb.utils.logger import get_logger

logger = get_logger(__name__)

# Stored in the parent column for depth-0 notes so roots are indexable too.
ROOT_PARENT = ""


class SQLiteNoteStore(NoteStore):
    """
    SQLite-based store for notes and relations.

    Features:
    - Address primary key with an indexed parent column (O(children) lookups)
    - Links and continuations in one edge table, unique per (type, source, target)
    - Branches are never stored; they follow from the parent column
    """

    def __init__(self, db_path: str = "data/zettelkb.db", busy_timeout_ms: int = 5000):
        """
        Initialize SQLite note store.

        Args:
            db_path: Path to SQLite database file
            busy_timeout_ms: How long a writer waits on a locked database
        """
        self.db_path = db_path
        self.busy_timeout_ms = busy_timeout_ms
        self.connection: aiosqlite.Connection | None = None
        self._connect_lock = asyncio.Lock()

        # Ensure directory exists
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        async with self._connect_lock:
            if self.connection is None:
                self.connection = await aiosqlite.connect(self.db_path)
                self.connection.row_factory = aiosqlite.Row
                await self.connection.execute("PRAGMA foreign_keys = ON")
                await self.connection.execute("PRAGMA journal_mode = WAL")
                await self.connection.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
                await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS notes (
                address TEXT PRIMARY KEY,
                parent TEXT NOT NULL,
                depth INTEGER NOT NULL,
                title TEXT NOT NULL,
                body TEXT NOT NULL,
                tags TEXT DEFAULT '[]',
                created_by TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """
        )

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS edges (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source TEXT NOT NULL,
                target TEXT NOT NULL,
                type TEXT NOT NULL,
                context TEXT,
                created_at TEXT NOT NULL,
                UNIQUE (type, source, target),
                FOREIGN KEY (source) REFERENCES notes(address),
                FOREIGN KEY (target) REFERENCES notes(address)
            )
        """
        )

        await self.connection.execute("CREATE INDEX IF NOT EXISTS idx_notes_parent ON notes(parent)")
        await self.connection.execute("CREATE INDEX IF NOT EXISTS idx_edges_source ON edges(source)")
        await self.connection.execute("CREATE INDEX IF NOT EXISTS idx_edges_target ON edges(target)")
        await self.connection.execute("CREATE INDEX IF NOT EXISTS idx_edges_type ON edges(type)")
        # At most one outgoing continuation per note
        await self.connection.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_edges_one_continuation "
            "ON edges(source) WHERE type = 'CONTINUATION'"
        )

        await self.connection.commit()
        logger.debug(f"SQLite note store ready at {self.db_path}")

    # ═══════════════════════════════════════════════════════════
    # NOTE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def insert_if_absent(self, note: Note) -> bool:
        """Insert a note unless its address is taken."""
        await self.connect()

        parent = note.address.parent
        try:
            cursor = await self.connection.execute(
                """
                INSERT OR IGNORE INTO notes (
                    address, parent, depth, title, body, tags, created_by, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    format_address(note.address),
                    format_address(parent) if parent else ROOT_PARENT,
                    note.address.depth,
                    note.title,
                    note.body,
                    json.dumps(note.tags),
                    note.created_by,
                    note.created_at.isoformat(),
                    note.updated_at.isoformat(),
                ),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            await self.connection.rollback()
            logger.error(
                f"Failed to insert note {note.address}: {e}",
                extra={"address": str(note.address), "operation": "insert_if_absent", "error": str(e)},
            )
            raise NoteStoreError(
                f"Failed to insert note {note.address}: {e}",
                {"address": str(note.address), "operation": "insert_if_absent"},
            ) from e

        return cursor.rowcount == 1

    async def get(self, address: Address) -> Note | None:
        """Retrieve a note by address."""
        await self.connect()

        cursor = await self.connection.execute(
            "SELECT * FROM notes WHERE address = ?", (format_address(address),)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return self._row_to_note(row)

    async def update(self, note: Note) -> None:
        """Update title, body, tags and timestamp of an existing note."""
        await self.connect()

        try:
            cursor = await self.connection.execute(
                """
                UPDATE notes
                SET title = ?, body = ?, tags = ?, updated_at = ?
                WHERE address = ?
                """,
                (
                    note.title,
                    note.body,
                    json.dumps(note.tags),
                    note.updated_at.isoformat(),
                    format_address(note.address),
                ),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            await self.connection.rollback()
            logger.error(
                f"Failed to update note {note.address}: {e}",
                extra={"address": str(note.address), "operation": "update", "error": str(e)},
            )
            raise NoteStoreError(
                f"Failed to update note {note.address}: {e}",
                {"address": str(note.address), "operation": "update"},
            ) from e

        if cursor.rowcount == 0:
            raise NoteStoreError(
                f"Cannot update missing note {note.address}",
                {"address": str(note.address), "operation": "update"},
            )

    async def scan_prefix(self, prefix: Address | None = None) -> list[Note]:
        """Notes in the subtree rooted at prefix (all notes if None)."""
        await self.connect()

        if prefix is None:
            cursor = await self.connection.execute("SELECT * FROM notes")
            rows = await cursor.fetchall()
            return sort_notes(self._row_to_note(row) for row in rows)

        text = format_address(prefix)
        cursor = await self.connection.execute(
            "SELECT * FROM notes WHERE substr(address, 1, ?) = ? AND depth >= ?",
            (len(text), text, prefix.depth),
        )
        rows = await cursor.fetchall()

        # String prefix also matches "12" for "1"; keep real descendants only.
        notes = (self._row_to_note(row) for row in rows)
        return sort_notes(note for note in notes if note.address.is_self_or_descendant_of(prefix))

    async def scan_children(self, parent: Address | None = None) -> list[Note]:
        """Direct children of parent (roots if None)."""
        await self.connect()

        cursor = await self.connection.execute(
            "SELECT * FROM notes WHERE parent = ?",
            (format_address(parent) if parent else ROOT_PARENT,),
        )
        rows = await cursor.fetchall()

        return sort_notes(self._row_to_note(row) for row in rows)

    # ═══════════════════════════════════════════════════════════
    # EDGE OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def insert_edge(self, edge: Edge) -> bool:
        """Store a link or continuation edge (idempotent)."""
        await self.connect()

        if not edge.type.is_stored:
            raise NoteStoreError(
                f"{edge.type.value} relations are derived and cannot be stored",
                {"operation": "insert_edge", "type": edge.type.value},
            )

        edge = normalize_edge(edge)
        try:
            cursor = await self.connection.execute(
                """
                INSERT OR IGNORE INTO edges (source, target, type, context, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    format_address(edge.source),
                    format_address(edge.target),
                    edge.type.value,
                    edge.context,
                    edge.created_at.isoformat(),
                ),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            await self.connection.rollback()
            logger.error(
                f"Failed to insert {edge.type.value} edge: {e}",
                extra={"operation": "insert_edge", "error": str(e)},
            )
            raise NoteStoreError(
                f"Failed to insert {edge.type.value} edge {edge.source} -> {edge.target}: {e}",
                {
                    "source": str(edge.source),
                    "target": str(edge.target),
                    "operation": "insert_edge",
                },
            ) from e

        return cursor.rowcount == 1

    async def scan_edges(
        self,
        relationship_type: RelationshipType,
        endpoint: Address,
        direction: EdgeDirection = EdgeDirection.BOTH,
    ) -> list[Edge]:
        """Edges of one type touching endpoint."""
        await self.connect()

        text = format_address(endpoint)
        if direction == EdgeDirection.OUTGOING:
            query = "SELECT * FROM edges WHERE type = ? AND source = ?"
            params = [relationship_type.value, text]
        elif direction == EdgeDirection.INCOMING:
            query = "SELECT * FROM edges WHERE type = ? AND target = ?"
            params = [relationship_type.value, text]
        else:  # both
            query = "SELECT * FROM edges WHERE type = ? AND (source = ? OR target = ?)"
            params = [relationship_type.value, text, text]

        query += " ORDER BY id"

        cursor = await self.connection.execute(query, params)
        rows = await cursor.fetchall()

        return [self._row_to_edge(row) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # UTILITY METHODS
    # ═══════════════════════════════════════════════════════════

    async def count_notes(self) -> int:
        """Count all notes."""
        await self.connect()

        cursor = await self.connection.execute("SELECT COUNT(*) FROM notes")
        row = await cursor.fetchone()

        return row[0] if row else 0

    async def count_edges(self, relationship_type: RelationshipType | None = None) -> int:
        """Count edges."""
        await self.connect()

        query = "SELECT COUNT(*) FROM edges"
        params = []

        if relationship_type:
            query += " WHERE type = ?"
            params.append(relationship_type.value)

        cursor = await self.connection.execute(query, params)
        row = await cursor.fetchone()

        return row[0] if row else 0

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    def _row_to_note(self, row: aiosqlite.Row) -> Note:
        """Convert database row to Note object."""
        return Note(
            address=parse_address(row["address"]),
            title=row["title"],
            body=row["body"],
            tags=json.loads(row["tags"]) if row["tags"] else [],
            created_by=row["created_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_edge(self, row: aiosqlite.Row) -> Edge:
        """Convert database row to Edge object."""
        return Edge(
            source=parse_address(row["source"]),
            target=parse_address(row["target"]),
            type=RelationshipType(row["type"]),
            context=row["context"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
