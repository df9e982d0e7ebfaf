"""
ZettelKB FastAPI Application

A REST API server for the ZettelKB knowledge base.
Provides endpoints for creating, branching, linking, indexing and searching notes.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from zettelkb import __version__
from zettelkb.config import Config
from zettelkb.core.factory import NoteStoreFactory
from zettelkb.models.note import Note
from zettelkb.models.relationships import ContextBundle, ContinuationChain, Edge
from zettelkb.services.knowledge_base import KnowledgeBase
from zettelkb.utils.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
    ZettelKBError,
)
from zettelkb.utils.logger import get_logger, setup_logging_from_config

# Global knowledge base instance
kb: KnowledgeBase | None = None
logger = get_logger(__name__)


# Pydantic models for API
class CreateNoteRequest(BaseModel):
    """Request model for creating a root note or a note at an explicit address."""

    title: str = Field(..., description="Note title")
    body: str = Field(default="", description="Markdown body")
    id: str | None = Field(default=None, description="Explicit address (skips allocation)")
    tags: list[str] | None = None
    created_by: str | None = None


class BranchNoteRequest(BaseModel):
    """Request model for branching a child note."""

    title: str = Field(..., description="Note title")
    body: str = Field(default="", description="Markdown body")
    tags: list[str] | None = None
    created_by: str | None = None


class UpdateNoteRequest(BaseModel):
    """Request model for editing a note."""

    title: str | None = None
    body: str | None = None
    tags: list[str] | None = None


class IndexRequest(BaseModel):
    """Request model for building an index card."""

    created_by: str | None = None


class LinkRequest(BaseModel):
    """Request model for linking two notes."""

    a: str
    b: str
    context: str | None = Field(default=None, description="Why the notes are linked")


class ContinuationRequest(BaseModel):
    """Request model for a continuation."""

    source: str
    target: str


class NoteContextResponse(BaseModel):
    """Context bundle plus the link edges with their context text."""

    context: ContextBundle
    link_edges: list[Edge]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    kb_initialized: bool
    version: str
    stats: dict[str, Any] | None = None


def _require_kb() -> KnowledgeBase:
    if not kb:
        raise HTTPException(status_code=503, detail="Knowledge base not initialized")
    return kb


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global kb

    # Load configuration from environment or use defaults
    config = Config.from_env()

    setup_logging_from_config(config.logging)

    logger.info("Starting ZettelKB server")
    logger.info(f"Configuration: store={config.store.backend}, db={config.store.db_path}")

    logger.info("Creating note store")
    store = NoteStoreFactory.create(config)

    kb = KnowledgeBase(store=store, config=config)
    await kb.initialize()
    logger.info("ZettelKB initialized")

    yield

    # Cleanup
    logger.info("Shutting down ZettelKB server")
    await kb.close()
    kb = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="ZettelKB API",
    description="Zettelkasten knowledge base with Luhmann-style addresses",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ZettelKBError)
async def zettelkb_error_handler(request: Request, exc: ZettelKBError):
    """Map the error taxonomy onto HTTP status codes."""
    if isinstance(exc, ValidationError):
        status_code = 400
    elif isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, ConflictError):
        status_code = 409
    else:
        status_code = 500
        logger.error(
            f"Error handling {request.method} {request.url.path}: {exc}",
            extra={"error": str(exc), "error_type": type(exc).__name__},
        )

    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": type(exc).__name__, "context": exc.context},
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    if not kb:
        return HealthResponse(status="initializing", kb_initialized=False, version=__version__)
    return HealthResponse(
        status="healthy",
        kb_initialized=True,
        version=__version__,
        stats=await kb.stats(),
    )


# Note endpoints
@app.post("/notes", response_model=Note, status_code=201)
async def create_note(request: CreateNoteRequest):
    """
    Create a note.

    Without an id the note gets the next free root address (1, 2, 3, ...).
    With an id the note is stored at exactly that address; the parent of an
    explicit address does not have to exist.
    """
    return await _require_kb().create(
        title=request.title,
        body=request.body,
        explicit_id=request.id,
        tags=request.tags,
        created_by=request.created_by,
    )


@app.get("/notes", response_model=list[Note])
async def list_notes():
    """All notes in address order."""
    return await _require_kb().list()


@app.get("/notes/{address}", response_model=Note)
async def get_note(address: str):
    """Retrieve a note by address."""
    return await _require_kb().get(address)


@app.patch("/notes/{address}", response_model=Note)
async def update_note(address: str, request: UpdateNoteRequest):
    """Edit title, body or tags. The address never changes."""
    return await _require_kb().update(
        address, title=request.title, body=request.body, tags=request.tags
    )


@app.post("/notes/{address}/branches", response_model=Note, status_code=201)
async def branch_note(address: str, request: BranchNoteRequest):
    """
    Create the next child of a note.

    A note ending in digits gets letter children (1 -> 1a, 1b), a note
    ending in letters gets digit children (1a -> 1a1, 1a2).
    """
    return await _require_kb().branch(
        address,
        title=request.title,
        body=request.body,
        tags=request.tags,
        created_by=request.created_by,
    )


@app.post("/notes/{address}/index", response_model=Note, status_code=201)
async def build_index(address: str, request: IndexRequest | None = None):
    """Create an index card listing the current children of a note."""
    created_by = request.created_by if request else None
    return await _require_kb().index(address, created_by=created_by)


@app.get("/notes/{address}/context", response_model=NoteContextResponse)
async def get_context(address: str):
    """Parent, children, links, continuations and backlinks of a note."""
    engine = _require_kb()
    bundle = await engine.context(address)
    return NoteContextResponse(context=bundle, link_edges=await engine.links(address))


@app.get("/notes/{address}/chain", response_model=ContinuationChain)
async def get_chain(address: str, strict: bool = Query(default=False)):
    """Follow continuations from a note."""
    return await _require_kb().chain(address, strict=strict)


# Relation endpoints
@app.post("/links", status_code=201)
async def create_link(request: LinkRequest):
    """Link two notes. Linking is symmetric and idempotent."""
    await _require_kb().link(request.a, request.b, context=request.context)
    return {"status": "linked", "a": request.a, "b": request.b}


@app.post("/continuations", status_code=201)
async def create_continuation(request: ContinuationRequest):
    """Mark target as the next note after source."""
    await _require_kb().cont(request.source, request.target)
    return {"status": "continued", "source": request.source, "target": request.target}


# Tree & search endpoints
@app.get("/tree/{prefix}", response_model=list[Note])
async def get_tree(prefix: str):
    """Notes at prefix and below, in address order."""
    return await _require_kb().tree(prefix)


@app.get("/search", response_model=list[Note])
async def search_notes(
    q: str = Query(default="", description="Case-insensitive substring"),
    limit: int | None = Query(default=None, ge=1, le=1000),
):
    """Search titles, bodies and tags."""
    return await _require_kb().search(q, limit=limit)
