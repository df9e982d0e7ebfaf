"""Tests for the KnowledgeBase facade."""

import pytest

from zettelkb.config import Config, KnowledgeBaseConfig
from zettelkb.core.note_store import InMemoryNoteStore
from zettelkb.models import parse_address
from zettelkb.services.knowledge_base import KnowledgeBase
from zettelkb.utils.exceptions import (
    ContinuationConflictError,
    DuplicateAddressError,
    EmptyQueryError,
    InvalidAddressError,
    NotFoundError,
    SelfLinkError,
    UnknownAddressError,
)


def addresses(notes):
    return [str(n.address) for n in notes]


class TestCreateAndBranch:
    """Test note creation and address allocation."""

    async def test_create_root_sequence(self, kb):
        """Root notes are numbered 1, 2, 3."""
        first = await kb.create("A", "a")
        second = await kb.create("B", "b")
        third = await kb.create("C")

        assert addresses([first, second, third]) == ["1", "2", "3"]
        assert third.body == ""

    async def test_branching_scenario(self, kb):
        """create Root -> 1; branch -> 1a, 1b; branch 1a -> 1a1; tree(1) is ordered."""
        root = await kb.create("Root", "")
        a = await kb.branch(root.address, "A", "")
        b = await kb.branch("1", "B", "")
        a1 = await kb.branch(a.address, "A1", "")

        assert str(root.address) == "1"
        assert str(a.address) == "1a"
        assert str(b.address) == "1b"
        assert str(a1.address) == "1a1"
        assert addresses(await kb.tree("1")) == ["1", "1a", "1a1", "1b"]

    async def test_branch_sets_parent(self, kb):
        """The parent of a branched note is its address minus the last segment."""
        await kb.create("Root")
        child = await kb.branch("1", "Child")

        assert child.parent_address == parse_address("1")

    async def test_branch_missing_parent(self, kb):
        with pytest.raises(NotFoundError):
            await kb.branch("7", "Orphan")

    async def test_branch_invalid_parent(self, kb):
        with pytest.raises(InvalidAddressError):
            await kb.branch("1A", "Bad")

    async def test_create_with_explicit_id(self, kb):
        """Explicit addresses skip allocation; their parent need not exist."""
        note = await kb.create("Deep orphan", "x", explicit_id="5c3")

        assert str(note.address) == "5c3"
        assert (await kb.get("5c3")).title == "Deep orphan"

    async def test_explicit_id_duplicate(self, kb):
        await kb.create("First", explicit_id="1")

        with pytest.raises(DuplicateAddressError):
            await kb.create("Again", explicit_id="1")

    async def test_explicit_id_invalid(self, kb):
        with pytest.raises(InvalidAddressError):
            await kb.create("Bad", explicit_id="a1")

    async def test_allocation_skips_explicit_ids(self, kb):
        """An explicit root 1 makes the next allocated root 2."""
        await kb.create("Manual", explicit_id="1")
        await kb.create("Manual", explicit_id="3")

        assert str((await kb.create("Auto")).address) == "2"
        assert str((await kb.create("Auto")).address) == "4"

    async def test_empty_title_accepted(self, kb):
        note = await kb.create("")
        child = await kb.branch(note.address, "   ")

        assert (await kb.get("1")).title == ""
        assert (await kb.get(child.address)).title == "   "

    async def test_tags_and_author(self, kb):
        note = await kb.create("Tagged", tags=["zk", "zk", "method"], created_by="agent-7")
        fetched = await kb.get(note.address)

        assert fetched.tags == ["zk", "method"]
        assert fetched.created_by == "agent-7"


class TestGetListUpdate:
    """Test reading and editing notes."""

    async def test_get_missing(self, kb):
        with pytest.raises(NotFoundError):
            await kb.get("1")

    async def test_list_in_address_order(self, sample_tree):
        assert addresses(await sample_tree.list()) == ["1", "1a", "1a1", "1b", "2"]

    async def test_update_content(self, sample_tree):
        """Updates change title, body and tags, never the address."""
        before = await sample_tree.get("1a")
        updated = await sample_tree.update("1a", title="First (edited)", tags=["edited"])

        assert updated.address == before.address
        assert updated.title == "First (edited)"
        assert updated.body == before.body
        assert updated.tags == ["edited"]
        assert updated.updated_at >= before.updated_at

        fetched = await sample_tree.get("1a")
        assert fetched.title == "First (edited)"
        assert fetched.tags == ["edited"]

    async def test_update_keeps_relations(self, sample_tree):
        await sample_tree.link("1a", "2")
        await sample_tree.update("1a", body="new body")

        assert await sample_tree.children("1a") == [parse_address("1a1")]
        assert parse_address("1a") in await sample_tree.backlinks("2")

    async def test_update_missing(self, kb):
        with pytest.raises(NotFoundError):
            await kb.update("3", title="x")

    async def test_update_empty_title(self, sample_tree):
        updated = await sample_tree.update("1", title="")

        assert updated.title == ""
        assert (await sample_tree.get("1")).title == ""


class TestRelations:
    """Test link, cont and derived relations through the facade."""

    async def test_link_then_backlink(self, sample_tree):
        """link(1a, 1b) makes 1a a backlink of 1b."""
        await sample_tree.link("1a", "1b")

        context = await sample_tree.context("1b")
        assert parse_address("1a") in context.backlink_addresses

    async def test_link_symmetry(self, sample_tree):
        """Links are queryable from both ends."""
        await sample_tree.link("1a1", "2", context="compare")

        from_a = await sample_tree.links("1a1")
        from_b = await sample_tree.links("2")

        assert [str(e.target) for e in from_a] == ["2"]
        assert [str(e.target) for e in from_b] == ["1a1"]
        assert from_b[0].context == "compare"
        assert parse_address("2") in await sample_tree.backlinks("1a1")
        assert parse_address("1a1") in await sample_tree.backlinks("2")

    async def test_link_idempotent(self, sample_tree):
        await sample_tree.link("1", "2")
        await sample_tree.link("2", "1")
        await sample_tree.link("1", "2")

        stats = await sample_tree.stats()
        assert stats["relationships"]["links"] == 1

    async def test_link_unknown(self, sample_tree):
        with pytest.raises(UnknownAddressError):
            await sample_tree.link("1", "9")

    async def test_link_self(self, sample_tree):
        with pytest.raises(SelfLinkError):
            await sample_tree.link("1", "1")

    async def test_cont_and_chain(self, sample_tree):
        await sample_tree.cont("1", "2")
        await sample_tree.cont("2", "1b")

        chain = await sample_tree.chain("1")
        assert [str(a) for a in chain.addresses] == ["1", "2", "1b"]
        assert not chain.cycle_detected

    async def test_cont_conflict(self, sample_tree):
        await sample_tree.cont("1", "2")

        with pytest.raises(ContinuationConflictError):
            await sample_tree.cont("1", "1b")

    async def test_cont_repeat_is_noop(self, sample_tree):
        await sample_tree.cont("1", "2")
        await sample_tree.cont("1", "2")

        assert (await sample_tree.stats())["relationships"]["continuations"] == 1

    async def test_cont_unknown(self, sample_tree):
        with pytest.raises(UnknownAddressError):
            await sample_tree.cont("1", "3")

    async def test_children(self, sample_tree):
        assert await sample_tree.children("1") == [parse_address("1a"), parse_address("1b")]
        assert await sample_tree.children("2") == []

    async def test_context_children_match(self, sample_tree):
        """context(addr).children agrees with children(addr)."""
        context = await sample_tree.context("1")
        assert [n.address for n in context.children] == await sample_tree.children("1")

    async def test_context_missing(self, kb):
        with pytest.raises(NotFoundError):
            await kb.context("1")


class TestTreeAndSearch:
    """Test subtree listing and search."""

    async def test_tree_of_leaf(self, sample_tree):
        assert addresses(await sample_tree.tree("1a1")) == ["1a1"]

    async def test_tree_excludes_numeric_neighbours(self, kb):
        for _ in range(12):
            await kb.create("Root")
        await kb.branch("1", "Child")
        await kb.branch("12", "Other child")

        assert addresses(await kb.tree("1")) == ["1", "1a"]

    async def test_tree_empty_prefix(self, kb):
        with pytest.raises(InvalidAddressError):
            await kb.tree("")

    async def test_search_case_insensitive(self, sample_tree):
        results = await sample_tree.search("APPLES")
        assert addresses(results) == ["1a"]

    async def test_search_title_body_and_tags(self, sample_tree):
        await sample_tree.update("2", tags=["fruit-basket"])

        assert addresses(await sample_tree.search("about")) == ["1a", "1b"]
        assert addresses(await sample_tree.search("deep")) == ["1a1"]
        assert addresses(await sample_tree.search("basket")) == ["2"]

    async def test_search_empty_query(self, sample_tree):
        with pytest.raises(EmptyQueryError):
            await sample_tree.search("")

    async def test_search_whitespace_query(self, sample_tree):
        """A space is an ordinary substring, not an empty query."""
        assert addresses(await sample_tree.search(" ")) == ["1", "1a", "1a1", "1b"]

    async def test_search_limit(self, sample_tree):
        assert addresses(await sample_tree.search("o", limit=2)) == ["1", "1a"]

    async def test_search_limit_from_config(self):
        store = InMemoryNoteStore()
        kb = KnowledgeBase(store, Config(kb=KnowledgeBaseConfig(search_limit=1)))
        await kb.initialize()
        await kb.create("match one")
        await kb.create("match two")

        assert addresses(await kb.search("match")) == ["1"]


class TestStats:
    """Test statistics."""

    async def test_stats(self, sample_tree):
        await sample_tree.link("1", "2")
        await sample_tree.cont("1a", "1b")

        stats = await sample_tree.stats()
        assert stats["notes"] == 5
        assert stats["relationships"] == {"links": 1, "continuations": 1, "total": 2}
