"""Tests for RelationResolver and RelationGraph."""

import pytest

from zettelkb.models import parse_address
from zettelkb.services.relation_graph import RelationGraph
from zettelkb.services.relation_resolver import RelationResolver
from zettelkb.utils.exceptions import (
    ContinuationConflictError,
    CycleDetectedError,
    NotFoundError,
    SelfLinkError,
    UnknownAddressError,
)


def addr(text):
    return parse_address(text)


@pytest.fixture
def resolver(note_store):
    return RelationResolver(note_store)


@pytest.fixture
def graph(note_store):
    return RelationGraph(note_store)


class TestRelationGraph:
    """Test edge writes."""

    async def test_add_link_reports_new(self, sample_tree, graph):
        assert await graph.add_link(addr("1"), addr("2"))
        assert not await graph.add_link(addr("2"), addr("1"))

    async def test_first_context_wins(self, sample_tree, graph, resolver):
        await graph.add_link(addr("1"), addr("2"), context="first")
        await graph.add_link(addr("1"), addr("2"), context="second")

        links = await resolver.links_of(addr("1"))
        assert [e.context for e in links] == ["first"]

    async def test_self_relations_rejected(self, sample_tree, graph):
        with pytest.raises(SelfLinkError):
            await graph.add_link(addr("1a"), addr("1a"))
        with pytest.raises(SelfLinkError):
            await graph.add_continuation(addr("1a"), addr("1a"))

    async def test_unknown_endpoint(self, sample_tree, graph):
        with pytest.raises(UnknownAddressError):
            await graph.add_link(addr("8"), addr("1"))
        with pytest.raises(UnknownAddressError):
            await graph.add_continuation(addr("1"), addr("8"))

    async def test_unknown_is_not_found(self, sample_tree, graph):
        """UnknownAddressError is a NotFoundError."""
        with pytest.raises(NotFoundError):
            await graph.add_link(addr("1"), addr("8"))

    async def test_continuation_conflict_context(self, sample_tree, graph):
        await graph.add_continuation(addr("1"), addr("2"))

        with pytest.raises(ContinuationConflictError) as exc_info:
            await graph.add_continuation(addr("1"), addr("1b"))

        assert exc_info.value.context["existing"] == "2"
        assert exc_info.value.context["requested"] == "1b"


class TestBacklinks:
    """Test backlink computation."""

    async def test_parent_is_backlink(self, sample_tree, resolver):
        """Branch(parent, child) makes the parent a backlink of the child."""
        assert await resolver.backlinks_of(addr("1a1")) == {addr("1a")}

    async def test_root_has_no_backlinks(self, sample_tree, resolver):
        assert await resolver.backlinks_of(addr("1")) == set()

    async def test_union_of_relations(self, sample_tree, graph, resolver):
        """Links, parent and continuation sources all count."""
        await graph.add_link(addr("2"), addr("1b"))
        await graph.add_continuation(addr("1a1"), addr("1b"))

        assert await resolver.backlinks_of(addr("1b")) == {addr("1"), addr("2"), addr("1a1")}

    async def test_continuation_target_is_not_backlink_of_source(self, sample_tree, graph, resolver):
        """Continuations are directed."""
        await graph.add_continuation(addr("2"), addr("1b"))

        assert addr("1b") not in await resolver.backlinks_of(addr("2"))

    async def test_orphan_parent_not_included(self, kb, resolver):
        """An explicit address whose parent has no note has no parent backlink."""
        await kb.create("Orphan", explicit_id="4b")

        assert await resolver.backlinks_of(addr("4b")) == set()
        assert await resolver.parent_of(addr("4b")) is None


class TestContinuationChain:
    """Test continuation traversal."""

    async def test_single_note_chain(self, sample_tree, resolver):
        chain = await resolver.continuation_chain_from(addr("2"))

        assert chain.addresses == [addr("2")]
        assert chain.start == addr("2")

    async def test_chain_stops_at_end(self, sample_tree, graph, resolver):
        await graph.add_continuation(addr("1a"), addr("1a1"))
        await graph.add_continuation(addr("1a1"), addr("2"))

        chain = await resolver.continuation_chain_from(addr("1a"))
        assert chain.addresses == [addr("1a"), addr("1a1"), addr("2")]
        assert not chain.cycle_detected

    async def test_cycle_reported(self, sample_tree, graph, resolver):
        """A loop ends traversal and is flagged, not followed forever."""
        await graph.add_continuation(addr("1"), addr("2"))
        await graph.add_continuation(addr("2"), addr("1b"))
        await graph.add_continuation(addr("1b"), addr("2"))

        chain = await resolver.continuation_chain_from(addr("1"))
        assert chain.addresses == [addr("1"), addr("2"), addr("1b")]
        assert chain.cycle_detected
        assert chain.cycle_at == addr("2")

    async def test_cycle_strict(self, sample_tree, graph, resolver):
        await graph.add_continuation(addr("1"), addr("2"))
        await graph.add_continuation(addr("2"), addr("1"))

        with pytest.raises(CycleDetectedError):
            await resolver.continuation_chain_from(addr("1"), strict=True)

    async def test_chain_missing_start(self, sample_tree, resolver):
        with pytest.raises(NotFoundError):
            await resolver.continuation_chain_from(addr("9"))


class TestContext:
    """Test context bundles."""

    async def test_full_bundle(self, sample_tree, graph, resolver):
        await graph.add_link(addr("1a"), addr("2"))
        await graph.add_continuation(addr("1a"), addr("1b"))
        await graph.add_continuation(addr("2"), addr("1a"))

        bundle = await resolver.context(addr("1a"))

        assert bundle.note.title == "First"
        assert bundle.parent.address == addr("1")
        assert [n.address for n in bundle.children] == [addr("1a1")]
        assert [n.address for n in bundle.links] == [addr("2")]
        assert bundle.continuation_out.address == addr("1b")
        assert [n.address for n in bundle.continuation_in] == [addr("2")]
        assert bundle.backlink_addresses == [addr("1"), addr("2")]

    async def test_bundle_of_isolated_note(self, sample_tree, resolver):
        bundle = await resolver.context(addr("2"))

        assert bundle.parent is None
        assert bundle.children == []
        assert bundle.links == []
        assert bundle.continuation_out is None
        assert bundle.continuation_in == []
        assert bundle.backlinks == []

    async def test_children_match_children_of(self, sample_tree, resolver):
        for text in ["1", "1a", "1a1", "1b", "2"]:
            bundle = await resolver.context(addr(text))
            assert [n.address for n in bundle.children] == await resolver.children_of(addr(text))

    async def test_tree(self, sample_tree, resolver):
        notes = await resolver.tree(addr("1a"))
        assert [n.address for n in notes] == [addr("1a"), addr("1a1")]
