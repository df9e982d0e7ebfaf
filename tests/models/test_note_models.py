"""Tests for note and relationship models."""

from zettelkb.models import (
    ContextBundle,
    ContinuationChain,
    Edge,
    Note,
    RelationshipType,
    normalize_tags,
    parse_address,
)


class TestNote:
    """Test Note model."""

    def test_create_note(self):
        """Test creating a note from plain values."""
        note = Note(address="1a", title="Child", body="Some **markdown**")

        assert note.address == parse_address("1a")
        assert note.title == "Child"
        assert note.body == "Some **markdown**"
        assert note.tags == []
        assert note.created_by is None
        assert note.created_at is not None

    def test_parent_address(self):
        assert Note(address="1a2", title="x").parent_address == parse_address("1a")
        assert Note(address="4", title="x").parent_address is None

    def test_tags_are_deduplicated(self):
        """Tags are stripped and de-duplicated in first-seen order."""
        note = Note(address="1", title="x", tags=["b", " a ", "b", "", "a"])
        assert note.tags == ["b", "a"]

    def test_normalize_tags(self):
        assert normalize_tags(["x", "x ", " y"]) == ["x", "y"]

    def test_add_and_remove_tag(self):
        note = Note(address="1", title="x")
        before = note.updated_at

        note.add_tag("idea")
        note.add_tag("idea")
        assert note.tags == ["idea"]
        assert note.updated_at >= before

        note.remove_tag("idea")
        assert note.tags == []

    def test_body_preview(self):
        note = Note(address="1", title="x", body="y" * 300)
        assert len(note.body_preview) == 200

    def test_json_round_trip(self):
        """Addresses serialise as plain strings."""
        note = Note(address="2b", title="x", tags=["t"])
        data = note.model_dump(mode="json")

        assert data["address"] == "2b"
        assert Note.model_validate(data) == note


class TestEdge:
    """Test Edge model."""

    def test_edge_helpers(self):
        edge = Edge(source="1a", target="2", type=RelationshipType.LINK, context="see also")
        a = parse_address("1a")
        b = parse_address("2")

        assert edge.touches(a)
        assert edge.touches(b)
        assert not edge.touches(parse_address("3"))
        assert edge.other(a) == b
        assert edge.other(b) == a

    def test_oriented_from(self):
        """A link can be read from either end."""
        edge = Edge(source="1a", target="2", type=RelationshipType.LINK, context="ctx")
        flipped = edge.oriented_from(parse_address("2"))

        assert flipped.source == parse_address("2")
        assert flipped.target == parse_address("1a")
        assert flipped.context == "ctx"
        assert edge.oriented_from(parse_address("1a")) is edge

    def test_relationship_type_properties(self):
        assert RelationshipType.LINK.is_symmetric
        assert not RelationshipType.CONTINUATION.is_symmetric
        assert not RelationshipType.BRANCH.is_stored
        assert RelationshipType.CONTINUATION.is_stored


class TestDerivedViews:
    """Test ContinuationChain and ContextBundle."""

    def test_chain_length(self):
        chain = ContinuationChain(start="1", addresses=["1", "2", "3"])

        assert len(chain) == 3
        assert chain.addresses[-1] == parse_address("3")
        assert not chain.cycle_detected
        assert chain.cycle_at is None

    def test_bundle_backlink_addresses(self):
        bundle = ContextBundle(
            note=Note(address="1a", title="x"),
            backlinks=[Note(address="1", title="p"), Note(address="1b", title="s")],
        )

        assert bundle.backlink_addresses == [parse_address("1"), parse_address("1b")]
        assert bundle.parent is None
        assert bundle.children == []
