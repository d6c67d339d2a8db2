"""
Unit tests for position mapping and enclosing-element lookup.
"""

import pytest

from spanmark.dom import Element, Text
from spanmark.positions import TreePosition, TreePositionMapper, TreeRange, enclosing_elements


@pytest.fixture
def tree():
    # ab<b>cd<i>ef</i></b>gh
    return Element("div", children=[
        Text("ab"),
        Element("b", children=[Text("cd"), Element("i", children=[Text("ef")])]),
        Text("gh"),
    ])


def nodes(tree):
    ab, bold, gh = tree.children
    cd, italic = bold.children
    ef = italic.children[0]
    return ab, bold, cd, italic, ef, gh


class TestOffsetOf:
    def test_inside_first_text(self, tree):
        ab = nodes(tree)[0]
        assert TreePositionMapper(tree).offset_of(TreePosition(ab, 1)) == 1

    def test_inside_nested_text(self, tree):
        ef = nodes(tree)[4]
        assert TreePositionMapper(tree).offset_of(TreePosition(ef, 2)) == 6

    def test_element_child_index(self, tree):
        bold = nodes(tree)[1]
        assert TreePositionMapper(tree).offset_of(TreePosition(bold, 1)) == 4

    def test_root_child_index(self, tree):
        assert TreePositionMapper(tree).offset_of(TreePosition(tree, 2)) == 6
        assert TreePositionMapper(tree).offset_of(TreePosition(tree, 0)) == 0

    def test_outside_tree(self, tree):
        with pytest.raises(ValueError, match="outside"):
            TreePositionMapper(tree).offset_of(TreePosition(Text("zz"), 0))

    def test_offset_past_text_node(self, tree):
        ab = nodes(tree)[0]
        with pytest.raises(ValueError, match="out of range"):
            TreePositionMapper(tree).offset_of(TreePosition(ab, 3))


class TestRangeOf:
    def test_range_across_nodes(self, tree):
        ab, _, _, _, ef, _ = nodes(tree)
        result = TreePositionMapper(tree).range_of(1, 4)
        assert result == TreeRange(TreePosition(ab, 1), TreePosition(ef, 1))

    def test_boundary_prefers_earlier_node(self, tree):
        ab = nodes(tree)[0]
        result = TreePositionMapper(tree).range_of(2, 0)
        assert result.start == TreePosition(ab, 2)
        assert result.end == TreePosition(ab, 2)

    def test_whole_text(self, tree):
        ab, _, _, _, _, gh = nodes(tree)
        result = TreePositionMapper(tree).range_of(0, 8)
        assert result == TreeRange(TreePosition(ab, 0), TreePosition(gh, 2))

    def test_out_of_range(self, tree):
        with pytest.raises(ValueError, match="outside text"):
            TreePositionMapper(tree).range_of(5, 10)

    def test_negative_length(self, tree):
        with pytest.raises(ValueError):
            TreePositionMapper(tree).range_of(2, -1)

    def test_empty_tree(self):
        root = Element("div")
        assert TreePositionMapper(root).range_of(0, 0).start == TreePosition(root, 0)

    def test_round_trip(self, tree):
        mapper = TreePositionMapper(tree)
        for start in range(9):
            for length in range(9 - start):
                result = mapper.range_of(start, length)
                assert mapper.offset_of(result.start) == start
                assert mapper.offset_of(result.end) == start + length


class TestTreePosition:
    def test_identity_equality(self):
        a, b = Text("x"), Text("x")
        assert TreePosition(a, 0) == TreePosition(a, 0)
        assert TreePosition(a, 0) != TreePosition(b, 0)
        assert len({TreePosition(a, 0), TreePosition(a, 0)}) == 1


class TestEnclosingElements:
    def test_nested(self, tree):
        _, bold, _, italic, _, _ = nodes(tree)
        assert enclosing_elements(tree, 4, 6) == [bold, italic]

    def test_outer_only(self, tree):
        bold = nodes(tree)[1]
        assert enclosing_elements(tree, 2, 4) == [bold]
        assert enclosing_elements(tree, 3, 5) == [bold]

    def test_crossing_boundary(self, tree):
        assert enclosing_elements(tree, 1, 3) == []

    def test_root_excluded(self, tree):
        assert tree not in enclosing_elements(tree, 0, 8)
