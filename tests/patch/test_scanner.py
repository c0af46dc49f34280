"""Tests for the JSON-with-comments scanner and path lookups."""

from __future__ import annotations

import pytest

from json_node_sync.exceptions import DocumentSyntaxError, PatchError
from json_node_sync.patch.scanner import (
    NodeKind,
    find_node_at_location,
    node_value,
    parse_document,
    parse_tree,
)

# ---------------------------------------------------------------------------
# Tree shape and offsets
# ---------------------------------------------------------------------------


class TestParseTree:
    def test_offsets_cover_source_spans(self) -> None:
        text = '{"a": [1, "x"]}'
        root = parse_tree(text)
        assert root is not None
        assert root.kind is NodeKind.OBJECT
        assert (root.offset, root.length) == (0, len(text))
        prop = root.children[0]
        assert prop.kind is NodeKind.PROPERTY
        assert prop.key == "a"
        array = prop.children[1]
        assert text[array.offset : array.end] == '[1, "x"]'
        assert [text[c.offset : c.end] for c in array.children] == ["1", '"x"']

    def test_parent_links(self) -> None:
        root = parse_tree('{"a": [true]}')
        assert root is not None
        element = root.children[0].children[1].children[0]
        assert element.kind is NodeKind.BOOLEAN
        assert element.parent is root.children[0].children[1]
        assert root.parent is None

    @pytest.mark.parametrize(
        ("text", "kind", "value"),
        [
            ('"hi"', NodeKind.STRING, "hi"),
            ("-12", NodeKind.NUMBER, -12),
            ("1.5e2", NodeKind.NUMBER, 150.0),
            ("true", NodeKind.BOOLEAN, True),
            ("false", NodeKind.BOOLEAN, False),
            ("null", NodeKind.NULL, None),
        ],
    )
    def test_scalars(self, text: str, kind: NodeKind, value: object) -> None:
        root = parse_tree(text)
        assert root is not None
        assert root.kind is kind
        assert root.value == value

    def test_integer_stays_int(self) -> None:
        root = parse_tree("10")
        assert root is not None
        assert isinstance(root.value, int)

    def test_string_escapes_decoded(self) -> None:
        root = parse_tree(r'"a\"bé\n"')
        assert root is not None
        assert root.value == 'a"bé\n'

    def test_comments_and_trailing_commas(self) -> None:
        text = """// header
{
  /* block */ "a": 1, // after
  "b": [1, 2,],
}
"""
        assert parse_document(text) == {"a": 1, "b": [1, 2]}

    def test_byte_order_mark(self) -> None:
        assert parse_document('\ufeff{"a": 1}') == {"a": 1}

    @pytest.mark.parametrize("text", ["", "  \n\t", "// only\n", "/* only */"])
    def test_no_value(self, text: str) -> None:
        assert parse_tree(text) is None
        assert parse_document(text) is None


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        ("text", "message"),
        [
            ('{"a" 1}', "Colon expected at offset 5"),
            ('{"a": 1 "b": 2}', "Comma or closing brace expected"),
            ("[1 2]", "Comma or closing bracket expected"),
            ("{a: 1}", "Property name expected"),
            ('{"a": }', "Value expected"),
            ('"abc', "Unterminated string"),
            ("/* open", "Unterminated block comment"),
            ("1 2", "End of file expected"),
            ("nullx", "Value expected"),
            ("-", "Invalid number"),
            ('"\\x"', "Invalid escape sequence"),
            ('"a\nb"', "Invalid character in string"),
        ],
    )
    def test_malformed(self, text: str, message: str) -> None:
        with pytest.raises(DocumentSyntaxError, match=message):
            parse_tree(text)

    def test_offset_attribute(self) -> None:
        with pytest.raises(DocumentSyntaxError) as exc_info:
            parse_tree('{"a" 1}')
        assert exc_info.value.offset == 5

    def test_is_patch_error(self) -> None:
        with pytest.raises(PatchError):
            parse_tree("{")


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class TestFindNodeAtLocation:
    DOC = '{"user": {"name": "Ann", "tags": ["a", {"k": 1}]}}'

    def test_empty_path_is_root(self) -> None:
        root = parse_tree(self.DOC)
        assert find_node_at_location(root, []) is root

    def test_nested_lookup(self) -> None:
        root = parse_tree(self.DOC)
        found = find_node_at_location(root, ["user", "tags", 1, "k"])
        assert found is not None
        assert found.value == 1

    @pytest.mark.parametrize(
        "path",
        [
            ["missing"],
            ["user", "tags", 2],
            ["user", "tags", -1],
            ["user", 0],
            ["user", "name", "x"],
            ["user", "tags", "0"],
            ["user", "tags", True],
        ],
    )
    def test_unresolvable_paths(self, path: list[str | int]) -> None:
        assert find_node_at_location(parse_tree(self.DOC), path) is None

    def test_none_root(self) -> None:
        assert find_node_at_location(None, ["a"]) is None
        assert find_node_at_location(None, []) is None

    def test_duplicate_key_lookup_takes_first(self) -> None:
        found = find_node_at_location(parse_tree('{"a": 1, "a": 2}'), ["a"])
        assert found is not None
        assert found.value == 1


class TestNodeValue:
    def test_decodes_subtree(self) -> None:
        root = parse_tree('{"a": {"b": [1, null, "c"]}}')
        assert root is not None
        assert node_value(root) == {"a": {"b": [1, None, "c"]}}

    def test_property_decodes_to_its_value(self) -> None:
        root = parse_tree('{"a": 5}')
        assert root is not None
        assert node_value(root.children[0]) == 5

    def test_duplicate_keys_last_wins(self) -> None:
        assert parse_document('{"a": 1, "a": 2}') == {"a": 2}
