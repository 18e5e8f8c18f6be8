"""Tests for the tree construction state machine.

Covers text scanning, tree shape, failure kinds and a seeded random check
that generated balanced documents rebuild to the tree they were made from.
"""

import random
from typing import List, Tuple

import pytest

from restricted_xml_parser.character import EOF, open_stream
from restricted_xml_parser.shared import (
    DiagnosticCollector,
    DiagnosticReporter,
    ErrorKind,
    ParserConfig,
    XMLParseError,
)
from restricted_xml_parser.tree import (
    BuilderState,
    NodeTree,
    TreeBuilder,
    build_tree,
    reach_next_tag,
    read_node_value,
)


def build(data: str, config: ParserConfig = None) -> NodeTree:
    return TreeBuilder(config, DiagnosticCollector()).build(data)


def failure_kind(data: str, config: ParserConfig = None) -> ErrorKind:
    with pytest.raises(XMLParseError) as exc_info:
        build(data, config)
    return exc_info.value.kind


class TestTextScanning:
    """Test the node value scanner."""

    @pytest.fixture
    def reporter(self):
        return DiagnosticReporter(DiagnosticCollector())

    def test_value_up_to_next_tag(self, reporter):
        stream = open_stream("hello world</a>")
        scan = read_node_value(stream, reporter, 200)

        assert scan.value == "hello world"
        assert scan.terminator == "<"
        assert stream.read_char() == "/"

    def test_leading_whitespace_is_skipped(self, reporter):
        scan = read_node_value(open_stream("\n\t  text<"), reporter, 200)
        assert scan.value == "text"

    def test_no_value_before_tag(self, reporter):
        scan = read_node_value(open_stream("  \n <b>"), reporter, 200)
        assert scan.value is None
        assert scan.terminator == "<"

    def test_value_stops_at_line_end(self, reporter):
        stream = open_stream("first\nsecond<")
        scan = read_node_value(stream, reporter, 200)

        assert scan.value == "first"
        assert scan.terminator == "\n"
        reach_next_tag(stream, reporter)
        assert stream.read_char() == EOF

    def test_control_bytes_inside_value_are_dropped(self, reporter):
        assert read_node_value(open_stream("a\tb<"), reporter, 200).value == "ab"

    def test_end_of_input(self, reporter):
        with pytest.raises(XMLParseError) as exc_info:
            read_node_value(open_stream("text"), reporter, 200)
        assert exc_info.value.kind is ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_value_overflow(self, reporter):
        with pytest.raises(XMLParseError) as exc_info:
            read_node_value(open_stream("x" * 11 + "<"), reporter, 10)
        assert exc_info.value.kind is ErrorKind.BUFFER_OVERFLOW

    def test_reach_next_tag_end_of_input(self, reporter):
        with pytest.raises(XMLParseError) as exc_info:
            reach_next_tag(open_stream("no tag here"), reporter)
        assert exc_info.value.kind is ErrorKind.UNEXPECTED_END_OF_INPUT


class TestTreeShape:
    """Test trees built from valid documents."""

    def test_single_self_closing_root(self):
        """Test that a lone self-closing tag is a complete document."""
        tree = build('<a k="v"/>')
        root = tree[tree.root]

        assert len(tree) == 1
        assert root.name == "a"
        assert root.attributes.get("k") == "v"
        assert root.child_count == 0
        assert root.value is None

    def test_nested_structure(self):
        tree = build("<a><b>x</b><c/></a>")
        a = tree[tree.root]
        b, c = tree.children(tree.root)

        assert a.value is None
        assert a.child_count == 2
        assert (tree[b].name, tree[b].value) == ("b", "x")
        assert (tree[c].name, tree[c].value) == ("c", None)
        assert tree[b].parent == tree[c].parent == tree.root
        tree.check_invariants()

    def test_attribute_order_is_reversed(self):
        tree = build('<a x="1" y="2"/>')
        assert [(a.name, a.value) for a in tree[tree.root].attributes] == [
            ("y", "2"),
            ("x", "1"),
        ]

    def test_indented_document(self):
        document = (
            "\n"
            "<config>\n"
            '  <server port="80">\n'
            "    <host>example.org</host>\n"
            "  </server>\n"
            "</config>\n"
        )
        tree = build(document)
        server = tree[tree.root].first
        host = tree[server].first

        assert tree[tree.root].value is None
        assert tree[server].attributes.get("port") == "80"
        assert tree[host].value == "example.org"

    def test_only_first_text_is_kept(self):
        """Test that text after a child does not replace the value."""
        tree = build("<a>one<b/>two</a>")
        assert tree[tree.root].value == "one"

    def test_text_after_child_becomes_value(self):
        tree = build("<a><b/>tail</a>")
        assert tree[tree.root].value == "tail"

    def test_value_ending_on_newline(self):
        tree = build("<a>line one\nline two</a>")
        assert tree[tree.root].value == "line one"

    def test_trailing_content_is_ignored(self):
        tree = build("<a/>garbage after root")
        assert tree[tree.root].name == "a"

    def test_builder_state_and_counters(self):
        builder = TreeBuilder(sink=DiagnosticCollector())
        builder.build("<a><b/></a>")

        assert builder.state is BuilderState.DONE
        assert builder.tags_read == 3

    def test_build_tree_helper(self):
        tree = build_tree(b"<a><b/></a>", sink=DiagnosticCollector())
        assert tree.count() == 2

    def test_lenient_closing_names(self):
        config = ParserConfig().override(tree__match_closing_names=False)
        tree = build("<a><b></c></a>", config)
        assert tree.count() == 2


class TestBuildFailures:
    """Test failure kinds and cleanup for invalid documents."""

    def test_mismatched_closing_tag(self):
        assert failure_kind("<a><b></a>") is ErrorKind.UNBALANCED_TAGS

    def test_closing_tag_first(self):
        assert failure_kind("</a>") is ErrorKind.UNBALANCED_TAGS

    def test_unclosed_root(self):
        assert failure_kind("<a><b></b>") is ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_unquoted_attribute(self):
        assert failure_kind("<a k=v></a>") is ErrorKind.MALFORMED_TAG

    def test_oversized_tag_name(self):
        assert failure_kind("<" + "n" * 201 + "/>") is ErrorKind.BUFFER_OVERFLOW

    def test_smaller_scratch_capacity(self):
        config = ParserConfig().override(scanner__scratch_capacity=3)
        assert failure_kind("<abcd/>", config) is ErrorKind.BUFFER_OVERFLOW

    def test_empty_input(self):
        assert failure_kind("") is ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_depth_limit(self):
        config = ParserConfig().override(tree__max_tree_depth=2)
        build("<a><b><c/></b></a>", config)
        build("<a><b><c></c></b></a>", config)
        kind = failure_kind("<a><b><c><d></d></c></b></a>", config)
        assert kind is ErrorKind.DEPTH_LIMIT_EXCEEDED

    def test_unclosed_root_without_name_matching(self):
        """Text scanning that runs out of input reports the end of input."""
        kind = failure_kind("<a><b></a>", ParserConfig.lenient())
        assert kind is ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_byte_budget(self):
        config = ParserConfig().override(scanner__max_input_bytes=5)
        assert failure_kind("<a><b/></a>", config) is ErrorKind.UNEXPECTED_END_OF_INPUT

    def test_failure_resets_state_and_records_diagnostic(self):
        collector = DiagnosticCollector()
        builder = TreeBuilder(sink=collector)
        with pytest.raises(XMLParseError):
            builder.build("<a><b></a>")

        assert builder.state is BuilderState.FAILED
        assert collector.kinds() == [ErrorKind.UNBALANCED_TAGS]
        assert collector.entries[0].component == "tree_builder"

    def test_scanner_failures_use_scanner_component(self):
        collector = DiagnosticCollector()
        with pytest.raises(XMLParseError):
            TreeBuilder(sink=collector).build("<a k=v/>")
        assert collector.entries[0].component == "scanner"

    def test_builder_is_reusable_after_failure(self):
        builder = TreeBuilder(sink=DiagnosticCollector())
        with pytest.raises(XMLParseError):
            builder.build("<a>")
        tree = builder.build("<a/>")
        assert builder.state is BuilderState.DONE
        assert len(tree) == 1


Shape = Tuple[str, List[Tuple[str, str]], str, list]


def _random_shape(rng: random.Random, depth: int) -> Shape:
    name = rng.choice(["a", "b", "item", "node", "x1"])
    attributes = [
        (f"k{i}", rng.choice(["", "v", "some value", "1.5"]))
        for i in range(rng.randint(0, 3))
    ]
    value = rng.choice(["", "", "text", "more text here", "42"])
    children = []
    if depth < 4:
        children = [_random_shape(rng, depth + 1) for _ in range(rng.randint(0, 3))]
    return name, attributes, value, children


def _render_shape(shape: Shape, indent: str = "") -> str:
    name, attributes, value, children = shape
    opening = "<" + name + "".join(f' {k}="{v}"' for k, v in attributes)
    if not value and not children:
        return f"{indent}{opening}/>\n"
    parts = [f"{indent}{opening}>{value}\n"]
    parts.extend(_render_shape(child, indent + "  ") for child in children)
    parts.append(f"{indent}</{name}>\n")
    return "".join(parts)


def _assert_matches(tree: NodeTree, handle: int, shape: Shape) -> None:
    name, attributes, value, children = shape
    node = tree[handle]
    assert node.name == name
    assert [(a.name, a.value) for a in node.attributes] == list(reversed(attributes))
    assert node.value == (value or None)
    assert node.child_count == len(children)
    for child, child_shape in zip(tree.children(handle), children):
        _assert_matches(tree, child, child_shape)


@pytest.mark.parametrize("seed", range(25))
def test_random_balanced_documents_rebuild_their_tree(seed):
    """Generated balanced documents rebuild to the shape they were made from."""
    rng = random.Random(seed)
    shape = _random_shape(rng, 0)

    tree = build(_render_shape(shape))

    tree.check_invariants()
    _assert_matches(tree, tree.root, shape)
