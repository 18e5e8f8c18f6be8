"""Tests for the byte stream used by the scanners."""

import io

import pytest

from restricted_xml_parser.character import EOF, ByteStream, open_stream


class TestByteStream:
    """Test sequential reading, lookahead and position tracking."""

    def test_reads_bytes_one_at_a_time(self):
        stream = open_stream(b"ab")

        assert stream.read_char() == "a"
        assert stream.read_char() == "b"
        assert stream.read_char() == EOF
        assert stream.read_char() == EOF

    def test_each_byte_maps_to_one_character(self):
        """Test that non-ASCII bytes are not decoded."""
        stream = open_stream("é".encode("utf-8"))

        assert stream.read_char() == "\xc3"
        assert stream.read_char() == "\xa9"
        assert stream.read_char() == EOF

    def test_peek_does_not_consume(self):
        stream = open_stream(b"<?xml")

        assert stream.peek() == "<"
        assert stream.peek(2) == "<?"
        assert stream.read_char() == "<"
        assert stream.peek(10) == "?xml"
        assert stream.bytes_read == 1

    def test_peek_at_end_of_input(self):
        stream = open_stream(b"")
        assert stream.peek() == EOF

    def test_position_tracking(self):
        """Test line and column tracking across line feeds."""
        stream = open_stream(b"a\nbc")
        assert stream.position == {"line": 1, "column": 1, "offset": 0}

        stream.read_char()
        stream.read_char()
        assert stream.position == {"line": 2, "column": 1, "offset": 2}

        stream.read_char()
        assert stream.position == {"line": 2, "column": 2, "offset": 3}

    def test_read_line_includes_line_feed(self):
        stream = open_stream(b"first\nsecond")

        assert stream.read_line() == "first\n"
        assert stream.read_line() == "second"
        assert stream.read_line() == ""

    def test_byte_budget_truncates_input(self):
        """Test that max_bytes ends the input early."""
        stream = open_stream(b"abcdef", max_bytes=3)

        assert [stream.read_char() for _ in range(4)] == ["a", "b", "c", EOF]
        assert stream.truncated
        assert stream.bytes_read == 3

    def test_byte_budget_counts_peeked_characters(self):
        stream = open_stream(b"abcdef", max_bytes=2)

        assert stream.peek(5) == "ab"
        assert stream.read_char() == "a"
        assert stream.read_char() == "b"
        assert stream.read_char() == EOF

    def test_close_closes_underlying_file(self):
        raw = io.BytesIO(b"x")
        ByteStream(raw).close()
        assert raw.closed


class TestOpenStream:
    """Test wrapping of the supported input types."""

    def test_string_is_content(self):
        stream = open_stream("<a/>")
        assert stream.read_line() == "<a/>"

    def test_bytearray(self):
        assert open_stream(bytearray(b"x")).read_char() == "x"

    def test_file_like_keeps_name(self, tmp_path):
        path = tmp_path / "doc.xml"
        path.write_bytes(b"<a/>")
        with path.open("rb") as handle:
            stream = open_stream(handle)
            assert str(stream.name) == str(path)
            assert stream.read_char() == "<"

    def test_existing_stream_is_reused(self):
        stream = open_stream(b"x")
        assert open_stream(stream) is stream

    def test_unsupported_type(self):
        with pytest.raises(TypeError, match="Unsupported input type"):
            open_stream(42)
