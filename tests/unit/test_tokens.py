"""
Unit tests for the lxml-backed token stream (font_family_parser.tokens).
"""

from __future__ import annotations

import io

import pytest

from font_family_parser.exceptions import StreamSyntaxError
from font_family_parser.tokens import TokenStream, TokenType, XmlTokenStream

from tests.conftest import ANDROID_NS


def _drain(stream: XmlTokenStream) -> list[tuple[TokenType, str | None, int]]:
    tokens = []
    while True:
        event = stream.next()
        tokens.append((event, stream.name, stream.depth))
        if event is TokenType.END_DOCUMENT:
            return tokens


class TestTokenSequence:
    """Tests for the tokens produced by XmlTokenStream.next()."""

    def test_start_end_and_depth(self):
        stream = XmlTokenStream.from_string('<font-family><font/></font-family>')
        assert stream.event_type is None
        assert _drain(stream) == [
            (TokenType.START_TAG, "font-family", 1),
            (TokenType.START_TAG, "font", 2),
            (TokenType.END_TAG, "font", 2),
            (TokenType.END_TAG, "font-family", 1),
            (TokenType.END_DOCUMENT, None, 0),
        ]

    def test_comments_and_pis_are_other(self):
        stream = XmlTokenStream.from_string("<r><!-- note --><?pi data?></r>")
        events = [event for event, _, _ in _drain(stream)]
        assert events == [
            TokenType.START_TAG,
            TokenType.OTHER,
            TokenType.OTHER,
            TokenType.END_TAG,
            TokenType.END_DOCUMENT,
        ]

    def test_namespaced_element_uses_local_name(self):
        stream = XmlTokenStream.from_string('<x:font-family xmlns:x="urn:x"/>')
        assert stream.next() is TokenType.START_TAG
        assert stream.name == "font-family"

    def test_attributes_in_clark_notation(self):
        xml = (
            f'<font xmlns:android="{ANDROID_NS}" '
            'android:fontWeight="700" font="a.ttf"/>'
        )
        stream = XmlTokenStream.from_string(xml)
        stream.next()
        assert stream.attributes == {
            f"{{{ANDROID_NS}}}fontWeight": "700",
            "font": "a.ttf",
        }

    def test_end_tag_has_no_attributes(self):
        stream = XmlTokenStream.from_string('<font weight="1"></font>')
        stream.next()
        stream.next()
        assert stream.event_type is TokenType.END_TAG
        assert stream.attributes == {}

    def test_line_numbers(self):
        stream = XmlTokenStream.from_string("<r>\n\n  <a/>\n</r>")
        stream.next()
        assert stream.line_number == 1
        stream.next()
        assert stream.line_number == 3

    @pytest.mark.parametrize("chunk_size", [1, 3, 7, 4096])
    def test_chunk_size_does_not_change_tokens(self, chunk_size):
        xml = '<?xml version="1.0"?>\n<r a="1"><b><c/></b><!-- x --></r>'
        expected = _drain(XmlTokenStream.from_string(xml))
        assert _drain(XmlTokenStream.from_string(xml, chunk_size=chunk_size)) == expected

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError, match="chunk_size"):
            XmlTokenStream(io.BytesIO(b"<r/>"), chunk_size=0)


class TestEndOfDocument:
    """Tests for END_DOCUMENT handling."""

    @pytest.mark.parametrize("data", [b"", b"  \n  ", b"\n" * 100])
    def test_blank_source_is_end_document(self, data):
        stream = XmlTokenStream.from_bytes(data, chunk_size=8)
        assert stream.next() is TokenType.END_DOCUMENT

    @pytest.mark.parametrize("chunk_size", [1, 5, 4096])
    @pytest.mark.parametrize(
        "xml",
        [
            '<?xml version="1.0"?>',
            "<!-- only a comment -->",
            '<?xml version="1.0"?>\n<!-- c -->\n<?pi data?>\n',
            '<!DOCTYPE font-family>\n<!-- c -->',
        ],
    )
    def test_prolog_only_ends_without_start_tag(self, xml, chunk_size):
        stream = XmlTokenStream.from_string(xml, chunk_size=chunk_size)
        events = [event for event, _, _ in _drain(stream)]
        assert TokenType.START_TAG not in events
        assert events[-1] is TokenType.END_DOCUMENT

    def test_prolog_only_with_byte_order_mark(self):
        stream = XmlTokenStream.from_bytes(b'\xef\xbb\xbf<?xml version="1.0"?>\n<!-- c -->')
        events = [event for event, _, _ in _drain(stream)]
        assert events[-1] is TokenType.END_DOCUMENT

    def test_prolog_then_root(self):
        stream = XmlTokenStream.from_string('<?xml version="1.0"?>\n<!-- c -->\n<r/>', chunk_size=4)
        events = [event for event, _, _ in _drain(stream)]
        assert TokenType.START_TAG in events
        assert events[-1] is TokenType.END_DOCUMENT

    def test_read_past_end_raises(self):
        stream = XmlTokenStream.from_string("<r/>")
        _drain(stream)
        with pytest.raises(StreamSyntaxError, match="past end"):
            stream.next()


class TestSyntaxErrors:
    """Tests for translation of lxml syntax errors."""

    def test_mismatched_tag(self):
        stream = XmlTokenStream.from_string("<a>\n<b></a>")
        with pytest.raises(StreamSyntaxError, match="Invalid markup"):
            _drain(stream)

    def test_unclosed_root(self):
        stream = XmlTokenStream.from_string("<a><b/>")
        with pytest.raises(StreamSyntaxError):
            _drain(stream)

    def test_text_without_root(self):
        stream = XmlTokenStream.from_string("not xml at all")
        with pytest.raises(StreamSyntaxError):
            stream.next()

    def test_text_after_prolog_without_root(self):
        stream = XmlTokenStream.from_string('<?xml version="1.0"?>\n<!-- c -->\nfonts')
        with pytest.raises(StreamSyntaxError):
            _drain(stream)


class TestMemory:
    """Finished elements are released behind the token stream."""

    def test_finished_elements_cleared(self, monkeypatch):
        released = []
        release = XmlTokenStream._release

        def recording_release(element):
            release(element)
            released.append((element.tag, len(element), dict(element.attrib), element.getprevious()))

        monkeypatch.setattr(XmlTokenStream, "_release", staticmethod(recording_release))
        stream = XmlTokenStream.from_string(
            '<font-family><font a="1"><x/></font><font a="2"/><font a="3"/></font-family>'
        )
        _drain(stream)
        assert [tag for tag, _, _, _ in released] == ["x", "font", "font", "font", "font-family"]
        assert all(size == 0 and not attrib for _, size, attrib, _ in released)
        assert all(previous is None for _, _, _, previous in released)

    def test_attributes_survive_release(self):
        stream = XmlTokenStream.from_string('<r><a k="1"/><a k="2"/></r>', chunk_size=2)
        seen = []
        while stream.next() is not TokenType.END_DOCUMENT:
            if stream.event_type is TokenType.START_TAG and stream.name == "a":
                seen.append(stream.attributes)
        assert seen == [{"k": "1"}, {"k": "2"}]


class TestRequire:
    """Tests for TokenStream.require()."""

    def test_matching_kind_and_name(self):
        stream = XmlTokenStream.from_string("<font-family/>")
        stream.next()
        stream.require(TokenType.START_TAG)
        stream.require(TokenType.START_TAG, "font-family")

    def test_wrong_name(self):
        stream = XmlTokenStream.from_string("<fonts/>")
        stream.next()
        with pytest.raises(StreamSyntaxError, match="START_TAG <font-family>, found START_TAG <fonts>"):
            stream.require(TokenType.START_TAG, "font-family")

    def test_wrong_kind(self):
        stream = XmlTokenStream.from_string("<r/>")
        stream.next()
        stream.next()
        with pytest.raises(StreamSyntaxError, match="Expected START_TAG, found END_TAG"):
            stream.require(TokenType.START_TAG)

    def test_before_first_token(self):
        stream = XmlTokenStream.from_string("<r/>")
        with pytest.raises(StreamSyntaxError, match="found nothing"):
            stream.require(TokenType.START_TAG)


class TestFileSource:
    """Tests for XmlTokenStream.from_file()."""

    def test_from_file_closes_on_exit(self, tmp_path):
        path = tmp_path / "family.xml"
        path.write_text("<font-family/>", encoding="utf-8")
        with XmlTokenStream.from_file(path) as stream:
            assert stream.next() is TokenType.START_TAG
            source = stream._source
        assert source.closed

    def test_borrowed_source_left_open(self):
        source = io.BytesIO(b"<r/>")
        with XmlTokenStream(source) as stream:
            stream.next()
        assert not source.closed

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            XmlTokenStream.from_file(tmp_path / "missing.xml")


class TestProtocolDefaults:
    """Optional members of the TokenStream protocol."""

    def test_untracked_depth_and_line_number(self):
        class BareStream(TokenStream):
            def next(self):
                return TokenType.END_DOCUMENT

            event_type = None
            name = None
            attributes = {}

        stream = BareStream()
        assert stream.depth is None
        assert stream.line_number is None

    def test_xml_stream_tracks_depth(self):
        stream = XmlTokenStream.from_string("<r><a/></r>")
        assert stream.depth == 0
        stream.next()
        stream.next()
        assert stream.depth == 2
