import logging

from nanobanana import LineScanExtractor, select_extractor, StrictExtractor
from tests.helpers import b64, gemini_stream


def test_keeps_only_last_complete_block():
    doc = gemini_stream([("image/png", b"first"), ("image/jpeg", b"second")])
    pairs = LineScanExtractor().extract(doc)
    assert len(pairs) == 1
    assert pairs[0].mime_type == "image/jpeg"
    assert pairs[0].data_base64 == b64(b"second")


def test_single_line_block():
    doc = ('{"inlineData": {"mimeType": "image/gif", "data": "%s"}}' % b64(b"g")).encode()
    pairs = LineScanExtractor().extract(doc)
    assert [(p.mime_type, p.data_base64) for p in pairs] == [("image/gif", b64(b"g"))]


def test_unclosed_trailing_block_is_not_committed():
    doc = (
        '"inlineData": {\n'
        '  "mimeType": "image/png",\n'
        '  "data": "%s"\n'
        "}\n"
        '"inlineData": {\n'
        '  "mimeType": "image/webp",\n'
        '  "data": "%s"\n' % (b64(b"done"), b64(b"cut"))
    ).encode()
    pairs = LineScanExtractor().extract(doc)
    assert [p.mime_type for p in pairs] == ["image/png"]


def test_no_blocks():
    assert LineScanExtractor().extract(gemini_stream([])) == []
    assert LineScanExtractor().extract(b"") == []


def test_warns_when_several_blocks_seen(caplog):
    doc = gemini_stream([("image/png", b"a"), ("image/png", b"b"), ("image/png", b"c")])
    with caplog.at_level(logging.WARNING, logger="nanobanana"):
        LineScanExtractor().extract(doc)
    assert any("3 inlineData blocks" in r.getMessage() for r in caplog.records)


def test_select_extractor():
    assert isinstance(select_extractor(strict=True), StrictExtractor)
    assert isinstance(select_extractor(strict=False), LineScanExtractor)


def test_compact_line_with_several_blocks_warns(caplog):
    doc = gemini_stream([("image/png", b"a"), ("image/gif", b"b")], pretty=False)
    extractor = LineScanExtractor()
    with caplog.at_level(logging.WARNING, logger="nanobanana"):
        pairs = extractor.extract(doc)
    assert extractor.blocks_seen == 2
    assert [p.mime_type for p in pairs] == ["image/png"]
    assert any("2 inlineData blocks" in r.getMessage() for r in caplog.records)
