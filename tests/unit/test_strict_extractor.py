import json

from nanobanana import StrictExtractor
from tests.helpers import b64, gemini_stream


def test_extracts_all_images_in_document_order():
    doc = gemini_stream([("image/png", b"one"), ("image/jpeg", b"two"), ("image/webp", b"three")])
    pairs = StrictExtractor().extract(doc)
    assert [p.mime_type for p in pairs] == ["image/png", "image/jpeg", "image/webp"]
    assert [p.data_base64 for p in pairs] == [b64(b"one"), b64(b"two"), b64(b"three")]


def test_no_inline_objects_yields_empty():
    doc = gemini_stream([])
    assert StrictExtractor().extract(doc) == []


def test_single_object_document():
    doc = json.dumps({"parts": [{"inlineData": {"mimeType": "image/gif", "data": b64(b"g")}}]}).encode()
    pairs = StrictExtractor().extract(doc)
    assert len(pairs) == 1
    assert pairs[0].mime_type == "image/gif"


def test_newline_delimited_objects():
    lines = [
        json.dumps({"a": {"inlineData": {"mimeType": "image/png", "data": b64(b"1")}}}),
        json.dumps({"b": [{"deep": {"inlineData": {"mimeType": "image/gif", "data": b64(b"2")}}}]}),
    ]
    pairs = StrictExtractor().extract("\n".join(lines).encode())
    assert [p.mime_type for p in pairs] == ["image/png", "image/gif"]


def test_truncated_trailing_chunk_keeps_previous_objects():
    doc = gemini_stream([("image/png", b"one"), ("image/jpeg", b"two")], pretty=False)
    # cut inside the usageMetadata chunk
    truncated = doc[: doc.rindex(b"promptTokenCount")]
    pairs = StrictExtractor().extract(truncated)
    assert [p.mime_type for p in pairs] == ["image/png", "image/jpeg"]


def test_requires_both_mime_and_data():
    doc = json.dumps(
        [
            {"inlineData": {"mimeType": "image/png"}},
            {"inlineData": {"data": b64(b"x")}},
            {"inlineData": {"mimeType": "image/webp", "data": b64(b"ok")}},
        ]
    ).encode()
    pairs = StrictExtractor().extract(doc)
    assert len(pairs) == 1
    assert pairs[0].mime_type == "image/webp"


def test_snake_case_inline_data():
    doc = json.dumps({"inline_data": {"mime_type": "image/png", "data": b64(b"x")}}).encode()
    assert StrictExtractor().extract(doc)[0].mime_type == "image/png"


def test_garbage_does_not_raise():
    assert StrictExtractor().extract(b"\x00\xff not json at all {") == []
    assert StrictExtractor().extract(b"") == []
