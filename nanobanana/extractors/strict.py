"""Structural extraction of every inline image in a response document."""
from __future__ import annotations

import json
import logging
from typing import Any, Iterator, List

from .base import InlineImagePair

logger = logging.getLogger(__name__)

INLINE_FIELDS = ("inlineData", "inline_data")
MIME_FIELDS = ("mimeType", "mime_type")

_decoder = json.JSONDecoder()
_SEPARATORS = " \t\r\n,"


def iter_json_values(text: str) -> Iterator[Any]:
    """Yield the JSON values held in ``text``.

    A well-formed document yields one value. Otherwise the text is read as a
    stream: a top-level array is unpacked element by element, and
    concatenated or newline-delimited values are decoded one after another.
    Decoding stops at the first value that cannot be parsed; values decoded
    before it are kept.
    """
    try:
        yield json.loads(text)
        return
    except ValueError:
        pass

    pos = 0
    end = len(text)
    while pos < end and text[pos] in _SEPARATORS:
        pos += 1
    if pos < end and text[pos] == "[":
        pos += 1
    while True:
        while pos < end and (text[pos] in _SEPARATORS or text[pos] == "]"):
            pos += 1
        if pos >= end:
            return
        try:
            value, pos = _decoder.raw_decode(text, pos)
        except ValueError as e:
            logger.debug("stopped decoding at offset %d: %s", pos, e)
            return
        yield value


def iter_objects(value: Any) -> Iterator[dict]:
    """Pre-order walk over every object nested in ``value``."""
    stack = [value]
    while stack:
        cur = stack.pop()
        if isinstance(cur, dict):
            yield cur
            stack.extend(reversed(list(cur.values())))
        elif isinstance(cur, list):
            stack.extend(reversed(cur))


def _pair_from(obj: dict):
    for field in INLINE_FIELDS:
        inline = obj.get(field)
        if not isinstance(inline, dict) or "data" not in inline:
            continue
        for mf in MIME_FIELDS:
            if mf in inline:
                data = inline["data"]
                if not isinstance(data, str):
                    logger.debug("skipping %s with non-string data", field)
                    return None
                mime = inline[mf]
                return InlineImagePair(mime_type="" if mime is None else str(mime), data_base64=data)
    return None


class StrictExtractor:
    name = "strict"

    def extract(self, document: bytes) -> List[InlineImagePair]:
        text = document.decode("utf-8", errors="replace")
        pairs: List[InlineImagePair] = []
        for value in iter_json_values(text):
            for obj in iter_objects(value):
                pair = _pair_from(obj)
                if pair is not None:
                    pairs.append(pair)
        return pairs
