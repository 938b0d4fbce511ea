"""Line-oriented extraction used when structural parsing is turned off.

Only the last complete ``inlineData`` block is returned.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional

from .base import InlineImagePair

logger = logging.getLogger(__name__)

_OPEN_RE = re.compile(r'"inlineData"\s*:\s*\{')
_MIME_KEY_RE = re.compile(r'"mimeType"\s*:')
_MIME_RE = re.compile(r'"mimeType"\s*:\s*"([^"]*)"')
_DATA_KEY_RE = re.compile(r'"data"\s*:')
_DATA_RE = re.compile(r'"data"\s*:\s*"([^"]*)"')


class LineScanExtractor:
    """Keeps the last block whose mimeType and data were both seen before its closing line.

    Values are taken from the first match on a line, so when several blocks
    share one line (compact JSON) the first of them is the one committed.
    ``blocks_seen`` counts every opening, which triggers the warning below.
    """

    name = "scan"

    def __init__(self):
        self.blocks_seen = 0

    def extract(self, document: bytes) -> List[InlineImagePair]:
        text = document.decode("utf-8", errors="replace")
        inside = False
        mime = data = ""
        last: Optional[InlineImagePair] = None
        self.blocks_seen = 0

        for line in text.splitlines():
            opened = len(_OPEN_RE.findall(line))
            if opened:
                inside = True
                mime = data = ""
                self.blocks_seen += opened
            if inside and _MIME_KEY_RE.search(line) and not mime:
                m = _MIME_RE.search(line)
                if m:
                    mime = m.group(1)
            if inside and _DATA_KEY_RE.search(line) and not data:
                m = _DATA_RE.search(line)
                if m:
                    data = m.group(1)
            if inside and "}" in line:
                if mime and data:
                    last = InlineImagePair(mime_type=mime, data_base64=data)
                inside = False
                mime = data = ""

        if self.blocks_seen > 1:
            logger.warning(
                "found %d inlineData blocks but line scanning keeps only the last one; "
                "drop --scan-extract to save all of them",
                self.blocks_seen,
            )
        return [last] if last is not None else []
