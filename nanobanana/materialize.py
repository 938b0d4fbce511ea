from __future__ import annotations

import base64
import binascii
import logging
import os
from typing import List, Sequence

from .errors import DecodeFailure, MaterializationFailure
from .extractors.base import InlineImagePair
from .naming import plan_output_targets

logger = logging.getLogger(__name__)


def ensure_parent_dir(path: str) -> None:
    d = os.path.dirname(os.path.abspath(path))
    os.makedirs(d, exist_ok=True)


def decode_payload(data_base64: str) -> bytes:
    # servers may wrap long payloads; whitespace is not part of the alphabet
    compact = "".join(data_base64.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(f"base64 decoding failed: {e}") from e


def write_image(pair: InlineImagePair, path: str) -> str:
    """Decode ``pair`` into ``path``, replacing any existing file.

    Raises DecodeFailure for a malformed payload and MaterializationFailure
    when the file is missing or empty afterwards.
    """
    raw = decode_payload(pair.data_base64)
    try:
        ensure_parent_dir(path)
        with open(path, "wb") as f:
            f.write(raw)
    except OSError as e:
        raise MaterializationFailure(f"failed to write {path}: {e}") from e
    if not os.path.isfile(path) or os.path.getsize(path) == 0:
        raise MaterializationFailure(f"failed to create output image: {path}")
    logger.debug("wrote %d bytes to %s", len(raw), path)
    return path


def save_all(pairs: Sequence[InlineImagePair], requested: str, base_dir: str) -> List[str]:
    """Write every pair to its planned path and return the paths in order.

    The first failure aborts the batch; files written before it are kept.
    """
    written: List[str] = []
    for pair, target in zip(pairs, plan_output_targets(requested, pairs, base_dir)):
        try:
            write_image(pair, target.path)
        except (DecodeFailure, MaterializationFailure):
            if written:
                logger.error("aborting after %d of %d images; kept: %s", len(written), len(pairs), ", ".join(written))
            raise
        logger.info("wrote image %s (mimeType: %s)", target.path, pair.mime_type)
        written.append(target.path)
    return written
