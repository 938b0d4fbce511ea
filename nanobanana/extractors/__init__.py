"""Response payload extractors."""
import logging

from .base import InlineImagePair, PayloadExtractor, PRESENCE_MARKER, has_inline_data
from .scan import LineScanExtractor
from .strict import StrictExtractor

logger = logging.getLogger(__name__)


def select_extractor(strict: bool = True) -> PayloadExtractor:
    if strict:
        return StrictExtractor()
    logger.info("structural parsing disabled: only the last image in the response will be saved")
    return LineScanExtractor()


__all__ = [
    "InlineImagePair",
    "PayloadExtractor",
    "PRESENCE_MARKER",
    "has_inline_data",
    "LineScanExtractor",
    "StrictExtractor",
    "select_extractor",
]
