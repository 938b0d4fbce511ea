from dataclasses import dataclass
from typing import List, Protocol

# literal token used to cheaply detect inline image data without parsing
PRESENCE_MARKER = b'"inlineData"'


@dataclass(frozen=True)
class InlineImagePair:
    mime_type: str
    data_base64: str


class PayloadExtractor(Protocol):
    """Protocol describing a response payload extractor.

    ``extract`` returns pairs in document order and never raises on malformed input.
    """

    name: str

    def extract(self, document: bytes) -> List[InlineImagePair]:
        ...


def has_inline_data(document: bytes) -> bool:
    return PRESENCE_MARKER in document
