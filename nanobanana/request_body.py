from __future__ import annotations

import base64
import json
import mimetypes
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from PIL import Image, UnidentifiedImageError

from .errors import InputFileMissing

PRIMARY_MODALITIES = ("IMAGE", "TEXT")
FALLBACK_MODALITIES = ("IMAGE",)


@dataclass(frozen=True)
class ReferenceImage:
    data: bytes
    mime_type: str


@dataclass(frozen=True)
class RequestSpec:
    prompt_text: str
    reference_image: Optional[ReferenceImage] = None


def sniff_mime_type(path: str) -> str:
    try:
        with Image.open(path) as img:
            mime = Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        mime = None
    if not mime:
        mime, _ = mimetypes.guess_type(path)
    return mime or "application/octet-stream"


def load_reference_image(path: str) -> ReferenceImage:
    if not os.path.isfile(path):
        raise InputFileMissing(path)
    with open(path, "rb") as f:
        data = f.read()
    return ReferenceImage(data=data, mime_type=sniff_mime_type(path))


def build_request_body(spec: RequestSpec, modalities: Sequence[str] = PRIMARY_MODALITIES) -> bytes:
    """Serialize a generateContent request.

    The reference image, when present, precedes the text part.
    """
    parts = []
    if spec.reference_image is not None:
        parts.append(
            {
                "inlineData": {
                    "mimeType": spec.reference_image.mime_type,
                    "data": base64.b64encode(spec.reference_image.data).decode("ascii"),
                }
            }
        )
    parts.append({"text": spec.prompt_text})
    body = {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {"responseModalities": list(modalities)},
    }
    return json.dumps(body, ensure_ascii=True).encode("ascii")
