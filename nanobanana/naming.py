"""Output naming: extensions from mime types and final per-image paths."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .extractors.base import InlineImagePair

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/svg+xml": "svg",
}
FALLBACK_EXTENSION = "bin"
DEFAULT_BASE_NAME = "output"


def resolve_extension(mime_type: Optional[str]) -> str:
    return MIME_EXTENSIONS.get((mime_type or "").strip().lower(), FALLBACK_EXTENSION)


def resolve_program_path(name: str, base_dir: str) -> str:
    """Absolute paths are kept; relative ones are anchored at ``base_dir``, not the cwd."""
    name = os.path.expanduser(name)
    if os.path.isabs(name):
        return os.path.normpath(name)
    return os.path.normpath(os.path.join(base_dir, name))


def default_output_name(first_mime: Optional[str]) -> str:
    return f"{DEFAULT_BASE_NAME}.{resolve_extension(first_mime)}"


@dataclass(frozen=True)
class OutputTarget:
    directory: str
    base_name: str
    extension: str
    index: Optional[int] = None

    @property
    def filename(self) -> str:
        if self.index is None:
            return f"{self.base_name}.{self.extension}"
        return f"{self.base_name}_{self.index:03d}.{self.extension}"

    @property
    def path(self) -> str:
        return os.path.join(self.directory, self.filename)


def split_requested(requested: str, base_dir: str):
    """Return ``(directory, base_name)``; the requested extension is dropped."""
    full = resolve_program_path(requested, base_dir)
    base, _ext = os.path.splitext(os.path.basename(full))
    return os.path.dirname(full), base


def plan_output_targets(requested: str, pairs: Sequence[InlineImagePair], base_dir: str) -> List[OutputTarget]:
    """One target per pair.

    A single pair is written as ``base.<ext>``; several pairs as
    ``base_001.<ext>``, ``base_002.<ext>``... with each extension taken from
    that pair's own mime type.
    """
    directory, base = split_requested(requested, base_dir)
    if len(pairs) == 1:
        return [OutputTarget(directory, base, resolve_extension(pairs[0].mime_type))]
    return [
        OutputTarget(directory, base, resolve_extension(p.mime_type), index=i)
        for i, p in enumerate(pairs, start=1)
    ]
