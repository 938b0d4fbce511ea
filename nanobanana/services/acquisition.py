"""ResponseAcquirer: one primary request, at most one image-only fallback."""
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Protocol

from ..errors import EmptyResponse, NanobananaError, NoImageData, ResponsePathConflict, TransportFailure
from ..extractors.base import has_inline_data
from ..request_body import FALLBACK_MODALITIES, PRIMARY_MODALITIES, RequestSpec, build_request_body

logger = logging.getLogger(__name__)

BODY_PREVIEW_BYTES = 2048
FALLBACK_RESPONSE_NAME = "output_image_only.txt"


class Transport(Protocol):
    def post(self, body: bytes, dest: str, timeout: float = 60, retries: int = 0, retry_delay: float = 0) -> int:
        ...


class AcquisitionState(enum.Enum):
    PRIMARY = "primary"
    FALLBACK_IMAGE_ONLY = "fallback_image_only"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class AcquisitionResult:
    document: bytes
    path: str
    used_fallback: bool


def _read(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        return b""


def _head(path: str, limit: int = BODY_PREVIEW_BYTES) -> bytes:
    return _read(path)[:limit]


class ResponseAcquirer:
    def __init__(self, transport: Transport, response_path: str, fallback_path: str,
                 timeout: float = 60, retries: int = 2, retry_delay: float = 1):
        if os.path.abspath(response_path) == os.path.abspath(fallback_path):
            raise ResponsePathConflict(
                f"--save-response must not point at the image-only retry file: {fallback_path}"
            )
        self.transport = transport
        self.response_path = response_path
        self.fallback_path = fallback_path
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.state = AcquisitionState.PRIMARY

    def acquire(self, spec: RequestSpec) -> AcquisitionResult:
        try:
            return self._acquire(spec)
        except NanobananaError:
            self.state = AcquisitionState.FAILED
            raise

    def _acquire(self, spec: RequestSpec) -> AcquisitionResult:
        self.state = AcquisitionState.PRIMARY
        logger.info(
            "calling the API (timeout=%ss, retry=%s, delay=%ss)", self.timeout, self.retries, self.retry_delay
        )
        status = self.transport.post(
            build_request_body(spec, PRIMARY_MODALITIES),
            self.response_path,
            timeout=self.timeout,
            retries=self.retries,
            retry_delay=self.retry_delay,
        )
        self._check_status(status, self.response_path)
        document = _read(self.response_path)
        if not document:
            raise EmptyResponse(self.response_path)
        logger.debug("saved response to %s (%d bytes)", self.response_path, len(document))
        if has_inline_data(document):
            self.state = AcquisitionState.DONE
            return AcquisitionResult(document, self.response_path, used_fallback=False)

        self.state = AcquisitionState.FALLBACK_IMAGE_ONLY
        logger.info("no inlineData block found; retrying with an image-only request")
        # single attempt: this call already is the fallback
        status = self.transport.post(
            build_request_body(spec, FALLBACK_MODALITIES),
            self.fallback_path,
            timeout=self.timeout,
        )
        self._check_status(status, self.fallback_path)
        document = _read(self.fallback_path)
        if not document:
            raise EmptyResponse(self.fallback_path, fallback=True)
        if not has_inline_data(document):
            raise NoImageData("no inlineData found even after the image-only retry")
        self.state = AcquisitionState.DONE
        return AcquisitionResult(document, self.fallback_path, used_fallback=True)

    @staticmethod
    def _check_status(status: int, path: str) -> None:
        if 200 <= status < 300:
            return
        raise TransportFailure(status, _head(path))
