"""HTTP transport for generateContent calls.

Posts a JSON body, streams the response body into a file and returns the
HTTP status. Optional wire traces mirror curl's ``--trace-ascii`` /
``--trace`` output.
"""
from __future__ import annotations

import logging
import os
import time
from datetime import datetime
from typing import IO, Any, List, Optional

import requests

from .config import mask_secret
from .errors import LocalFileError, TransportFailure

logger = logging.getLogger(__name__)

RETRY_STATUSES = frozenset({408, 429, 500, 502, 503, 504})
CHUNK_SIZE = 64 * 1024


class TraceWriter:
    """Writes request/response dumps to one or two trace files."""

    def __init__(self, ascii_path: Optional[str] = None, raw_path: Optional[str] = None, timestamps: bool = False):
        self.timestamps = timestamps
        self._ascii: Optional[IO[str]] = self._open(ascii_path)
        self._raw: Optional[IO[str]] = self._open(raw_path)

    @staticmethod
    def _open(path: Optional[str]) -> Optional[IO[str]]:
        if not path:
            return None
        try:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            return open(path, "w", encoding="utf-8")
        except OSError as e:
            raise LocalFileError(f"cannot open trace file {path}: {e}") from e

    @property
    def enabled(self) -> bool:
        return self._ascii is not None or self._raw is not None

    def _prefix(self) -> str:
        if not self.timestamps:
            return ""
        return datetime.now().strftime("%H:%M:%S.%f ")

    def info(self, text: str) -> None:
        for f in (self._ascii, self._raw):
            if f is not None:
                f.write(f"{self._prefix()}== Info: {text}\n")

    def dump(self, label: str, data: bytes) -> None:
        head = f"{self._prefix()}{label}, {len(data)} bytes (0x{len(data):x})\n"
        if self._ascii is not None:
            self._ascii.write(head)
            text = data.decode("utf-8", errors="replace")
            for off, line in _ascii_lines(text):
                self._ascii.write(f"{off:04x}: {line}\n")
        if self._raw is not None:
            self._raw.write(head)
            for off in range(0, len(data), 16):
                chunk = data[off:off + 16]
                hexpart = " ".join(f"{b:02x}" for b in chunk)
                printable = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
                self._raw.write(f"{off:04x}: {hexpart:<47} {printable}\n")

    def close(self) -> None:
        for f in (self._ascii, self._raw):
            if f is not None:
                f.close()
        self._ascii = self._raw = None


def _ascii_lines(text: str):
    off = 0
    for line in text.splitlines(keepends=True):
        yield off, line.rstrip("\r\n")
        off += len(line.encode("utf-8"))


def _header_block(lines: List[str]) -> bytes:
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8", errors="replace")


class GeminiTransport:
    def __init__(self, endpoint: str, api_key: str, session: Optional[Any] = None, trace: Optional[TraceWriter] = None):
        self.endpoint = endpoint
        self._api_key = api_key
        # session can be injected to ease testing
        self._session = session or requests.Session()
        self.trace = trace

    @property
    def display_url(self) -> str:
        return f"{self.endpoint}?key={mask_secret(self._api_key)}"

    def post(self, body: bytes, dest: str, timeout: float = 60, retries: int = 0, retry_delay: float = 0) -> int:
        """POST ``body`` and write the response body to ``dest``; return the HTTP status.

        Connection errors, timeouts and HTTP 408/429/5xx are retried up to
        ``retries`` times with a fixed ``retry_delay``. Connection failures that
        outlive the retries raise TransportFailure with status 0.
        """
        headers = {"Content-Type": "application/json"}
        attempts = max(0, int(retries)) + 1
        attempt = 0
        while True:
            attempt += 1
            self._trace_request(headers, body)
            try:
                resp = self._session.post(
                    self.endpoint,
                    params={"key": self._api_key},
                    data=body,
                    headers=headers,
                    timeout=timeout,
                    stream=True,
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < attempts:
                    logger.info("request failed (%s); retrying in %ss (%d/%d)", type(e).__name__, retry_delay, attempt, attempts - 1)
                    time.sleep(retry_delay)
                    continue
                raise TransportFailure(0, message=f"API call failed: {type(e).__name__}") from e

            status = resp.status_code
            if status in RETRY_STATUSES and attempt < attempts:
                logger.info("HTTP %s; retrying in %ss (%d/%d)", status, retry_delay, attempt, attempts - 1)
                resp.close()
                time.sleep(retry_delay)
                continue
            try:
                self._save(resp, dest)
            except requests.RequestException as e:
                raise TransportFailure(status, message=f"reading the response body failed: {e}") from e
            except OSError as e:
                raise LocalFileError(f"cannot save the response to {dest}: {e}") from e
            finally:
                resp.close()
            return status

    def _save(self, resp: Any, dest: str) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(dest)), exist_ok=True)
        if self.trace is not None and self.trace.enabled:
            lines = [f"HTTP {resp.status_code}"] + [f"{k}: {v}" for k, v in resp.headers.items()]
            self.trace.dump("<= Recv header", _header_block(lines))
        with open(dest, "wb") as f:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                if self.trace is not None and self.trace.enabled:
                    self.trace.dump("<= Recv data", chunk)

    def _trace_request(self, headers: dict, body: bytes) -> None:
        if self.trace is None or not self.trace.enabled:
            return
        self.trace.info(f"POST {self.display_url}")
        lines = [f"POST {self.display_url} HTTP/1.1"] + [f"{k}: {v}" for k, v in headers.items()]
        lines.append(f"Content-Length: {len(body)}")
        self.trace.dump("=> Send header", _header_block(lines))
        self.trace.dump("=> Send data", body)
