"""Error taxonomy for a single nanobanana run.

Every failure is fatal: ``cli.main`` logs the message and exits with the
class ``exit_code``.
"""
from typing import Optional


class NanobananaError(RuntimeError):
    exit_code = 1


class CredentialMissing(NanobananaError):
    pass


class InputFileMissing(NanobananaError):
    def __init__(self, path: str):
        super().__init__(f"image file not found: {path}")
        self.path = path


class TransportFailure(NanobananaError):
    def __init__(self, status: int, body_prefix: bytes = b"", message: Optional[str] = None):
        super().__init__(message or f"API call failed (HTTP {status})")
        self.status = status
        self.body_prefix = body_prefix


class EmptyResponse(NanobananaError):
    def __init__(self, path: str, fallback: bool = False):
        if fallback:
            msg = f"image-only retry returned an empty response ({path})"
        else:
            msg = f"response is empty ({path})"
        super().__init__(msg)
        self.path = path
        self.fallback = fallback


class NoImageData(NanobananaError):
    pass


class ExtractionEmpty(NanobananaError):
    exit_code = 2


class DecodeFailure(NanobananaError):
    exit_code = 3


class MaterializationFailure(NanobananaError):
    exit_code = 3


class ResponsePathConflict(NanobananaError):
    pass


class LocalFileError(NanobananaError):
    pass
