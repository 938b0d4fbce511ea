"""Public API for nanobanana.

Expose the pieces of the request → extract → save pipeline used by the CLI and tests.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("nanobanana")
except PackageNotFoundError:
    __version__ = "0.0.0"

from .config import Settings, load_config, mask_secret
from .errors import (
    CredentialMissing,
    DecodeFailure,
    EmptyResponse,
    ExtractionEmpty,
    InputFileMissing,
    MaterializationFailure,
    NanobananaError,
    NoImageData,
    ResponsePathConflict,
    TransportFailure,
)
from .extractors import InlineImagePair, LineScanExtractor, StrictExtractor, has_inline_data, select_extractor
from .materialize import save_all, write_image
from .naming import OutputTarget, plan_output_targets, resolve_extension, resolve_program_path
from .request_body import ReferenceImage, RequestSpec, build_request_body, load_reference_image
from .services.acquisition import AcquisitionResult, AcquisitionState, ResponseAcquirer

__all__ = [
    "Settings",
    "load_config",
    "mask_secret",
    "CredentialMissing",
    "DecodeFailure",
    "EmptyResponse",
    "ExtractionEmpty",
    "InputFileMissing",
    "MaterializationFailure",
    "NanobananaError",
    "NoImageData",
    "ResponsePathConflict",
    "TransportFailure",
    "InlineImagePair",
    "LineScanExtractor",
    "StrictExtractor",
    "has_inline_data",
    "select_extractor",
    "save_all",
    "write_image",
    "OutputTarget",
    "plan_output_targets",
    "resolve_extension",
    "resolve_program_path",
    "ReferenceImage",
    "RequestSpec",
    "build_request_body",
    "load_reference_image",
    "AcquisitionResult",
    "AcquisitionState",
    "ResponseAcquirer",
    "__version__",
]
