"""
nanobanana

Send a text prompt (optionally with a reference image) to a Gemini image
model and save the images embedded in the response.

Flow:
- read GEMINI_API_KEY (.env / environment, or hidden prompt);
- ask for the description text and an optional reference image path;
- POST to streamGenerateContent and save the raw response (output.txt);
- if the response has no inlineData, retry once asking for images only
  (output_image_only.txt);
- extract every (mimeType, data) pair and decode each one to a file:
  one image → <name>.<ext>, several → <name>_001.<ext>, <name>_002.<ext>...

Relative output paths are anchored at the program directory
(NANOBANANA_HOME overrides it), not the working directory.
"""

import argparse
import getpass
import logging
import sys
from typing import Optional, Sequence

from .config import Settings, load_config, mask_secret
from .errors import CredentialMissing, ExtractionEmpty, NanobananaError, TransportFailure
from .extractors import select_extractor
from .logging_setup import LEVELS, LogConfig, setup_logging
from .materialize import save_all
from .naming import default_output_name, resolve_program_path
from .request_body import RequestSpec, load_reference_image
from .services.acquisition import FALLBACK_RESPONSE_NAME, ResponseAcquirer
from .transport import GeminiTransport, TraceWriter

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_NAME = "output.txt"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nanobanana",
        description="Generate images with a Gemini image model and save the inline images from the response.",
    )
    parser.add_argument(
        "--out",
        dest="out",
        help=(
            "Output image file name. Relative names are saved next to the program. "
            "The extension always follows the returned mime type. Default: output.<ext>."
        ),
    )
    parser.add_argument(
        "--no-prompt-out",
        dest="no_prompt_out",
        action="store_true",
        help="Without --out, skip the output name question and always use output.<ext>.",
    )
    parser.add_argument(
        "--save-response",
        dest="save_response",
        help="Where to save the raw response (default: output.txt next to the program).",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=int,
        help=(
            "Seconds allowed for connecting and for each read of an API call (default: 60). "
            "Unlike curl --max-time this does not cap the total time of a slow streamed body."
        ),
    )
    parser.add_argument("--retry", dest="retry", type=int, help="Retries for the first API call (default: 2).")
    parser.add_argument("--retry-delay", dest="retry_delay", type=int, help="Seconds between retries (default: 1).")
    parser.add_argument("-m", "--model", dest="model", help="Override GEMINI_MODEL.")
    parser.add_argument(
        "--scan-extract",
        dest="scan_extract",
        action="store_true",
        help="Extract with the line scanner instead of parsing JSON (saves only the last image).",
    )
    parser.add_argument("--log-level", dest="log_level", choices=sorted(LEVELS), default="info")
    parser.add_argument("--log-json", dest="log_json", action="store_true", help="Log one JSON object per line.")
    parser.add_argument("--log-file", dest="log_file", help="Also append logs to this file.")
    parser.add_argument(
        "--log-rotate-size",
        dest="log_rotate_size",
        type=int,
        default=0,
        help="Rotate the log file once it exceeds this many bytes (0 disables).",
    )
    parser.add_argument(
        "--log-rotate-keep",
        dest="log_rotate_keep",
        type=int,
        default=3,
        help="Rotated log files to keep (default: 3).",
    )
    parser.add_argument("--trace-ascii", dest="trace_ascii", help="Write a text trace of the HTTP exchange here.")
    parser.add_argument("--trace", dest="trace_raw", help="Write a hex trace of the HTTP exchange here.")
    parser.add_argument(
        "--trace-time",
        dest="trace_time",
        action="store_true",
        help="Timestamp trace lines (always on with --log-level debug).",
    )
    parser.add_argument(
        "--show-api-key-full",
        dest="show_api_key_full",
        action="store_true",
        help="Log GEMINI_API_KEY unmasked.",
    )
    return parser.parse_args(argv)


def _ask(prompt: str) -> str:
    try:
        return input(prompt).strip()
    except EOFError:
        return ""


def apply_overrides(cfg: Settings, args: argparse.Namespace) -> Settings:
    if args.timeout is not None:
        cfg.timeout = args.timeout
    if args.retry is not None:
        cfg.retry = args.retry
    if args.retry_delay is not None:
        cfg.retry_delay = args.retry_delay
    if args.model:
        cfg.model = args.model
    if args.scan_extract:
        cfg.scan_extract = True
    return cfg


def obtain_api_key(cfg: Settings) -> str:
    key = cfg.api_key
    if not key:
        key = getpass.getpass("GEMINI_API_KEY: ").strip()
    if not key:
        raise CredentialMissing("GEMINI_API_KEY is not set")
    cfg.api_key = key
    return key


def read_request_spec() -> RequestSpec:
    print()
    text = _ask("Image description: ")
    image_path = _ask("Reference image path (optional, blank for none): ")
    reference = load_reference_image(image_path) if image_path else None
    if reference is not None:
        logger.info("reference image: %s (%s, %d bytes)", image_path, reference.mime_type, len(reference.data))
    return RequestSpec(prompt_text=text, reference_image=reference)


def choose_output_name(args: argparse.Namespace, first_mime: str) -> str:
    if args.out:
        return args.out
    default = default_output_name(first_mime)
    if args.no_prompt_out:
        return default
    return _ask(f"Output image file name (optional, blank for {default}): ") or default


def run(args: argparse.Namespace, cfg: Settings) -> int:
    key = obtain_api_key(cfg)
    if args.show_api_key_full:
        logger.info("GEMINI_API_KEY=%s", key)
    else:
        logger.info("GEMINI_API_KEY=%s (masked)", mask_secret(key))
    logger.debug("model=%s endpoint=%s", cfg.model, cfg.endpoint)

    spec = read_request_spec()

    response_path = resolve_program_path(args.save_response or DEFAULT_RESPONSE_NAME, cfg.base_dir)
    fallback_path = resolve_program_path(FALLBACK_RESPONSE_NAME, cfg.base_dir)
    trace = TraceWriter(
        ascii_path=args.trace_ascii,
        raw_path=args.trace_raw,
        timestamps=args.trace_time or args.log_level == "debug",
    )
    try:
        transport = GeminiTransport(cfg.endpoint, key, trace=trace)
        acquirer = ResponseAcquirer(
            transport,
            response_path,
            fallback_path,
            timeout=cfg.timeout,
            retries=cfg.retry,
            retry_delay=cfg.retry_delay,
        )
        result = acquirer.acquire(spec)
    finally:
        trace.close()

    extractor = select_extractor(strict=not cfg.scan_extract)
    pairs = extractor.extract(result.document)
    if not pairs:
        raise ExtractionEmpty(f"failed to extract inlineData from {result.path}")
    logger.info("extracted %d image(s) with the %s extractor", len(pairs), extractor.name)

    requested = choose_output_name(args, pairs[0].mime_type)
    for path, pair in zip(save_all(pairs, requested, cfg.base_dir), pairs):
        print(f"Saved image: {path} (mimeType: {pair.mime_type})")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(
        LogConfig(
            level=args.log_level,
            json=args.log_json,
            file=args.log_file,
            rotate_size=args.log_rotate_size,
            rotate_keep=args.log_rotate_keep,
        )
    )
    cfg = apply_overrides(load_config(), args)
    try:
        run(args, cfg)
    except NanobananaError as e:
        logger.error(str(e))
        if isinstance(e, TransportFailure) and e.body_prefix:
            print(f"--- response (first {len(e.body_prefix)} bytes) ---", file=sys.stderr)
            print(e.body_prefix.decode("utf-8", errors="replace"), file=sys.stderr)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
