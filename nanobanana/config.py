from dataclasses import dataclass
from typing import Optional
import logging
import os
import sys

from dotenv import load_dotenv, find_dotenv

DEFAULT_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"
GENERATE_CONTENT_API = "streamGenerateContent"

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    api_key: Optional[str]
    model: str
    api_base: str
    timeout: int
    retry: int
    retry_delay: int
    base_dir: str
    scan_extract: bool = False

    @property
    def endpoint(self) -> str:
        return f"{self.api_base.rstrip('/')}/v1beta/models/{self.model}:{GENERATE_CONTENT_API}"


def program_dir() -> str:
    """Directory the program runs from; relative output names are anchored here."""
    home = os.environ.get("NANOBANANA_HOME")
    if home:
        return os.path.abspath(home)
    return os.path.dirname(os.path.abspath(sys.argv[0] or "."))


def _find_env_upwards(start: str) -> Optional[str]:
    p = os.path.abspath(start)
    while True:
        cand = os.path.join(p, ".env")
        if os.path.exists(cand):
            return cand
        parent = os.path.dirname(p)
        if parent == p:
            return None
        p = parent


def load_config() -> Settings:
    # find_dotenv() walks up from the calling module; also try cwd and the program dir
    _env = find_dotenv() or _find_env_upwards(os.getcwd()) or _find_env_upwards(program_dir())
    load_dotenv(_env or ".env")

    def _int_env(name: str, default: int) -> int:
        v = os.environ.get(name)
        if not v:
            return default
        try:
            return int(v)
        except ValueError:
            logger.warning("invalid %s=%r, using default %s", name, v, default)
            return default

    return Settings(
        api_key=os.environ.get("GEMINI_API_KEY") or None,
        model=os.environ.get("GEMINI_MODEL") or DEFAULT_MODEL,
        api_base=os.environ.get("GEMINI_API_BASE") or DEFAULT_API_BASE,
        timeout=_int_env("NANOBANANA_TIMEOUT", 60),
        retry=_int_env("NANOBANANA_RETRY", 2),
        retry_delay=_int_env("NANOBANANA_RETRY_DELAY", 1),
        base_dir=program_dir(),
        scan_extract=str(os.environ.get("NANOBANANA_SCAN_EXTRACT", "")).lower() in ("1", "true", "yes"),
    )


def mask_secret(secret: Optional[str]) -> str:
    """Mask all but the first and last 4 characters; short secrets are fully hidden."""
    s = secret or ""
    if len(s) <= 8:
        return "****"
    return s[:4] + "*" * (len(s) - 8) + s[-4:]
