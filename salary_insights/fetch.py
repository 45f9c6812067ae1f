"""
Read the raw salary CSV text from a local file or an HTTP(S) URL.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from .config import FETCH_TIMEOUT, SALARY_SOURCE
from .errors import DataUnavailableError

logger = logging.getLogger(__name__)


def is_url(source: str | Path) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def fetch_raw_text(source: str | Path = SALARY_SOURCE, *, timeout: int = FETCH_TIMEOUT) -> str:
    """
    Return the full text of ``source``.

    URLs are fetched with ``requests``; anything else is treated as a local
    path.  Network and filesystem failures are reported as
    :class:`DataUnavailableError`.  No retries are attempted.
    """
    if is_url(source):
        logger.info("Fetching salary data from %s", source)
        try:
            response = requests.get(str(source), timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DataUnavailableError(f"Could not fetch {source}: {exc}") from exc
        # Decode the bytes ourselves: requests assumes ISO-8859-1 for text/csv
        # responses that carry no charset.
        try:
            return response.content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise DataUnavailableError(f"Could not decode {source}: {exc}") from exc

    path = Path(source).expanduser()
    logger.info("Reading salary data from %s", path)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise DataUnavailableError(f"Could not read {path}: {exc}") from exc
