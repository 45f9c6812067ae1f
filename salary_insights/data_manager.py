"""Data manager for loading the salary dataset once per session.

This module ties the fetch, loader and engine together.  The dashboard
loads the dataset once and answers every year selection from memory;
nothing is re-read or re-parsed per query.

Two entry points are provided:

* :func:`load_engine` - a memoized one-shot load for scripts and the CLI.
* :class:`DatasetSession` - a thread-safe owner of one engine for a
  long-lived host such as the Shiny app.  When reloads overlap, only the
  most recently requested one is applied.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache
from pathlib import Path
from typing import Optional

from . import loader
from .config import DEFAULT_SEP, SALARY_SOURCE
from .engine import SalaryEngine
from .errors import DataUnavailableError
from .fetch import fetch_raw_text

logger = logging.getLogger(__name__)


def build_engine(source: str | Path = SALARY_SOURCE, sep: str = DEFAULT_SEP) -> SalaryEngine:
    """Fetch, parse and load ``source`` into a fresh engine."""
    raw_text = fetch_raw_text(source)
    result = loader.load(raw_text, sep=sep)
    engine = SalaryEngine()
    engine.initialize(result)
    return engine


@lru_cache(maxsize=1)
def _cached_engine(source: str, sep: str) -> SalaryEngine:
    """Runs the fetch and parse once per (source, sep)."""
    return build_engine(source, sep)


def load_engine(
    source: str | Path = SALARY_SOURCE,
    *,
    sep: str = DEFAULT_SEP,
    force_reload: bool = False,
) -> SalaryEngine:
    """
    Return an engine loaded from ``source``, reusing the last one if possible.

    Parameters
    ----------
    source : str or Path, optional
        Path or URL of the salary CSV.  Defaults to ``config.SALARY_SOURCE``.
    sep : str, optional
        Column delimiter.
    force_reload : bool, optional
        If ``True``, discard the memoized engine and read the source again.

    Returns
    -------
    SalaryEngine
        An initialized engine.

    Raises
    ------
    DataUnavailableError
        If the source cannot be read or holds no data rows.  Failures are
        not cached, so the next call tries again.
    """
    if force_reload:
        _cached_engine.cache_clear()
    logger.info("Loading salary engine for %s", source)
    return _cached_engine(str(source), sep)


class DatasetSession:
    """Owns the engine for one dashboard process.

    ``reload`` draws a ticket before it starts reading.  When the read
    finishes, the new records are applied only if no later ``reload`` has
    drawn a ticket in the meantime; ``initialize`` itself runs under a lock
    so two loads never write the engine at once.
    """

    def __init__(self, source: str | Path = SALARY_SOURCE, sep: str = DEFAULT_SEP) -> None:
        self.source = source
        self.sep = sep
        self.engine = SalaryEngine()
        self.error: Optional[DataUnavailableError] = None
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def available(self) -> bool:
        return self.engine.is_initialized and self.error is None

    def _next_ticket(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def reload(self, source: str | Path | None = None) -> bool:
        """Read ``source`` (default: the session source) into the engine.

        Returns ``True`` when this load was applied and ``False`` when a newer
        reload superseded it.  A failed load that is still the newest one is
        recorded in :attr:`error`, and the previous records are dropped so the
        host shows "data unavailable" instead of stale numbers.
        """
        source = self.source if source is None else source
        ticket = self._next_ticket()
        try:
            raw_text = fetch_raw_text(source)
            result = loader.load(raw_text, sep=self.sep)
        except DataUnavailableError as exc:
            with self._lock:
                if ticket != self._generation:
                    logger.info("Discarding failed load #%d; superseded", ticket)
                    return False
                logger.warning("Salary data unavailable: %s", exc)
                self.error = exc
                self.engine = SalaryEngine()
            return True

        with self._lock:
            if ticket != self._generation:
                logger.info(
                    "Discarding load #%d of %s; load #%d is newer",
                    ticket,
                    source,
                    self._generation,
                )
                return False
            self.engine.initialize(result)
            self.source = source
            self.error = None
        return True


@lru_cache(maxsize=1)
def shared_session() -> DatasetSession:
    """Process-wide session, loaded on first use.

    Shiny Express re-runs ``app.py`` for every browser session; keeping the
    session here means the CSV is read once per process, not per visitor.
    """
    session = DatasetSession()
    session.reload()
    return session
