from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .interpreter import BatchResult, check_script

logger = logging.getLogger(__name__)

CHECKUP_INTERVAL_MS = 1000

ResultCallback = Callable[[Optional[BatchResult]], None]


class BackgroundChecker:
    """Validates editor text on a worker thread, one check at a time.

    ``submit`` is meant to be polled: it ignores text that was already
    checked and returns False while a previous check is still running, so the
    text is simply picked up again on the next poll. The callback receives
    None for blank text and runs on the worker thread.
    """

    def __init__(self, on_result: ResultCallback) -> None:
        self._on_result = on_result
        self._lock = threading.Lock()
        self._last_hash: Optional[int] = None
        self._worker: Optional[threading.Thread] = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def submit(self, text: str) -> bool:
        text_hash = hash(text)
        if text_hash == self._last_hash:
            return False
        if not self._lock.acquire(blocking=False):
            return False
        self._last_hash = text_hash
        worker = threading.Thread(target=self._run, args=(text,), daemon=True)
        self._worker = worker
        worker.start()
        return True

    def forget(self) -> None:
        """Make the next ``submit`` check its text even if it did not change."""
        self._last_hash = None

    def join(self, timeout: Optional[float] = None) -> None:
        worker = self._worker
        if worker is not None and worker.is_alive():
            worker.join(timeout=timeout)

    def _run(self, text: str) -> None:
        try:
            result = check_script(text) if text.strip() else None
            self._on_result(result)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Background check crashed")
        finally:
            self._lock.release()
