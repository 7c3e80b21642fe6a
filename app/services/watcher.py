from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from services.storage import is_watched_document

logger = logging.getLogger(__name__)

_Signature = tuple[int, int]


class DocumentWatcher:
    """
    Polls a documents directory for added or modified ``*.html`` files.

    A change only counts once the file's size and mtime stayed the same for
    ``settle_window`` seconds (editors write in several steps). Settled
    changes are debounced per file: ``on_change`` runs ``debounce`` seconds
    after the last settled change of that file.
    """

    def __init__(
        self,
        directory: Path,
        on_change: Callable[[Path], None],
        *,
        poll_interval: float = 0.5,
        settle_window: float = 0.5,
        debounce: float = 0.5,
        ignore_initial: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.directory = Path(directory)
        self._on_change = on_change
        self._poll_interval = poll_interval
        self._settle_window = settle_window
        self._debounce = debounce
        self._ignore_initial = ignore_initial
        self._clock = clock

        self._known: dict[Path, _Signature] = {}
        self._settling: dict[Path, tuple[_Signature, float]] = {}
        self._due: dict[Path, float] = {}
        self._primed = False
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def snapshot(self) -> dict[Path, _Signature]:
        if not self.directory.is_dir():
            return {}
        current: dict[Path, _Signature] = {}
        for entry in self.directory.iterdir():
            if not is_watched_document(entry.name):
                continue
            try:
                stat = entry.stat()
            except FileNotFoundError:
                continue
            if not entry.is_file():
                continue
            current[entry] = (stat.st_mtime_ns, stat.st_size)
        return current

    def prime(self) -> list[Path]:
        """Record the current files; returns them sorted."""
        current = self.snapshot()
        if self._ignore_initial:
            self._known = dict(current)
        self._primed = True
        return sorted(current)

    def poll(self, now: float | None = None) -> list[Path]:
        """One scan. Returns the files whose debounce window has elapsed."""
        if not self._primed:
            self.prime()
        now = self._clock() if now is None else now
        current = self.snapshot()

        for path, signature in current.items():
            if self._known.get(path) == signature:
                self._settling.pop(path, None)
                continue
            pending = self._settling.get(path)
            if pending is None or pending[0] != signature:
                self._settling[path] = (signature, now)
                self._due.pop(path, None)
            elif now - pending[1] >= self._settle_window:
                del self._settling[path]
                is_new = path not in self._known
                self._known[path] = signature
                self._due[path] = now + self._debounce
                logger.info("watch.%s file=%s", "add" if is_new else "change", path.name)

        for tracked in (self._known, self._settling, self._due):
            for path in [p for p in tracked if p not in current]:
                del tracked[path]

        fired = sorted(path for path, due in self._due.items() if due <= now)
        for path in fired:
            del self._due[path]
        return fired

    def _run(self) -> None:
        while not self._stop.wait(self._poll_interval):
            try:
                fired = self.poll()
            except OSError:
                logger.exception("watch.poll_failed dir=%s", self.directory)
                continue
            for path in fired:
                try:
                    self._on_change(path)
                except Exception:
                    logger.exception("watch.handler_failed file=%s", path.name)

    def start(self) -> None:
        if self._thread is not None:
            return
        files = self.prime()
        logger.info("watch.ready dir=%s files=%s", self.directory, len(files))
        for path in files:
            logger.info("watch.file %s", path.name)
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="document-watcher", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("watch.stopped dir=%s", self.directory)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
