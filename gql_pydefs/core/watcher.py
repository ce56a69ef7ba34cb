"""Watch mode: re-run generation when schema files change.

The dispatcher feeds change notifications into a single-slot queue. Passes
never overlap; changes arriving while a pass runs collapse into one follow-up
pass.
"""

import asyncio
import glob
import os
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from logging import Logger
from typing import Protocol

from watchfiles import awatch

from .loader import expand_patterns
from ..logging import get_logger


class ChangeSource(Protocol):
    """Delivers the paths of changed files below a set of directories."""

    def changes(self, roots: Sequence[str]) -> AsyncIterator[str]:
        ...


class WatchfilesChangeSource:
    """Change source backed by ``watchfiles.awatch``."""

    def __init__(self, debounce: int = 50):
        self.debounce = debounce

    async def changes(self, roots: Sequence[str]) -> AsyncIterator[str]:
        async for batch in awatch(*roots, debounce=self.debounce):
            for _change, path in sorted(batch, key=lambda item: item[1]):
                yield path


def watch_roots(patterns: Sequence[str]) -> list[str]:
    """Return the existing directories that contain every pattern's matches."""
    roots = []
    for pattern in patterns:
        pattern = os.path.expanduser(pattern)
        prefix = []
        for part in pattern.split(os.sep):
            if glob.has_magic(part):
                break
            prefix.append(part)
        root = os.sep.join(prefix) or "."
        if root == pattern:
            root = os.path.dirname(root) or "."
        # Fall back to the closest existing ancestor
        root = os.path.abspath(root)
        while not os.path.isdir(root) and os.path.dirname(root) != root:
            root = os.path.dirname(root)
        if root not in roots:
            roots.append(root)
    return roots


class WatchDispatcher:
    """Runs a generation pass for each relevant schema file change."""

    def __init__(
        self,
        run_pass: Callable[[], Awaitable[None]],
        patterns: Sequence[str],
        output_path: str,
        source: ChangeSource | None = None,
        on_change: Callable[[str], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        logger: Logger | None = None,
    ):
        self.run_pass = run_pass
        self.patterns = list(patterns)
        self.output_path = os.path.abspath(output_path)
        self.source = source or WatchfilesChangeSource()
        self.on_change = on_change
        self.logger = logger or get_logger("watcher")
        self.on_error = on_error or self._log_error
        self.passes = 0
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)

    def _log_error(self, error: Exception):
        self.logger.error("Generation failed: %s", error, exc_info=error)

    def is_source_file(self, path: str) -> bool:
        """True if ``path`` is a schema file matched by the patterns."""
        path = os.path.abspath(path)
        if path == self.output_path:
            return False
        return path in expand_patterns(self.patterns)

    def notify(self, path: str):
        """Queue a pass for ``path``, replacing a pass that has not started."""
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(path)

    async def run(self):
        """Watch until the change source is exhausted (never, for the default)."""
        worker = asyncio.create_task(self._worker())
        try:
            async for path in self.source.changes(watch_roots(self.patterns)):
                if not await asyncio.to_thread(self.is_source_file, path):
                    continue
                if self.on_change:
                    self.on_change(path)
                self.notify(path)
            await self._queue.put(None)
            await worker
        finally:
            if not worker.done():
                worker.cancel()
                await asyncio.gather(worker, return_exceptions=True)

    async def _worker(self):
        while True:
            path = await self._queue.get()
            if path is None:
                return
            self.passes += 1
            try:
                await self.run_pass()
            except Exception as e:
                self.on_error(e)
