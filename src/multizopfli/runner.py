"""Run driver: enumerate, record, queue, report.

Order of a run:
    enumeration -> ledger pre-sizes -> pre-run total -> queue release
    -> concurrent compression -> drain barrier -> final total

Ledger writes happen only here, on the calling thread, as outcomes come
back from the queue.
"""

import logging
import os
from collections.abc import Callable, Iterable

from multizopfli.compressor import TEMP_SUFFIX, Compressor
from multizopfli.ledger import SizeLedger
from multizopfli.models import OutputMode, RunOptions, RunSummary
from multizopfli.reporter import Reporter
from multizopfli.sources import iter_png_files
from multizopfli.work_queue import BoundedWorkQueue


logger = logging.getLogger(__name__)


class OptimizeRun:
    """One batch optimization over a set of PNG paths.

    Args:
        options: Resolved run configuration
        compress: Callable (path, before_size) -> after_size. Defaults to a
            Compressor built from options.
        reporter: Reporter for the summary lines
    """

    def __init__(
        self,
        options: RunOptions,
        compress: Callable[[str, int], int] | None = None,
        reporter: Reporter | None = None,
    ):
        self.options = options
        self.reporter = reporter or Reporter()
        self.compress = compress or Compressor(options).compress
        self.ledger = SizeLedger()
        self.queue = BoundedWorkQueue(options.concurrency)
        self.probe_failed: list[str] = []

    def admit(self, path: str):
        """Measure path, record it and enqueue its task."""
        try:
            before_size = os.stat(path).st_size
        except OSError as e:
            logger.debug(f'Cannot stat {path}: {e}')
            self.reporter.failure(path, e)
            self.probe_failed.append(path)
            return
        self.ledger.record(path, before_size)
        self.queue.enqueue(path, lambda: self.compress(path, before_size))

    def run(self, paths: Iterable[str]) -> RunSummary:
        for path in paths:
            self.admit(path)

        self.reporter.before(self.ledger)
        self.queue.start()

        for outcome in self.queue.drain():
            if outcome.succeeded:
                self.ledger.complete(outcome.path, outcome.after_size)
            else:
                logger.debug(f'Compression failed for {outcome.path}: {outcome.error}')
                self.reporter.failure(outcome.path, outcome.error)

        logger.debug(f'Peak concurrent tasks: {self.queue.running_high_water}')
        return self.reporter.final(self.ledger, self.probe_failed)


def optimize(pattern: str, options: RunOptions, **kwargs) -> RunSummary:
    """Optimize every .png file matching pattern.

    In temp mode, files named like a temp output (NAME.optimized.png) are
    skipped so a leftover from an earlier run is never both input and output.
    """
    exclude = f'{TEMP_SUFFIX}.png' if options.mode == OutputMode.TEMP else None
    return OptimizeRun(options, **kwargs).run(iter_png_files(pattern, exclude_suffix=exclude))
