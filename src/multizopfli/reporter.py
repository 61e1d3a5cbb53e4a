"""Before/after run summaries on the diagnostic stream."""

from collections.abc import Callable
from functools import partial

import click

from multizopfli.ledger import SizeLedger
from multizopfli.models import RunSummary
from multizopfli.utils import display_size, human_readable_size, saved_percent


class Reporter:
    def __init__(self, echo: Callable[[str], None] | None = None):
        self.echo = echo or partial(click.echo, err=True)

    def before(self, ledger: SizeLedger):
        """Total size of every discovered file, emitted before any task runs."""
        self.echo(f'Total before optimized ({len(ledger)}) [{human_readable_size(ledger.total_before())}]')

    def failure(self, path: str, error: Exception):
        self.echo(f'Failed {path}: {error}')

    def summarize(self, ledger: SizeLedger, probe_failed: list[str] | None = None) -> RunSummary:
        """Compute final totals.

        Failed entries, and files that could not be measured, count toward
        total but not toward the sums.
        """
        records = ledger.snapshot()
        completed = {path: rec for path, rec in records.items() if rec.completed}
        total_before = sum(rec.before_size for rec in completed.values())
        total_after = sum(rec.after_size for rec in completed.values())
        return RunSummary(
            succeeded=len(completed),
            total=len(records) + len(probe_failed or []),
            total_before=total_before,
            total_after=total_after,
            saved_bytes=total_before - total_after,
            saved_percent=round(saved_percent(total_before, total_after), 1),
            failed=[path for path, rec in records.items() if not rec.completed],
            probe_failed=list(probe_failed or []),
        )

    def final(self, ledger: SizeLedger, probe_failed: list[str] | None = None) -> RunSummary:
        """Emit the final summary line once the queue has drained."""
        summary = self.summarize(ledger, probe_failed)
        self.echo(
            f'Total optimized ({summary.succeeded} / {summary.total}) '
            f'[{display_size(summary.total_before, summary.total_after)}]'
        )
        return summary
