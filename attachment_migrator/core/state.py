"""
Run summary for the clinical attachment migrator.

Collects the outcome of every reconciled attachment during a run so the
result can be logged, written to a report, and inspected by callers without
parsing log text.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from attachment_migrator.types import ReconcileOutcome, ReconcileResult


@dataclass
class RunSummary:
    """Everything a migration run produced.

    - ``total_records``: rows returned by the metadata fetch
    - ``batch_sizes``: size of each sequential batch stage, in order
    - ``results``: one ReconcileResult per record, batch by batch
    """

    total_records: int = 0
    batch_sizes: list[int] = field(default_factory=list)
    results: list[ReconcileResult] = field(default_factory=list)
    dry_run: bool = False
    duration: float = 0.0

    def __post_init__(self) -> None:
        if self.total_records < 0:
            raise ValueError(
                f"total_records must be non-negative, got {self.total_records}"
            )

    def record_batch(self, results: list[ReconcileResult]) -> None:
        """Append the settled results of one batch stage."""
        self.batch_sizes.append(len(results))
        self.results.extend(results)

    @property
    def counts(self) -> dict[ReconcileOutcome, int]:
        """Number of records per outcome, with every outcome present."""
        tally = Counter(result.outcome for result in self.results)
        return {outcome: tally.get(outcome, 0) for outcome in ReconcileOutcome}

    @property
    def needs_attention(self) -> list[ReconcileResult]:
        """Records that were neither present nor migrated."""
        return [
            result
            for result in self.results
            if result.outcome in (ReconcileOutcome.NOT_FOUND, ReconcileOutcome.ERROR)
        ]

    @property
    def has_errors(self) -> bool:
        return self.counts[ReconcileOutcome.ERROR] > 0

    @property
    def processed(self) -> int:
        return len(self.results)
