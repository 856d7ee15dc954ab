"""Shared type definitions for the clinical attachment migrator.

Provides TypedDicts for the Supabase rows the job reads and the dataclasses
describing the outcome of reconciling each attachment.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypedDict

# ---------------------------------------------------------------------------
# Supabase row shapes
# ---------------------------------------------------------------------------


class AttachmentRecord(TypedDict, total=False):
    """A row from the clinical attachments table.

    Only ``fileKey`` is used; any other columns are passed through untouched.
    """

    id: str
    fileKey: str


class StorageObjectRecord(TypedDict, total=False):
    """A row from ``storage.objects`` in the production project."""

    id: str
    bucket_id: str
    name: str


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedKey:
    """Both views of an attachment's storage path.

    ``with_separator`` always has exactly one leading ``/``;
    ``without_separator`` never has one. The storage index stores names in
    the latter form.
    """

    with_separator: str
    without_separator: str


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


class ReconcileOutcome(str, Enum):
    """What happened to a single attachment during a run."""

    ALREADY_PRESENT = "already_present"
    MIGRATED = "migrated"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ReconcileResult:
    """The outcome of reconciling one attachment record."""

    file_key: str
    outcome: ReconcileOutcome
    source_path: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"file_key": self.file_key, "outcome": self.outcome.value}
        if self.source_path is not None:
            data["source_path"] = self.source_path
        if self.reason is not None:
            data["reason"] = self.reason
        return data
