"""Blog taxonomy entities.

- TaxonomyRecord: One author or tag keyed by its name in the source file
- SyncStatus / SyncResult: Outcome of synchronizing one source file
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


@dataclass
class TaxonomyRecord:
    """One record of a key -> record taxonomy file.

    Attributes:
        key: Mapping key in the source file, unique within it
        fields: Record fields in source order
    """

    key: str
    fields: dict[str, Any] = field(default_factory=dict)

    def normalized(self) -> dict[str, Any]:
        """Return the record with ``handle`` guaranteed.

        A missing handle defaults to the record key and is placed first;
        an explicit handle is kept where the source put it.
        """
        if "handle" in self.fields:
            return dict(self.fields)
        return {"handle": self.key, **self.fields}


class SyncStatus(Enum):
    """Outcome of synchronizing one taxonomy source."""

    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Result of synchronizing one taxonomy source.

    Attributes:
        source: Source file
        output: Output file (written or intended)
        status: Outcome
        record_count: Records written, header excluded
        error: Reason for a skip or failure
    """

    source: Path
    output: Path
    status: SyncStatus
    record_count: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": str(self.source),
            "output": str(self.output),
            "status": self.status.value,
            "record_count": self.record_count,
            "error": self.error,
        }
