"""Blog taxonomy synchronization.

The blog keeps its authors and tags in hand-edited YAML files keyed by name.
The content editor reads them as JSON lists of records instead, so each
source is converted on every run:

    blog/authors.yml  (name -> record)  =>  blog/authors.json  ([record, ...])

Every record gets a ``handle`` (defaulting to its key) and the output starts
with a marker record saying the file is generated. The editor tolerates that
leading record; it is part of the output contract.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from docpipe.errors import MalformedSourceError, MissingSourceError
from docpipe.models.taxonomy import SyncResult, SyncStatus, TaxonomyRecord

logger = logging.getLogger(__name__)

HEADER_FIELD = "_comment"


def output_path_for(source: Path, suffix: str = ".json") -> Path:
    """Return the output file written alongside a source file."""
    return source.with_suffix(suffix)


def header_record(source: Path) -> dict[str, str]:
    """Build the synthetic marker record placed first in every output."""
    return {
        HEADER_FIELD: (
            f"This file is generated from {source.name}. "
            f"Do not edit it directly; edit {source.name} instead."
        )
    }


def load_records(source: Path) -> list[TaxonomyRecord]:
    """Read a key -> record YAML file, keeping key order.

    Raises:
        MissingSourceError: If the file does not exist
        MalformedSourceError: If the YAML is invalid or not key -> mapping
    """
    if not source.exists():
        raise MissingSourceError(source)

    try:
        data = yaml.safe_load(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise MalformedSourceError(source, str(e)) from e

    if data is None:
        return []
    if not isinstance(data, dict):
        raise MalformedSourceError(source, "top level must be a mapping of key -> record")

    records: list[TaxonomyRecord] = []
    for key, fields in data.items():
        if fields is None:
            fields = {}
        if not isinstance(fields, dict):
            raise MalformedSourceError(source, f"record '{key}' is not a mapping")
        records.append(TaxonomyRecord(key=str(key), fields=fields))
    return records


def serialize(records: Iterable[TaxonomyRecord], source: Path) -> str:
    """Serialize header + normalized records as a JSON list."""
    payload: list[dict[str, Any]] = [header_record(source)]
    payload.extend(record.normalized() for record in records)
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n"


class TaxonomySynchronizer:
    """Converts taxonomy YAML files into JSON record lists.

    Each source is handled independently: a missing file is skipped with a
    warning and a malformed file fails on its own without stopping the rest.
    """

    def __init__(self, output_suffix: str = ".json") -> None:
        self.output_suffix = output_suffix

    def sync_file(self, source: Path) -> SyncResult:
        """Synchronize one source file."""
        output = output_path_for(source, self.output_suffix)

        try:
            records = load_records(source)
        except MissingSourceError as e:
            logger.warning("Skipping taxonomy sync: %s", e)
            return SyncResult(source, output, SyncStatus.SKIPPED, error=str(e))
        except MalformedSourceError as e:
            logger.error("Taxonomy sync failed: %s", e)
            return SyncResult(source, output, SyncStatus.FAILED, error=e.reason)

        output.write_text(serialize(records, source), encoding="utf-8", newline="\n")
        logger.info("Synced %d record(s) from %s to %s", len(records), source.name, output.name)
        return SyncResult(source, output, SyncStatus.WRITTEN, record_count=len(records))

    def sync(self, sources: Iterable[Path], strict: bool = False) -> list[SyncResult]:
        """Synchronize every source, one output per input.

        Args:
            sources: Source files, processed in order
            strict: Raise after all sources ran if any of them failed

        Returns:
            One result per source

        Raises:
            MalformedSourceError: In strict mode, for the first failed source
        """
        results = [self.sync_file(Path(source)) for source in sources]

        if strict:
            for result in results:
                if result.status == SyncStatus.FAILED:
                    raise MalformedSourceError(result.source, result.error or "sync failed")

        return results
