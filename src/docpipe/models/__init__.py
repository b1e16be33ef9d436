"""docpipe data models.

- CommandReferenceEntry: Help metadata for one exported command
- CommandParameter / CommandExample: Parts of an entry
- FrontMatter / GeneratedPage: A rendered reference page
- TaxonomyRecord: One blog author or tag
- SyncResult / SyncStatus: Outcome of a taxonomy sync
"""

from docpipe.models.reference import (
    CommandExample,
    CommandParameter,
    CommandReferenceEntry,
    FrontMatter,
    GeneratedPage,
)
from docpipe.models.taxonomy import SyncResult, SyncStatus, TaxonomyRecord

__all__ = [
    "CommandReferenceEntry",
    "CommandParameter",
    "CommandExample",
    "FrontMatter",
    "GeneratedPage",
    "TaxonomyRecord",
    "SyncResult",
    "SyncStatus",
]
