"""Multi-index persistence for issue records attached to ontology entities."""

from issuestore.errors import ConfigError, InvalidArgumentError, IssueStoreError, StorageUnavailableError
from issuestore.schemas import IssuePayload, IssueRecord, Iri, OboId, ProjectId
from issuestore.store import IssueStore, open_store

__all__ = [
    "ConfigError",
    "InvalidArgumentError",
    "IssuePayload",
    "IssueRecord",
    "IssueStore",
    "IssueStoreError",
    "Iri",
    "OboId",
    "ProjectId",
    "StorageUnavailableError",
    "open_store",
]
