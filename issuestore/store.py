"""Issue store: primary map of records plus project, IRI and OBO id indices.

Writes go to the backend first; the in-memory map and indices change only
after the backend accepted the write, in a single critical section. Writes to
the same record id are serialised by a per-id lock; writes to different ids
only share the short in-memory critical section.
"""

import logging
import threading
from typing import Iterable, List

from issuestore.backends import IssueBackend, MemoryBackend, YamlDirectoryBackend
from issuestore.config import StoreConfig
from issuestore.errors import InvalidArgumentError
from issuestore.index import IssueIndex
from issuestore.locks import KeyedLocks
from issuestore.schemas import IssueRecord, Iri, OboId, ProjectId

LOG = logging.getLogger("issuestore.store")


def _record_id(record_id: str) -> str:
    if not isinstance(record_id, str) or not record_id.strip():
        raise InvalidArgumentError(f"Issue record id must be a non-blank string, got {record_id!r}")
    return record_id.strip()


class IssueStore:
    """Durable keyed store of issue records with derived-index lookups.

    Finders return lists in no guaranteed order (currently sorted by id);
    an empty list means nothing matched.
    """

    def __init__(self, backend: IssueBackend) -> None:
        """Load every record from backend and build the indices.

        Raises:
            StorageUnavailableError: If the backend cannot be read
        """
        self._backend = backend
        self._records: dict[str, IssueRecord] = {}
        self._index = IssueIndex()
        self._state_lock = threading.RLock()
        self._id_locks = KeyedLocks()
        self.reload()
        LOG.info("Issue store ready: %d records (%s)", len(self._records), type(backend).__name__)

    # -- lifecycle -----------------------------------------------------

    def reload(self) -> None:
        """Rebuild the primary map and indices from the backend."""
        records = self._backend.load_all()
        with self._state_lock:
            self._records = {r.id: r for r in records}
            self._index.rebuild(self._records.values())

    def close(self) -> None:
        """Release the backend handle."""
        self._backend.close()
        LOG.info("Issue store closed")

    def __enter__(self) -> "IssueStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- writes --------------------------------------------------------

    def upsert(self, record: IssueRecord) -> IssueRecord:
        """Insert record, or replace the stored record with the same id.

        Stale IRI and OBO id associations of the replaced record are dropped.

        Raises:
            InvalidArgumentError: If record is not an IssueRecord, lacks id or
                project_id, or would move an existing id to another project
            StorageUnavailableError: If the backend write fails
        """
        if not isinstance(record, IssueRecord):
            raise InvalidArgumentError(f"IssueRecord expected, got {type(record).__name__}")
        record_id = _record_id(record.id)
        if not isinstance(record.project_id, ProjectId):
            raise InvalidArgumentError(f"Issue record {record_id!r} has no project id")

        with self._id_locks.hold(record_id):
            with self._state_lock:
                previous = self._records.get(record_id)
            if previous is not None and previous.project_id != record.project_id:
                raise InvalidArgumentError(
                    f"Issue record {record_id!r} belongs to project {previous.project_id}, "
                    f"cannot move it to {record.project_id}"
                )
            self._backend.save(record)
            with self._state_lock:
                if previous is not None:
                    self._index.remove(previous)
                self._index.add(record)
                self._records[record_id] = record
        LOG.debug("%s issue record %s", "Replaced" if previous is not None else "Inserted", record_id)
        return record

    def upsert_all(self, records: Iterable[IssueRecord]) -> List[IssueRecord]:
        """Upsert each record in turn; stops at the first failure."""
        return [self.upsert(r) for r in records]

    def delete_by_id(self, record_id: str) -> bool:
        """Delete one record. Returns False (not an error) if it did not exist."""
        record_id = _record_id(record_id)
        with self._id_locks.hold(record_id):
            with self._state_lock:
                existing = self._records.get(record_id)
            if existing is None:
                return False
            self._backend.delete(record_id)
            with self._state_lock:
                self._index.remove(existing)
                del self._records[record_id]
        LOG.debug("Deleted issue record %s", record_id)
        return True

    def delete(self, record: IssueRecord) -> bool:
        """Delete the stored record with record.id. Same as delete_by_id."""
        if not isinstance(record, IssueRecord):
            raise InvalidArgumentError(f"IssueRecord expected, got {type(record).__name__}")
        return self.delete_by_id(record.id)

    def delete_all_by_id(self, record_ids: Iterable[str]) -> int:
        """Delete the listed records, all or nothing. Unknown ids are ignored."""
        removed = self._delete_batch({_record_id(i) for i in record_ids})
        if removed:
            LOG.info("Deleted %d issue records by id", removed)
        return removed

    def delete_all_by_project_id(self, project_id: ProjectId | str) -> int:
        """Delete every record of the project. Returns how many were removed.

        Readers see either all of the project's records or none of them.
        Deleting a project without records is a no-op.
        """
        project_id = ProjectId.coerce(project_id)
        with self._state_lock:
            candidates = self._index.project_ids(project_id)
        removed = self._delete_batch(candidates)
        if removed:
            LOG.info("Deleted %d issue records of project %s", removed, project_id)
        return removed

    def delete_all(self, records: Iterable[IssueRecord] | None = None) -> int:
        """Delete the given records, or every record when none are given.

        Returns how many were removed. Readers never see a partial result.
        """
        if records is not None:
            records = list(records)
            if not all(isinstance(r, IssueRecord) for r in records):
                raise InvalidArgumentError("delete_all expects IssueRecord instances")
            return self.delete_all_by_id(r.id for r in records)
        with self._state_lock:
            candidates = set(self._records)
        removed = self._delete_batch(candidates)
        if removed:
            LOG.info("Deleted all %d issue records", removed)
        return removed

    def _delete_batch(self, candidates: set[str]) -> int:
        if not candidates:
            return 0
        with self._id_locks.hold_all(candidates):
            # Records may have been deleted while the id locks were awaited.
            with self._state_lock:
                doomed = [self._records[i] for i in sorted(candidates) if i in self._records]
            if not doomed:
                return 0
            self._backend.delete_many(r.id for r in doomed)
            with self._state_lock:
                for record in doomed:
                    self._index.remove(record)
                    del self._records[record.id]
        return len(doomed)

    # -- reads ---------------------------------------------------------

    def _resolve(self, record_ids: set[str]) -> List[IssueRecord]:
        # Caller holds _state_lock.
        return [self._records[i] for i in sorted(record_ids)]

    def find_by_id(self, record_id: str) -> IssueRecord | None:
        with self._state_lock:
            return self._records.get(_record_id(record_id))

    def exists_by_id(self, record_id: str) -> bool:
        return self.find_by_id(record_id) is not None

    def find_all_by_id(self, record_ids: Iterable[str]) -> List[IssueRecord]:
        """Records for the ids that exist; unknown ids are skipped."""
        wanted = {_record_id(i) for i in record_ids}
        with self._state_lock:
            return self._resolve(wanted & self._records.keys())

    def find_all(self) -> List[IssueRecord]:
        with self._state_lock:
            return self._resolve(set(self._records))

    def count(self) -> int:
        with self._state_lock:
            return len(self._records)

    def find_all_by_project_id(self, project_id: ProjectId | str) -> List[IssueRecord]:
        project_id = ProjectId.coerce(project_id)
        with self._state_lock:
            return self._resolve(self._index.project_ids(project_id))

    def find_all_by_iris(self, iri: Iri | str) -> List[IssueRecord]:
        """Records mentioning iri, across all projects."""
        iri = Iri.coerce(iri)
        with self._state_lock:
            return self._resolve(self._index.iri_ids(iri))

    def find_all_by_obo_ids(self, obo_id: OboId | str) -> List[IssueRecord]:
        """Records mentioning obo_id, across all projects."""
        obo_id = OboId.coerce(obo_id)
        with self._state_lock:
            return self._resolve(self._index.obo_id_ids(obo_id))

    def find_all_by_project_id_and_iris(self, project_id: ProjectId | str, iri: Iri | str) -> List[IssueRecord]:
        """Records of the project that mention iri."""
        project_id = ProjectId.coerce(project_id)
        iri = Iri.coerce(iri)
        with self._state_lock:
            return self._resolve(self._index.project_ids(project_id) & self._index.iri_ids(iri))

    def find_all_by_project_id_and_obo_ids(
        self, project_id: ProjectId | str, obo_id: OboId | str
    ) -> List[IssueRecord]:
        """Records of the project that mention obo_id."""
        project_id = ProjectId.coerce(project_id)
        obo_id = OboId.coerce(obo_id)
        with self._state_lock:
            return self._resolve(self._index.project_ids(project_id) & self._index.obo_id_ids(obo_id))

    def stats(self) -> dict[str, int]:
        """Record count and number of distinct projects, IRIs and OBO ids."""
        with self._state_lock:
            return {"records": len(self._records), **self._index.stats()}


def open_store(config: StoreConfig) -> IssueStore:
    """Build the backend named by config.backend and open a store over it."""
    if config.backend == "memory":
        backend: IssueBackend = MemoryBackend()
    else:
        backend = YamlDirectoryBackend(config.data_dir)
    return IssueStore(backend)
