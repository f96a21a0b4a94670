"""In-process backend, for tests and throwaway stores."""

from typing import Iterable, List

from issuestore.backends.base import IssueBackend
from issuestore.errors import StorageUnavailableError
from issuestore.schemas import IssueRecord


class MemoryBackend(IssueBackend):
    """Keeps records in a dict. Nothing survives the process.

    Set ``available = False`` to make every call fail with
    StorageUnavailableError.
    """

    def __init__(self, records: Iterable[IssueRecord] = ()) -> None:
        self._records: dict[str, IssueRecord] = {r.id: r for r in records}
        self.available = True
        self.closed = False

    def _check(self) -> None:
        if not self.available or self.closed:
            raise StorageUnavailableError("memory backend is unavailable")

    def load_all(self) -> List[IssueRecord]:
        self._check()
        return list(self._records.values())

    def save(self, record: IssueRecord) -> None:
        self._check()
        self._records[record.id] = record

    def delete(self, record_id: str) -> None:
        self._check()
        self._records.pop(record_id, None)

    def delete_many(self, record_ids: Iterable[str]) -> None:
        self._check()
        for record_id in list(record_ids):
            self._records.pop(record_id, None)

    def close(self) -> None:
        self.closed = True
