"""Abstract base class for issue record storage backends."""

from abc import ABC, abstractmethod
from typing import Iterable, List

from issuestore.schemas import IssueRecord


class IssueBackend(ABC):
    """Durable medium behind the issue store (YAML directory, memory, ...).

    Backends only persist records; indexing is done by the store.
    """

    @abstractmethod
    def load_all(self) -> List[IssueRecord]:
        """Read every stored record.

        Raises:
            StorageUnavailableError: If the medium cannot be read at all
        """
        pass

    @abstractmethod
    def save(self, record: IssueRecord) -> None:
        """Insert or replace the record with record.id.

        Either the new record is fully stored or the previous one is kept.

        Raises:
            StorageUnavailableError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """Remove the record with record_id. No-op when absent.

        Raises:
            StorageUnavailableError: If the delete fails
        """
        pass

    @abstractmethod
    def delete_many(self, record_ids: Iterable[str]) -> None:
        """Remove every listed record, all or nothing. Absent ids are ignored.

        Raises:
            StorageUnavailableError: If any delete fails; nothing is removed
        """
        pass

    def close(self) -> None:
        """Release the storage handle. Default: nothing to release."""
        pass
