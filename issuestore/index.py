"""Secondary indices over issue records.

Each index maps a key (project id, IRI or OBO id) to the set of record ids
referencing it. Keys whose set becomes empty are dropped.
"""

from typing import Hashable, Iterable

from issuestore.schemas import IssueRecord, Iri, OboId, ProjectId


def _link(index: dict, key: Hashable, record_id: str) -> None:
    index.setdefault(key, set()).add(record_id)


def _unlink(index: dict, key: Hashable, record_id: str) -> None:
    ids = index.get(key)
    if ids is None:
        return
    ids.discard(record_id)
    if not ids:
        del index[key]


class IssueIndex:
    """Project, IRI and OBO id lookups. Not thread-safe; the store guards it."""

    def __init__(self) -> None:
        self._by_project: dict[ProjectId, set[str]] = {}
        self._by_iri: dict[Iri, set[str]] = {}
        self._by_obo_id: dict[OboId, set[str]] = {}

    def add(self, record: IssueRecord) -> None:
        """Link record.id under its project and every IRI and OBO id it mentions."""
        _link(self._by_project, record.project_id, record.id)
        for iri in record.iris:
            _link(self._by_iri, iri, record.id)
        for obo_id in record.obo_ids:
            _link(self._by_obo_id, obo_id, record.id)

    def remove(self, record: IssueRecord) -> None:
        """Unlink record.id from every key the record contributed."""
        _unlink(self._by_project, record.project_id, record.id)
        for iri in record.iris:
            _unlink(self._by_iri, iri, record.id)
        for obo_id in record.obo_ids:
            _unlink(self._by_obo_id, obo_id, record.id)

    def rebuild(self, records: Iterable[IssueRecord]) -> None:
        self.clear()
        for record in records:
            self.add(record)

    def clear(self) -> None:
        self._by_project.clear()
        self._by_iri.clear()
        self._by_obo_id.clear()

    # Lookups return copies so callers can intersect without touching the index.

    def project_ids(self, project_id: ProjectId) -> set[str]:
        return set(self._by_project.get(project_id, ()))

    def iri_ids(self, iri: Iri) -> set[str]:
        return set(self._by_iri.get(iri, ()))

    def obo_id_ids(self, obo_id: OboId) -> set[str]:
        return set(self._by_obo_id.get(obo_id, ()))

    def stats(self) -> dict[str, int]:
        """Number of distinct live keys per index."""
        return {
            "projects": len(self._by_project),
            "iris": len(self._by_iri),
            "obo_ids": len(self._by_obo_id),
        }
