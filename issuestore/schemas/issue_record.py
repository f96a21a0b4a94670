"""Issue record: the unit stored and indexed by the issue store."""

from pydantic import BaseModel, Field, field_serializer

from issuestore.schemas.identifiers import Iri, NonBlankStr, OboId, ProjectId
from issuestore.schemas.issue_payload import IssuePayload


class IssueRecord(BaseModel):
    """Issue attached to a project and to zero or more ontology entities.

    ``iris`` and ``obo_ids`` are sets; duplicate input entries collapse.
    Records are immutable; replace them through ``IssueStore.upsert``.
    """

    id: NonBlankStr = Field(..., description="Primary key, unique across all projects")
    project_id: ProjectId = Field(..., alias="projectId", description="Owning project")
    iris: frozenset[Iri] = Field(default_factory=frozenset, description="Entity IRIs the issue mentions")
    obo_ids: frozenset[OboId] = Field(
        default_factory=frozenset,
        alias="oboIds",
        description="Entity OBO ids the issue mentions",
    )
    issue: IssuePayload = Field(default_factory=IssuePayload, description="Remote tracker payload")

    model_config = {"extra": "forbid", "frozen": True, "populate_by_name": True}

    @field_serializer("iris", "obo_ids")
    def _sorted_keys(self, keys: frozenset[Iri] | frozenset[OboId]) -> list[str]:
        return sorted(str(k) for k in keys)
