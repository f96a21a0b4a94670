"""Schemas for stored issue records and their identifier types."""

from issuestore.schemas.identifiers import Identifier, Iri, OboId, ProjectId
from issuestore.schemas.issue_payload import IssuePayload
from issuestore.schemas.issue_record import IssueRecord

__all__ = ["Identifier", "Iri", "IssuePayload", "IssueRecord", "OboId", "ProjectId"]
