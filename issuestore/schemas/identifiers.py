"""Opaque identifier value types used as index keys.

Each identifier wraps a non-blank string. Values of different types never
compare equal, so a project id and an IRI with the same text stay distinct.
"""

from functools import total_ordering
from typing import Annotated, TypeVar

from pydantic import ConfigDict, RootModel, StringConstraints, ValidationError

from issuestore.errors import InvalidArgumentError

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

T = TypeVar("T", bound="Identifier")


@total_ordering
class Identifier(RootModel[NonBlankStr]):
    """Hashable, ordered wrapper around a non-blank string."""

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.root

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.root))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.root < other.root

    @classmethod
    def coerce(cls: type[T], value: "T | str") -> T:
        """Return value as this identifier type, wrapping plain strings.

        Raises:
            InvalidArgumentError: If value is None, blank or of another type.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidArgumentError(f"{cls.__name__} expected, got {type(value).__name__}")
        try:
            return cls(value)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid {cls.__name__}: {value!r}") from e


class ProjectId(Identifier):
    """Identifier of the ontology-authoring project that owns an issue."""


class Iri(Identifier):
    """IRI of an ontology entity, e.g. http://purl.obolibrary.org/obo/GO_0008150."""


class OboId(Identifier):
    """OBO-style identifier of an ontology entity, e.g. GO:0008150."""
