"""Remote tracker fields carried by an issue record (not indexed)."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field


def _ensure_unix_ts(value: int | str | None) -> int | None:
    """Coerce ISO date string or int to Unix timestamp (int). Accepts None for optional fields."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


UnixTs = Annotated[int | None, BeforeValidator(_ensure_unix_ts)]


class IssuePayload(BaseModel):
    """Issue as received from the remote tracker.

    Unknown keys are kept as-is so tracker metadata round-trips through storage.
    """

    number: int | None = Field(default=None, description="Issue number on the remote tracker")
    title: str = Field(default="", description="Issue title")
    body: str = Field(default="", description="Issue body (markdown)")
    state: str = Field(default="open", description="Remote state, e.g. open or closed")
    html_url: str | None = Field(default=None, description="Link to the issue on the remote tracker")
    author: str | None = Field(default=None, description="Login of the issue author")
    labels: tuple[str, ...] = Field(default=(), description="Label names")
    created_at: UnixTs = Field(default=None, description="Unix timestamp when issue was created")
    updated_at: UnixTs = Field(default=None, description="Unix timestamp of last update")
    closed_at: UnixTs = Field(default=None, description="Unix timestamp when issue was closed")

    model_config = {"extra": "allow", "frozen": True}
