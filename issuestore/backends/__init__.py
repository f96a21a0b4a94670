"""Storage backends for the issue store."""

from issuestore.backends.base import IssueBackend
from issuestore.backends.memory import MemoryBackend
from issuestore.backends.yaml_dir import YamlDirectoryBackend

__all__ = ["IssueBackend", "MemoryBackend", "YamlDirectoryBackend"]
