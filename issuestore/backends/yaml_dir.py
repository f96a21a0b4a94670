"""Issue record storage as YAML files.

One file per record: {root}/issues/{quoted id}.yaml, or
{root}/issues/sha256-{digest}.yaml when the quoted id is too long for a
file name. Files are replaced atomically (temp file + rename). Bulk deletes
stage files in a trash directory first so a failed delete can be rolled back.
"""

import hashlib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, List
from urllib.parse import quote

import yaml
from pydantic import ValidationError

from issuestore.backends.base import IssueBackend
from issuestore.errors import StorageUnavailableError
from issuestore.schemas import IssueRecord

ISSUES_DIR = "issues"
# Most filesystems cap names at 255 bytes; leave room for ".yaml" and temp suffixes.
MAX_NAME_BYTES = 200

LOG = logging.getLogger("issuestore.backends.yaml_dir")


class YamlDirectoryBackend(IssueBackend):
    """Durable backend over a directory of YAML files."""

    def __init__(self, root: Path | str, create_dir: bool = True) -> None:
        """Bind to root; create root/issues unless create_dir is False.

        Raises:
            StorageUnavailableError: If the directory is missing or cannot be created
        """
        self.root = Path(root)
        self.issues_dir = self.root / ISSUES_DIR
        if create_dir:
            try:
                self.issues_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageUnavailableError(f"Cannot create {self.issues_dir}: {e}") from e
        elif not self.issues_dir.is_dir():
            raise StorageUnavailableError(f"Directory '{self.issues_dir}' does not exist")

    def path_for(self, record_id: str) -> Path:
        name = quote(record_id, safe="")
        if len(name) > MAX_NAME_BYTES:
            name = "sha256-" + hashlib.sha256(record_id.encode("utf-8")).hexdigest()
        return self.issues_dir / f"{name}.yaml"

    def _load_file(self, path: Path) -> IssueRecord | None:
        """Parse one file. Returns None if empty, invalid or misnamed."""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if not data:
                return None
            record = IssueRecord.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            LOG.warning("Failed to load issue record %s: %s", path, e)
            return None
        if self.path_for(record.id) != path:
            LOG.warning("Skipping %s: file name does not match record id %r", path, record.id)
            return None
        return record

    def load_all(self) -> List[IssueRecord]:
        if not self.issues_dir.is_dir():
            return []
        try:
            paths = sorted(p for p in self.issues_dir.glob("*.yaml") if p.is_file())
        except OSError as e:
            raise StorageUnavailableError(f"Cannot list {self.issues_dir}: {e}") from e
        records = []
        for path in paths:
            record = self._load_file(path)
            if record is not None:
                records.append(record)
        LOG.debug("Loaded %d issue records from %s", len(records), self.issues_dir)
        return records

    def save(self, record: IssueRecord) -> None:
        path = self.path_for(record.id)
        payload = record.model_dump(mode="json")
        tmp_path: Path | None = None
        try:
            raw = yaml.dump(
                payload,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
                width=1000,
            )
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.issues_dir,
                delete=False,
                suffix=".tmp",
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                tmp_file.write(raw)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            tmp_path.replace(path)
        except (OSError, yaml.YAMLError) as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StorageUnavailableError(f"Failed to write issue record {record.id!r}: {e}") from e
        LOG.debug("Saved issue record %s to %s", record.id, path)

    def delete(self, record_id: str) -> None:
        path = self.path_for(record_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to delete issue record {record_id!r}: {e}") from e
        LOG.debug("Deleted issue record %s", record_id)

    def delete_many(self, record_ids: Iterable[str]) -> None:
        paths = [p for p in (self.path_for(i) for i in dict.fromkeys(record_ids)) if p.is_file()]
        if not paths:
            return
        try:
            trash = Path(tempfile.mkdtemp(prefix=".trash-", dir=self.issues_dir))
        except OSError as e:
            raise StorageUnavailableError(f"Cannot stage delete in {self.issues_dir}: {e}") from e

        moved: list[tuple[Path, Path]] = []
        try:
            for path in paths:
                target = trash / path.name
                path.replace(target)
                moved.append((path, target))
        except OSError as e:
            self._restore(moved, trash)
            raise StorageUnavailableError(f"Failed to delete {len(paths)} issue records: {e}") from e

        try:
            shutil.rmtree(trash)
        except OSError as e:
            LOG.warning("Deleted records left in %s: %s", trash, e)
        LOG.debug("Deleted %d issue records", len(paths))

    @staticmethod
    def _restore(moved: list[tuple[Path, Path]], trash: Path) -> None:
        """Move staged files back; keep the trash dir if anything is stuck in it."""
        stuck = False
        for path, target in reversed(moved):
            try:
                target.replace(path)
            except OSError as e:
                stuck = True
                LOG.error("Cannot restore %s from %s: %s", path, target, e)
        if not stuck:
            shutil.rmtree(trash, ignore_errors=True)
