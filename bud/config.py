"""Repository configuration, persisted as JSON inside the repository."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from typing import Literal

from .errors import CorruptData, StorageError
from .kv.disk import ONE_GB

REPO_DIR = ".bud"
CONFIG_FILE = "config"


@dataclass(frozen=True)
class RepoConfig:
    """Settings fixed when a repository is initialized.

    Attributes:
        objects: Object backend, ``"files"`` (one file per object under
            ``objects/``) or ``"disk"`` (a diskcache database under
            ``objects.db/``).
        disk_size_limit: Size limit handed to diskcache for the
            ``"disk"`` backend.
    """

    objects: Literal["files", "disk"] = "files"
    disk_size_limit: int = ONE_GB

    def __post_init__(self) -> None:
        if self.objects not in ("files", "disk"):
            raise ValueError(f"Unknown object backend: {self.objects!r}")

    def dumps(self) -> str:
        return json.dumps(asdict(self), sort_keys=True)

    @classmethod
    def loads(cls, raw: str, *, source: str = CONFIG_FILE) -> RepoConfig:
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise CorruptData(source, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CorruptData(source, "expected a JSON object")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(repo_dir: str) -> RepoConfig:
    """Read ``config`` from ``repo_dir``, falling back to defaults."""
    path = os.path.join(repo_dir, CONFIG_FILE)
    try:
        with open(path, encoding="utf-8") as f:
            raw = f.read()
    except FileNotFoundError:
        return RepoConfig()
    except OSError as e:
        raise StorageError(path, e.strerror or str(e)) from e
    if not raw.strip():
        return RepoConfig()
    return RepoConfig.loads(raw, source=path)


def save_config(repo_dir: str, config: RepoConfig) -> None:
    path = os.path.join(repo_dir, CONFIG_FILE)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(config.dumps())
    except OSError as e:
        raise StorageError(path, e.strerror or str(e)) from e
