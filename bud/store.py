"""Object store factory."""

import os

from .config import RepoConfig
from .kv.base import KVStore
from .objects import ObjectStore

OBJECTS_DIR = "objects"
DISK_DIR = "objects.db"


def object_store(
    repo_dir: str | None = None,
    config: RepoConfig | None = None,
) -> ObjectStore:
    """Create the ObjectStore for a repository.

    Args:
        repo_dir: The ``.bud`` directory. ``None`` gives an in-memory
            store (nothing persisted).
        config: Repository settings choosing the backend (default:
            one file per object).

    Returns:
        An ``ObjectStore`` over the configured backend.
    """
    config = config or RepoConfig()

    backend: KVStore
    if repo_dir is None:
        from .kv.memory import Memory

        backend = Memory()
    elif config.objects == "files":
        from .kv.files import Files

        backend = Files(os.path.join(repo_dir, OBJECTS_DIR))
    elif config.objects == "disk":
        from .kv.disk import Disk

        backend = Disk(
            os.path.join(repo_dir, DISK_DIR),
            size_limit=config.disk_size_limit,
        )
    else:
        raise ValueError(f"Unknown object backend: {config.objects!r}")

    return ObjectStore(backend)
