"""bud error types."""


class BudError(Exception):
    """Base class for all bud errors."""


class StorageError(BudError, OSError):
    """Raised when a filesystem read or write fails.

    Attributes:
        path: The file or directory the operation touched.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Storage failure at {path}: {reason}")


class NotFound(BudError, KeyError):
    """Raised when a digest is referenced but absent from the object store."""

    def __init__(self, digest: str) -> None:
        self.digest = digest
        super().__init__(digest)

    def __str__(self) -> str:
        return f"Object not found: {self.digest}"


class CorruptData(BudError):
    """Raised when stored bytes do not parse into the expected record shape.

    Attributes:
        key: The digest or file name holding the bad bytes.
    """

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt data in {key}: {reason}")


class CorruptHistory(BudError):
    """Raised when walking parents visits the same commit twice."""

    def __init__(self, digest: str) -> None:
        self.digest = digest
        super().__init__(f"Cycle in commit history at {digest}")


class AlreadyInitialized(BudError):
    """Raised by init on an existing repository. Informational only."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Already a bud repository: {path}")


class NotInitialized(BudError):
    """Raised when opening a directory that holds no repository."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not a bud repository: {path}")


class EmptyCommit(BudError):
    """Raised when a commit is attempted with nothing staged."""

    def __init__(self) -> None:
        super().__init__("Nothing staged to commit")
