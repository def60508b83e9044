"""Exception types raised by treecut."""

from typing import Optional


class TreeCutError(Exception):
    """Base class for all treecut errors."""
    pass


class RecordFormatError(TreeCutError):
    """Raised when an alignment-summary record cannot be parsed."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None):
        self.message = message
        self.path = path
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path is None:
            return self.message
        if self.line is None:
            return f"[{self.path}] {self.message}"
        return f"[{self.path}:{self.line}] {self.message}"

    def with_location(self, path: str, line: Optional[int] = None) -> 'RecordFormatError':
        """Return a copy of this error annotated with a file location."""
        return RecordFormatError(self.message, path=path, line=line)

    def __reduce__(self):
        # Rebuilt from its fields when sent back from a worker process
        return (RecordFormatError, (self.message, self.path, self.line))


class IngestionError(TreeCutError):
    """Raised when an alignment file cannot be read during ingestion."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not ingest alignment file '{path}': {reason}")

    def __reduce__(self):
        return (IngestionError, (self.path, self.reason))


class InternerCapacityError(TreeCutError):
    """Raised when the interner runs out of ids."""
    pass


class DistanceCacheError(TreeCutError):
    """Raised when a distance cache file is unreadable or malformed."""
    pass
