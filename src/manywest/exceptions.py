from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ManywestError(Exception):
    """Base exception for errors in the manywest package."""


@dataclass(frozen=True)
class TraversalError(ManywestError):
    """Raised when the directory walk cannot list or inspect an entry."""

    path: Path
    operation: str
    reason: str

    def __str__(self) -> str:
        return f"{self.operation} failed for {self.path}: {self.reason}"


@dataclass(frozen=True)
class ClassificationError(ManywestError):
    """Raised when the leading bytes of a file cannot be sampled."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"cannot classify {self.path}: {self.reason}"


@dataclass(frozen=True)
class LineCountError(ManywestError):
    """Raised when a file cannot be read to count its lines."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"cannot count lines of {self.path}: {self.reason}"


@dataclass(frozen=True)
class TooManyFilesError(ManywestError):
    """Raised when more files qualify than the configured maximum."""

    count: int
    limit: int
    message: str = "Number of files is greater than the allowed maximum."

    def __str__(self) -> str:
        return f"{self.message} ({self.count} > {self.limit})"


@dataclass(frozen=True)
class RenderError(ManywestError):
    """Raised when the script template cannot be parsed or bound."""

    reason: str

    def __str__(self) -> str:
        return f"cannot render script: {self.reason}"
