from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Iterable

OUTPUT_FILENAME = "make_txtar.sh"
INSTRUCTIONS_DIR = "gpt_instructions_XXYYBB"
SNIFF_BYTES = 512
DEFAULT_MAX_FILES = 100


class ContentType(StrEnum):
    """Labels emitted by the content classifier besides MIME categories.

    A recognised signature is reported as its MIME top-level category
    (e.g. "image", "application"), which is kept as a plain string.
    """

    TEXT = "text"
    UNKNOWN = "unknown"


DEFAULT_EXCLUDE_DIRS: frozenset[str] = frozenset(
    {
        ".git",
        "__pycache__",
        "node_modules",
        INSTRUCTIONS_DIR.lower(),
        ".ruff_cache",
        ".mypy_cache",
        ".pytest_cache",
        ".venv",
    },
)

ExclusionSet = frozenset[str]


def build_exclusions(extra: Iterable[str] = ()) -> ExclusionSet:
    """Build the immutable, lower-cased exclusion set for one run.

    Args:
        extra (Iterable[str]): user supplied directory-name fragments; blanks are ignored.

    Returns:
        ExclusionSet: `DEFAULT_EXCLUDE_DIRS` unioned with the normalized extra fragments.
    """
    user = {e.strip().strip("/").lower() for e in extra if e and e.strip().strip("/")}
    return DEFAULT_EXCLUDE_DIRS | frozenset(user)


class Classification(BaseModel):
    """Outcome of sniffing the leading bytes of a file."""

    model_config = ConfigDict(frozen=True)

    is_text: bool
    type_label: str


class FileEntry(BaseModel):
    """A discovered file as handed to the script renderer.

    Attributes:
        path: Path relative to the traversal root, with POSIX separators.
        line_count: Number of lines in the file.
        content_type: Classifier label ("text", a MIME category, or "unknown").
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="File path relative to the traversal root")
    line_count: int = Field(..., ge=0, description="Number of lines")
    content_type: str = Field(..., description="Classifier label")


class RenderContext(BaseModel):
    """Values bound into the script template."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    files: tuple[FileEntry, ...] = Field(default=(), description="Entries in traversal order")
    working_dir_name: str = Field(..., min_length=1, description="Basename of the traversal root")
    include_instructions: bool = Field(default=False, description="Embed the instructions block")


class ScriptResult(BaseModel):
    """Rendered script text together with the entries it lists."""

    model_config = ConfigDict(frozen=True)

    script: str
    entries: tuple[FileEntry, ...]
