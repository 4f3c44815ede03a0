from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from manywest.config import DEFAULT_MAX_FILES, OUTPUT_FILENAME

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "MANYWEST_"


def load_env_defaults(env_file: str | Path | None = None) -> dict[str, str]:
    """Load a `.env` file (without overriding the real environment) and collect manywest variables.

    Args:
        env_file: Path of the dotenv file. Defaults to the one found from the current directory.

    Returns:
        A mapping of lower-cased option names (prefix removed) to raw string values,
        e.g. {"maxfiles": "50"} for `MANYWEST_MAXFILES=50`.
    """
    path = env_file if env_file is not None else ENV_FILE
    if path:
        load_dotenv(path, override=False)
    return {
        key.removeprefix(ENV_PREFIX).lower(): value
        for key, value in os.environ.items()
        if key.startswith(ENV_PREFIX)
    }


class Settings(BaseModel):
    """Configuration settings for a manywest run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: Path = Field(default_factory=Path.cwd, description="Directory to walk.")
    output: Path = Field(
        default=Path(OUTPUT_FILENAME),
        description="Script written in the current directory.",
    )
    force: bool = Field(default=False, description="Force overwrite pre-existing make_txtar.sh.")
    ignore_dirs: list[str] = Field(default_factory=list, description="Ignore directories.")
    max_files: int = Field(
        default=DEFAULT_MAX_FILES,
        ge=1,
        description="Maximum number of files to include in txtar archive.",
    )
    include_instructions: bool = Field(
        default=False,
        description="Include instructions into txtar archive.",
    )
    log_format: Literal["text", "json"] = Field(default="text", description="Log format.")
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level.",
    )
    log_file: str = Field(default="", description="Log file path.")

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _lower(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        value = value.strip().lower()
        return "warning" if value == "warn" else value

    @field_validator("ignore_dirs", mode="before")
    @classmethod
    def _split_ignore_dirs(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            out: list[str] = []
            for v in value:
                out.extend(item.strip() for item in str(v).split(",") if item.strip())
            return out
        return value
