"""
manywest: prepare the current directory for sharing with an LLM as a txtar archive.

Overview
--------
`manywest` walks the current directory, keeps the text files (directories such
as `.git` or `node_modules` are pruned and binary files are recognised by their
leading bytes), and writes `make_txtar.sh`. That script, when run, tars the
listed files into a temporary directory, turns them into a txtar archive with
`txtar-c` and copies the result to the clipboard, optionally preceded by
submission instructions.

The generated file list is commented out; uncomment the files to ship before
running the script.

Usage
-----
    manywest                        # write make_txtar.sh unless it exists
    manywest --force -s             # overwrite, embed instructions
    manywest -i dist -i docs,vendor # prune more directories
    manywest --maxfiles 250 --log-level debug --log-format json

Defaults can also come from the environment or a `.env` file:
`MANYWEST_IGNORE_DIRS`, `MANYWEST_MAXFILES`, `MANYWEST_LOG_LEVEL`,
`MANYWEST_LOG_FORMAT`.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from manywest import __version__
from manywest.config import DEFAULT_MAX_FILES, build_exclusions
from manywest.exceptions import ManywestError, TooManyFilesError
from manywest.logging import logger, setup_logging
from manywest.output_construction import build_script
from manywest.settings import Settings, load_env_defaults

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


def parse_args(
    argv: Sequence[str] | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Parse command line arguments into validated settings.

    Args:
        argv (Sequence[str] | None): arguments without the program name; defaults to `sys.argv[1:]`
        env (Mapping[str, str] | None): option defaults keyed by lower-cased name
            (see `load_env_defaults`); defaults to the process environment and `.env`

    Returns:
        Settings: the parsed configuration
    """
    defaults = load_env_defaults() if env is None else env
    env_ignore = [defaults["ignore_dirs"]] if defaults.get("ignore_dirs") else []

    p = argparse.ArgumentParser(
        prog="manywest",
        description="Generate make_txtar.sh listing the text files of the current directory.",
    )
    p.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=defaults.get("log_format", "text"),
        help="Log format (text or json).",
    )
    p.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "warning", "error"],
        default=defaults.get("log_level", "info"),
        help="Log level (debug, info, warn, error).",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Force overwrite pre-existing make_txtar.sh.",
    )
    p.add_argument(
        "-i",
        "--ignore-dirs",
        action="append",
        default=env_ignore,
        help="Ignore directories (repeatable, comma separated).",
    )
    p.add_argument(
        "--maxfiles",
        type=int,
        default=defaults.get("maxfiles", DEFAULT_MAX_FILES),
        help="Maximum number of files to include in txtar archive.",
    )
    p.add_argument(
        "-s",
        "--include-instructions",
        action="store_true",
        help="Include instructions into txtar archive.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = p.parse_args(argv)

    try:
        return Settings(
            force=args.force,
            ignore_dirs=args.ignore_dirs,
            max_files=args.maxfiles,
            include_instructions=args.include_instructions,
            log_format=args.log_format,
            log_level=args.log_level,
            log_file=args.log_file,
        )
    except ValidationError as e:
        p.error(str(e))


def main(argv: Sequence[str] | None = None) -> int:
    """Run manywest and return the process exit code.

    Args:
        argv (Sequence[str] | None): arguments without the program name

    Returns:
        int: 0 on success or when an existing script is kept, 1 on failure
    """
    settings = parse_args(argv)
    setup_logging(
        settings.log_file or None,
        level=settings.log_level,
        fmt=settings.log_format,
        force=True,
    )

    out_path = Path(settings.output).resolve()
    if out_path.exists() and not settings.force:
        logger.warning("file exists, quitting early to prevent overwriting", file=str(out_path))
        return 0

    exclusions = build_exclusions(settings.ignore_dirs)
    try:
        result = build_script(
            settings.root,
            exclusions,
            max_files=settings.max_files,
            include_instructions=settings.include_instructions,
        )
    except TooManyFilesError as e:
        logger.error("number of files is greater than the maximum", file_count=e.count, max_files=e.limit)
        return 1
    except ManywestError as e:
        logger.error("run failed", error=str(e), error_type=type(e).__name__)
        return 1

    try:
        out_path.write_text(result.script, encoding="utf-8")
        out_path.chmod(0o755)
    except OSError as e:
        logger.error("run failed", file=str(out_path), error=str(e), error_type=type(e).__name__)
        return 1

    logger.info("script created successfully", script=str(out_path), files=len(result.entries))
    return 0


def entrypoint() -> None:
    """Console script entry point."""
    raise SystemExit(main())


if __name__ == "__main__":
    entrypoint()
