from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, StrictUndefined, TemplateError

from manywest.config import INSTRUCTIONS_DIR, RenderContext, ScriptResult
from manywest.exceptions import RenderError, TooManyFilesError
from manywest.file_manipulation import build_entries, walk_directory
from manywest.logging import logger

if TYPE_CHECKING:
    from manywest.config import ExclusionSet

INSTRUCTIONS_TEXT = """\
Subject: Code Submission Guidelines in Txtar Archive Format

As we collaborate on code submissions, I would like to emphasize some guidelines for presenting your code using the txtar archive format.

Unified Code Block:
Ensure that all your code is displayed within a single code block using the txtar archive format. This helps maintain a structured and organized presentation.

Modification Verification:
If, upon review, you find that you haven't made any modifications to a specific source file since its initial state, kindly refrain from including it in the code block.

Txtar Archive Format Summary:
The txtar archive format should follow this structure:

-- cmd/main.go --
{ contents of main.go go here }
-- mypackage.go --
{ contents of mypackage.go go here }

Omitting Unchanged Files:
If a file requires no changes, please exclude it from the txtar archive. Do not include statements like // ... (unchanged) or similar indications.

Avoid Partial Listings:
Refrain from providing partial listings for unchanged files. Instead, either omit the file entirely or include its complete content without any abbreviations or explanations about unchanged portions.

Your adherence to these guidelines will greatly facilitate our collaboration and ensure a streamlined code submission process. Thank you for your attention to detail and cooperation.
"""

TEMPLATE_SCRIPT = """\
#!/usr/bin/env bash
set -e

tmp=$(mktemp -d {{ working_dir_name }}.XXXXX)

if [ -z "${tmp+x}" ] || [ -z "$tmp" ]; then
    echo "error: $tmp is not set or is an empty string."
    exit 1
fi

if ! command -v txtar-c >/dev/null; then
    echo go install github.com/rogpeppe/go-internal/cmd/txtar-c@latest
\texit 1
fi

declare -a files=(
{% for entry in files %}
\t# {{ entry.path }} # loc: {{ entry.line_count }}
{% endfor %}
)
for file in "${files[@]}"; do
    echo $file
done | tee $tmp/filelist.txt

tar -cf $tmp/{{ working_dir_name }}.tar -T $tmp/filelist.txt
mkdir -p $tmp/{{ working_dir_name }}
tar xf $tmp/{{ working_dir_name }}.tar -C $tmp/{{ working_dir_name }}
rg --files $tmp/{{ working_dir_name }}
{% if include_instructions %}

mkdir -p $tmp/{{ instructions_dir }}

cat >$tmp/{{ instructions_dir }}/1.txt <<EOF
{{ instructions }}EOF
{% endif %}

{
{% if include_instructions %}
    cat $tmp/{{ instructions_dir }}/1.txt
    echo txtar archive is below
{% endif %}
    txtar-c $tmp/{{ working_dir_name }}
} | pbcopy

rm -rf $tmp
"""


def _environment() -> Environment:
    return Environment(  # noqa: S701
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_script(context: RenderContext, template: str = TEMPLATE_SCRIPT) -> str:
    """Bind a render context into the txtar helper script template.

    The template lists each entry as a commented `# <path> # loc: <count>`
    line, names the temporary and archive directories after the working
    directory, and embeds the instructions block only when requested.

    Args:
        context (RenderContext): the entries and contextual values to bind
        template (str): the Jinja2 template source; defaults to `TEMPLATE_SCRIPT`

    Raises:
        RenderError: if the template cannot be parsed or references an unbound field

    Returns:
        str: the rendered shell script
    """
    try:
        tmpl = _environment().from_string(template)
        return tmpl.render(
            **context.model_dump(),
            instructions_dir=INSTRUCTIONS_DIR,
            instructions=INSTRUCTIONS_TEXT,
        )
    except TemplateError as e:
        raise RenderError(reason=str(e)) from e


def build_script(
    root: Path,
    exclusions: ExclusionSet,
    *,
    max_files: int,
    include_instructions: bool,
) -> ScriptResult:
    """Run the discovery pipeline and render the resulting script.

    Args:
        root (Path): the directory to walk; its basename names the archive
        exclusions (ExclusionSet): directory-name fragments to prune
        max_files (int): the largest number of qualifying files accepted
        include_instructions (bool): whether to embed the instructions block

    Raises:
        TooManyFilesError: if more than `max_files` files qualify
        TraversalError: if the walk fails
        RenderError: if the template cannot be bound

    Returns:
        ScriptResult: the script text and the entries it lists
    """
    root = Path(root).resolve()
    paths = walk_directory(root, exclusions)
    if len(paths) > max_files:
        raise TooManyFilesError(count=len(paths), limit=max_files)

    entries = build_entries(paths, root)
    logger.debug("entries built", paths=len(paths), entries=len(entries))

    context = RenderContext(
        files=tuple(entries),
        working_dir_name=root.name,
        include_instructions=include_instructions,
    )
    return ScriptResult(script=render_script(context), entries=context.files)
