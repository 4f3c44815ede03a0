from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from manywest import cli
from manywest.config import FileEntry, ScriptResult
from manywest.exceptions import RenderError, TraversalError


@pytest.mark.integration
def test_main_passes_settings_to_pipeline(
    tmp_path: Path,
    mocker: MockerFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    entry = FileEntry(path="a.txt", line_count=1, content_type="text")
    build = mocker.patch.object(
        cli,
        "build_script",
        return_value=ScriptResult(script="#!/usr/bin/env bash\n", entries=(entry,)),
    )

    exit_code = cli.main(["-s", "-i", "Vendor", "--maxfiles", "5"])

    assert exit_code == 0
    args, kwargs = build.call_args
    assert args[0] == Path.cwd()
    assert "vendor" in args[1]
    assert ".git" in args[1]
    assert kwargs == {"max_files": 5, "include_instructions": True}
    assert (tmp_path / "make_txtar.sh").read_text(encoding="utf-8") == "#!/usr/bin/env bash\n"


@pytest.mark.integration
@pytest.mark.parametrize(
    "error",
    [
        TraversalError(path=Path("private"), operation="scandir", reason="Permission denied"),
        RenderError(reason="'cwd' is undefined"),
    ],
)
def test_main_fatal_errors_exit_one_without_output(
    tmp_path: Path,
    mocker: MockerFixture,
    monkeypatch: pytest.MonkeyPatch,
    error: Exception,
) -> None:
    monkeypatch.chdir(tmp_path)
    mocker.patch.object(cli, "build_script", side_effect=error)

    exit_code = cli.main([])

    assert exit_code == 1
    assert not (tmp_path / "make_txtar.sh").exists()


@pytest.mark.integration
def test_main_existing_script_skips_pipeline(
    tmp_path: Path,
    mocker: MockerFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "make_txtar.sh").write_text("old\n", encoding="utf-8")
    build = mocker.patch.object(cli, "build_script")

    assert cli.main([]) == 0
    build.assert_not_called()
