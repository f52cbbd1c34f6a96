from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from argprompt.__main__ import ProjectConfig, build_scaffold_spec, main, scaffold_context
from argprompt import help_text


def test_main_with_all_values_on_command_line(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    exit_code = main(["new-project", "-m", "uv", "--no-with-tests", "-p", "9000"])
    out = capsys.readouterr().out

    assert exit_code == 0
    payload = json.loads(out[out.index("{") :])
    assert payload == {
        "folder": "new-project",
        "package_manager": "uv",
        "with_tests": False,
        "test_runner": None,
        "port": 9000,
    }
    assert "Skipping test runner, no test suite requested." in out


def test_main_prompts_for_missing_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    with CliRunner().isolation(input="\n\n\n\n") as streams:
        exit_code = main(["fresh"])
        out = streams[0].getvalue().decode()

    assert exit_code == 0
    payload = json.loads(out[out.index("{\n") :])
    assert payload["package_manager"] == "pip"
    assert payload["with_tests"] is True
    assert payload["test_runner"] == "pytest"
    assert payload["port"] == 8000
    assert "# Test configuration" in out


def test_main_reasks_folder_rejected_by_model(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "taken").mkdir()
    (tmp_path / "taken" / "file.txt").write_text("x", encoding="utf-8")
    with CliRunner().isolation(input="other\n") as streams:
        exit_code = main(["taken", "-m", "pip", "-t", "-r", "pytest", "-p", "8000"])
        out = streams[0].getvalue().decode()
        err = streams[1].getvalue().decode()

    assert exit_code == 0
    assert 'Error for "folder"' in err
    assert 'Not re-using CLI-supplied value for "folder" after error.' in out
    assert json.loads(out[out.index("{\n") :])["folder"] == "other"


def test_main_without_input_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    with CliRunner().isolation(input=""):
        assert main([]) == 1


def test_main_invalid_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ARGPROMPT_LOG_LEVEL", "LOUD")
    assert main([]) == 2


def test_scaffold_help_describes_stages() -> None:
    text = help_text(build_scaffold_spec(), prog="argprompt")
    assert "usage: argprompt [options...] [folder]" in text
    assert '"pip"|"poetry"|"uv"|"unspecified"' in text
    assert "Only used when the project includes a test suite." in text


def test_scaffold_context_waits_for_with_tests() -> None:
    assert scaffold_context({"folder": "x"}) is None
    assert scaffold_context({"with_tests": False}).with_tests is False


def test_project_config_rejects_non_empty_folder(tmp_path: Path) -> None:
    (tmp_path / "f.txt").write_text("x", encoding="utf-8")
    with pytest.raises(ValueError):
        ProjectConfig(folder=str(tmp_path), package_manager="pip", with_tests=False, port=80)
