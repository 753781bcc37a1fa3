"""Tests for the command line entry point (create_lib.cli).

Covers:
- Successful run: completion message, next steps, exit status 0
- ScaffoldError and unexpected errors exit with status 1
- Per-file warnings surface in the final output
- Answers containing markup brackets are printed literally
- No command line options besides --help
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from conftest import mock_http_client
from create_lib import cli
from create_lib.config import Config
from create_lib.errors import ScaffoldError
from create_lib.materializer.substitution import FileFailure, SubstitutionReport
from create_lib.materializer.generator import MaterializeResult
from create_lib.prompts import ProjectAnswers


def _answers(name: str = "my-lib") -> ProjectAnswers:
    return ProjectAnswers.from_responses({"projectName": name, "repository": ""})


class TestMain:
    @pytest.mark.unit
    def test_success(self, tmp_path: Path, capsys):
        result = MaterializeResult(project_dir=tmp_path / "my-lib", report=SubstitutionReport())
        with patch.object(cli, "collect_answers", return_value=_answers()), \
                patch.object(cli, "scaffold", AsyncMock(return_value=result)):
            cli.main([])

        out = capsys.readouterr().out
        assert "Project my-lib has been created successfully!" in out
        assert "cd my-lib" in out
        assert "npm install" in out
        assert "npm run dev" in out

    @pytest.mark.unit
    def test_scaffold_error_exits_1(self, capsys):
        error = ScaffoldError("fetching", "Could not find template")
        with patch.object(cli, "collect_answers", return_value=_answers()), \
                patch.object(cli, "scaffold", AsyncMock(side_effect=error)):
            with pytest.raises(SystemExit) as exc_info:
                cli.main([])

        assert exc_info.value.code == 1
        assert "Could not find template" in capsys.readouterr().err

    @pytest.mark.unit
    def test_unexpected_error_exits_1(self, capsys):
        with patch.object(cli, "collect_answers", return_value=_answers()), \
                patch.object(cli, "scaffold", AsyncMock(side_effect=RuntimeError("kaboom"))):
            with pytest.raises(SystemExit) as exc_info:
                cli.main([])

        assert exc_info.value.code == 1
        assert "kaboom" in capsys.readouterr().err

    @pytest.mark.unit
    def test_file_failures_reported(self, tmp_path: Path, capsys):
        report = SubstitutionReport(
            files_scanned=2,
            failures=[FileFailure(path=tmp_path / "x.bin", error="bad bytes")],
        )
        result = MaterializeResult(project_dir=tmp_path, report=report)
        with patch.object(cli, "collect_answers", return_value=_answers()), \
                patch.object(cli, "scaffold", AsyncMock(return_value=result)):
            cli.main([])

        captured = capsys.readouterr()
        assert "1 file(s) could not be processed" in captured.err
        assert "created successfully" in captured.out

    @pytest.mark.unit
    def test_bracketed_description_shown_literally(self, tmp_path: Path, capsys):
        answers = ProjectAnswers.from_responses(
            {"projectName": "my-lib", "description": "Parses [/b] tags", "repository": ""}
        )
        result = MaterializeResult(project_dir=tmp_path / "my-lib", report=SubstitutionReport())
        scaffold = AsyncMock(return_value=result)
        with patch.object(cli, "collect_answers", return_value=answers), \
                patch.object(cli, "scaffold", scaffold):
            cli.main([])

        scaffold.assert_awaited_once()
        out = capsys.readouterr().out
        assert "Parses [/b] tags" in out
        assert "created successfully" in out

    @pytest.mark.unit
    def test_bracketed_project_name_shown_literally(self, tmp_path: Path, capsys):
        result = MaterializeResult(project_dir=tmp_path / "lib[/x]", report=SubstitutionReport())
        with patch.object(cli, "collect_answers", return_value=_answers("lib[/x]")), \
                patch.object(cli, "scaffold", AsyncMock(return_value=result)):
            cli.main([])

        out = capsys.readouterr().out
        assert "Project lib[/x] has been created successfully!" in out
        assert "cd lib[/x]" in out

    @pytest.mark.unit
    def test_rejects_options(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--template", "other/repo"])
        assert exc_info.value.code == 2

    @pytest.mark.unit
    def test_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--help"])
        assert exc_info.value.code == 0
        assert "create-lib" in capsys.readouterr().out


@pytest.mark.integration
class TestEndToEnd:
    def test_prompts_to_project(
        self, tmp_path: Path, template_tarball: bytes, monkeypatch: pytest.MonkeyPatch, capsys
    ):
        monkeypatch.chdir(tmp_path)
        typed = iter([
            "my-lib",
            "Does things",
            "Jane",
            "",
            "",
            "https://github.com/jane/my-lib.git",
        ])

        with patch("create_lib.prompts.Prompt.ask", side_effect=lambda *a, **kw: next(typed)), \
                patch("httpx.AsyncClient", return_value=mock_http_client(template_tarball)), \
                patch.object(cli.Config, "from_env", return_value=Config(verbose=False)):
            cli.main([])

        package = json.loads((tmp_path / "my-lib" / "package.json").read_text(encoding="utf-8"))
        assert package["name"] == "my-lib"
        assert package["license"] == "MIT"
        assert package["keywords"] == "template, npm, library"
        assert package["repository"] == "git+https://github.com/jane/my-lib.git"
        assert package["bugs"] == "https://github.com/jane/my-lib#issues"
        assert "created successfully" in capsys.readouterr().out
