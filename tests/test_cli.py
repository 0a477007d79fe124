from pathlib import Path

from typer.testing import CliRunner

from dualtrack.cli import app

runner = CliRunner()


def test_classify_shows_classification_and_command() -> None:
    result = runner.invoke(app, ["classify", "please run npm test"])

    assert result.exit_code == 0
    assert "classification: command" in result.output
    assert "command: npm test" in result.output


def test_classify_without_command() -> None:
    result = runner.invoke(app, ["classify", "Explain the auth flow"])

    assert result.exit_code == 0
    assert "classification: code_query" in result.output
    assert "command: -" in result.output


def test_ask_chitchat_prints_greeting(tmp_path: Path) -> None:
    result = runner.invoke(app, ["ask", "hello there", "--workspace", str(tmp_path)])

    assert result.exit_code == 0
    assert "Hi! I am ready" in result.output


def test_ask_runs_command_in_workspace(tmp_path: Path) -> None:
    (tmp_path / "marker.txt").write_text("x", encoding="utf-8")

    result = runner.invoke(app, ["ask", "run ls", "--workspace", str(tmp_path), "--json"])

    assert result.exit_code == 0
    assert '"classification": "command"' in result.output
    assert '"responsePlan"' in result.output
    assert "marker.txt" in result.output


def test_ask_code_query_without_model_apologizes(tmp_path: Path) -> None:
    (tmp_path / "app.ts").write_text("export {}\n", encoding="utf-8")

    result = runner.invoke(
        app, ["ask", "Explain this module", "--workspace", str(tmp_path), "--file", "app.ts", "--json"]
    )

    assert result.exit_code == 0
    assert '"classification": "code_query"' in result.output
    assert "Analysis failed" in result.output
