from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from tableflow.cli.main import app


@pytest.fixture
def trial_csv(tmp_path: Path, clinical_df) -> Path:
    path = tmp_path / "trial.csv"
    clinical_df.to_csv(path, index=False)
    return path


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "tableflow" in result.stdout


def test_cli_render_to_stdout(trial_csv: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["render", "--data", str(trial_csv), "--formula", "arm ~ age + sex", "--totals", "--size"],
    )
    assert result.exit_code == 0, result.output
    assert "Variable" in result.stdout
    assert "Total (n=120)" in result.stdout
    assert "p-value" in result.stdout


def test_cli_render_html_file(trial_csv: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "reports" / "table1.html"
    result = runner.invoke(
        app,
        [
            "render",
            "--data",
            str(trial_csv),
            "-f",
            "arm ~ age + stage",
            "--strata",
            "site",
            "--theme",
            "nejm",
            "--out",
            str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    html = out.read_text(encoding="utf-8")
    assert "table1-nejm" in html
    assert "Site: North" in html


def test_cli_render_with_config(trial_csv: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    config = tmp_path / "opts.yaml"
    config.write_text(
        "options:\n  show_pvalue: false\n  numeric_summary: median_iqr\n  title: Baseline\n",
        encoding="utf-8",
    )
    result = runner.invoke(
        app,
        ["render", "--data", str(trial_csv), "-f", "arm ~ age", "--config", str(config)],
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("Baseline")
    assert "p-value" not in result.stdout
    assert "[" in result.stdout


def test_cli_render_xlsx(trial_csv: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "table1.xlsx"
    result = runner.invoke(app, ["render", "--data", str(trial_csv), "-f", "arm ~ sex", "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.exists()


def test_cli_xlsx_requires_out(trial_csv: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["render", "--data", str(trial_csv), "-f", "arm ~ sex", "--format", "xlsx"])
    assert result.exit_code == 1


@pytest.mark.parametrize(
    "formula",
    ["arm + site ~ age", "arm ~ weight", "age sex"],
)
def test_cli_bad_formula_exits_nonzero(trial_csv: Path, formula: str) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["render", "--data", str(trial_csv), "-f", formula])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_cli_missing_data_file(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["render", "--data", str(tmp_path / "nope.csv"), "-f", "arm ~ age"])
    assert result.exit_code == 1


def test_cli_themes_command() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["themes"])
    assert result.exit_code == 0
    for name in ("console", "nejm", "lancet", "jama", "bmj", "simple"):
        assert name in result.stdout
