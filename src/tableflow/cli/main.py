"""Main CLI entrypoint using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from tableflow import __version__
from tableflow.api import table1
from tableflow.config import TableOptions, load_options
from tableflow.data import load_table
from tableflow.errors import TableflowError
from tableflow.export import infer_output_format, write_output
from tableflow.registry import default_registries

app = typer.Typer(
    name="tableflow",
    help="Publication-ready summary tables (Table 1) for clinical research data.",
    add_completion=False,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

FORMATS = ("text", "html", "latex", "xlsx")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"tableflow {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """tableflow: descriptive statistics tables by group."""
    pass


@app.command()
def render(
    data: Path = typer.Option(
        ...,
        "--data",
        help="Path to data file (.csv, .tsv, .parquet) or directory (parquet dataset).",
    ),
    formula: str = typer.Option(
        ..., "--formula", "-f", help="Table formula, e.g. 'arm ~ age + sex' or '~ age + sex'"
    ),
    fmt: Optional[str] = typer.Option(
        None,
        "--format",
        help="Output format: text, html, latex or xlsx (default: from --out suffix, else text)",
    ),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output file (default: stdout)"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with table options"),
    strata: Optional[str] = typer.Option(None, "--strata", help="Stratification variable"),
    missing: bool = typer.Option(False, "--missing", help="Show missing-value rows"),
    totals: bool = typer.Option(False, "--totals", help="Add a totals column"),
    no_pvalue: bool = typer.Option(False, "--no-pvalue", help="Omit the p-value column"),
    size: bool = typer.Option(False, "--size", help="Show group sizes in column headers"),
    theme: Optional[str] = typer.Option(None, "--theme", help="Theme: console, nejm, lancet, jama, bmj, simple"),
    summary: Optional[str] = typer.Option(
        None, "--summary", help="Numeric summary: mean_sd, median_iqr, mean_se, median_range, mean_ci"
    ),
    continuous_test: Optional[str] = typer.Option(
        None, "--continuous-test", help="Test for continuous variables: ttest, welch, kruskal, anova"
    ),
    categorical_test: Optional[str] = typer.Option(
        None, "--categorical-test", help="Test for categorical variables: fisher, chisq"
    ),
    title: Optional[str] = typer.Option(None, "--title", help="Table title"),
    jobs: Optional[int] = typer.Option(None, "--jobs", help="Threads used to evaluate cells"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
):
    """
    Build a summary table from a data file and render it.

    Examples:
        # Grouped table with totals, printed to the console
        tableflow render --data trial.csv --formula "arm ~ age + sex" --totals

        # HTML in NEJM style, stratified by site
        tableflow render --data trial.parquet --formula "arm ~ age + sex" \\
            --strata site --theme nejm --out table1.html

        # Options from YAML, Excel output
        tableflow render --data trial.csv --formula "arm ~ age" --config opts.yaml --out t1.xlsx
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        if fmt is None:
            fmt = infer_output_format(out) if out is not None else "text"
        if fmt not in FORMATS:
            raise TableflowError(f"Unknown output format '{fmt}'. Available: {', '.join(FORMATS)}")
        if fmt == "xlsx" and out is None:
            raise TableflowError("xlsx output requires --out")

        options = load_options(config) if config is not None else TableOptions()
        overrides = {
            "stratify_by": strata,
            "theme": theme,
            "numeric_summary": summary,
            "continuous_test": continuous_test,
            "categorical_test": categorical_test,
            "title": title,
            "n_jobs": jobs,
        }
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if missing:
            overrides["show_missing"] = True
        if totals:
            overrides["show_totals"] = True
        if no_pvalue:
            overrides["show_pvalue"] = False
        if size:
            overrides["show_size"] = True

        df = load_table(data)
        blueprint = table1(formula, df, options, **overrides)
    except (TableflowError, ValueError, FileNotFoundError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if out is None:
        rendered = blueprint.render(fmt)
        typer.echo("\n".join(rendered) if isinstance(rendered, list) else rendered)
    else:
        path = write_output(blueprint, out, fmt)
        typer.secho(f"✓ Table written to {path}", fg=typer.colors.GREEN)

    if blueprint.diagnostics:
        typer.secho(
            f"⚠ {len(blueprint.diagnostics)} cell(s) failed to compute and show [error]",
            fg=typer.colors.YELLOW,
            err=True,
        )


@app.command()
def themes():
    """List available themes."""
    registry = default_registries().themes
    for name in registry.names():
        theme = registry.get(name)
        typer.echo(f"{name:<8} {theme.display_name} (decimals: {theme.decimal_places})")


if __name__ == "__main__":
    app()
