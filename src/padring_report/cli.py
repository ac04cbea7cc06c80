"""Rich-Click CLI for padring_report."""

from __future__ import annotations

import logging
from pathlib import Path

import rich_click as click
from rich.logging import RichHandler

click.rich_click.USE_RICH_MARKUP = True


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


@click.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--output-dir",
    type=click.Path(path_type=Path),
    default=Path("output"),
    show_default=True,
    help="Output directory for generated files.",
)
@click.option("--report/--no-report", default=True, show_default=True, help="Print and save an ASCII summary report.")
@click.option("--viz/--no-viz", default=False, show_default=True, help="Generate a 2D HTML view of the padring.")
@click.option("--open-browser", is_flag=True, default=False, show_default="False", help="Auto-open HTML after generation.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log every added cell and pin.")
def generate(
    config_file: Path,
    output_dir: Path,
    report: bool,
    viz: bool,
    open_browser: bool,
    verbose: bool,
) -> None:
    """Generate the padring pin assignment report from CONFIG_FILE."""
    from padring_report.config import build_ring, load_config
    from padring_report.lef_reader import load_library
    from padring_report.reporter import write_report

    _setup_logging(verbose)

    click.echo(f"Loading config: {config_file}")
    try:
        config = load_config(config_file)
        library, diagnostics = load_library(config.lef_files)
        ring = build_ring(config, library)
    except (ValueError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc

    if diagnostics:
        click.echo(f"Library built with {len(diagnostics)} diagnostic(s)")

    output_dir.mkdir(parents=True, exist_ok=True)
    report_path = output_dir / config.report_file
    click.echo(f"Writing pin assignment report: {report_path}")
    pin_report = write_report(ring, report_path)

    if report:
        from padring_report.reporter import generate_summary

        summary_text = generate_summary(library, pin_report, diagnostics)
        click.echo(summary_text)
        summary_path = output_dir / "padring_summary.txt"
        summary_path.write_text(summary_text + "\n")
        click.echo(f"Writing summary report: {summary_path}")

    if viz:
        from padring_report.visualize import render_ring

        viz_path = output_dir / "padring_view.html"
        click.echo(f"Rendering visualization: {viz_path}")
        render_ring(ring, viz_path, open_browser=open_browser)

    click.echo("Done!")


# Keep the public CLI symbol name unchanged for __main__/entry points.
app = generate
