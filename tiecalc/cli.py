"""tiecalc CLI entry point."""

import json
import logging
import sys
from pathlib import Path

import click

from tiecalc import __version__
from tiecalc.calculator import TieCalculator, TieReport
from tiecalc.views import DocumentView


def _load(path: Path) -> DocumentView:
    """Load a JSON fixture document, or any other score through music21."""
    if path.suffix.lower() == ".json":
        from tiecalc.document_loader import load_document

        return load_document(str(path))

    from tiecalc.music21_import import load_score

    return load_score(str(path))


def _format_report(report: TieReport) -> str:
    geometry = report.geometry
    kind = "start" if report.is_start_tie else "end  "
    return (
        f"  m{report.measure:<3} staff {report.staff} layer {report.layer}  "
        f"entry {report.entry_number:<4} note {report.note_index}  {kind}  "
        f"{geometry.direction.name.lower():<5} ({geometry.rule.value})  "
        f"{geometry.start_placement.name.lower()} -> {geometry.end_placement.name.lower()}  "
        f"[{geometry.start_code.name.lower()} | {geometry.end_code.name.lower()}]"
    )


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="tiecalc")
@click.option("--verbose", "-v", is_flag=True, help="Log every rule decision to stderr.")
def main(verbose: bool) -> None:
    """tiecalc — tie direction, placement and connection codes for notation documents."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s [%(name)s] %(message)s",
        )


# ── classify subcommand ────────────────────────────────────────────────────────

@main.command()
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--scroll-view",
    is_flag=True,
    help="Calculate for scroll view instead of page view (ignores system breaks).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format: a readable table or one JSON array.",
)
def classify(document_file: str, scroll_view: bool, output_format: str) -> None:
    """
    Calculate the geometry of every tie in a document.

    DOCUMENT_FILE is a .json document, or a MusicXML/MIDI file read with music21.

    \b
    Examples:
      tiecalc classify ties.json
      tiecalc classify score.musicxml --scroll-view
      tiecalc classify score.musicxml --format json > ties.json
    """
    try:
        document = _load(Path(document_file))
    except OSError as exc:
        click.echo(f"  ERROR: Could not read document — {exc}", err=True)
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"  ERROR: Invalid document — {exc}", err=True)
        sys.exit(1)

    calculator = TieCalculator(document.tie_prefs, for_page_view=not scroll_view)
    reports = calculator.analyze_document(document)

    if output_format.lower() == "json":
        click.echo(json.dumps([report.as_dict() for report in reports], indent=2))
        return

    view = "scroll view" if scroll_view else "page view"
    click.echo(f"tiecalc v{__version__}")
    click.echo(f"  Document : {document_file}")
    click.echo(f"  View     : {view}")
    click.echo()
    if not reports:
        click.echo("No ties found.")
        return
    click.echo(f"Found {len(reports)} tie(s):")
    for report in reports:
        click.echo(_format_report(report))
