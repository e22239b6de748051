"""deckpress command line entry point."""

import click

from deckpress.cli.common import ProgressPrinter, exit_with_message, write_json_output
from deckpress.cli.handlers import (
    handle_export_pdf,
    handle_export_zip,
    handle_formats,
    handle_import_list,
    handle_sets,
)
from deckpress.core.logging import setup_logging
from deckpress.pdf.layout import PRINT_FORMATS
from deckpress.result import Result


def _finish(result: Result, as_json: bool = False) -> dict:
    if not result["ok"]:
        raise click.ClickException(result["error"])
    if as_json:
        write_json_output(result["value"])
    return result["value"]


def _report_skipped(skipped: list) -> None:
    if skipped:
        click.echo(f"Skipped {len(skipped)}: {', '.join(skipped)}", err=True)


@click.group()
@click.option("--quiet", is_flag=True, help="Hide the progress line and informational logs.")
@click.pass_context
def cli(ctx: click.Context, quiet: bool) -> None:
    """Build printable proxy decks: import card lists, export images and PDFs."""
    setup_logging(quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["progress"] = None if quiet else ProgressPrinter()


@cli.command("import-list")
@click.argument("list_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", "deck_name", required=True, help="Name of the new deck.")
@click.option("--out", "out_path", required=True, help="Deck JSON file to write.")
@click.option("--set", "preferred_set", default=None, help="Preferred set code.")
@click.option("--no-tokens", is_flag=True, help="Do not attach tokens.")
@click.option("--timeout", type=float, default=None, help="Give up after N seconds.")
@click.pass_context
def import_list(ctx, list_path, deck_name, out_path, preferred_set, no_tokens, timeout):
    """Resolve a pasted card list into a deck file."""
    value = _finish(
        handle_import_list(
            list_path,
            deck_name,
            out_path,
            preferred_set=preferred_set,
            resolve_tokens=not no_tokens,
            on_progress=ctx.obj["progress"],
            timeout=timeout,
        )
    )
    click.echo(f"Saved {value['cards']} cards to {value['deck_path']}")
    if value["unresolved"]:
        click.echo("Not found:", err=True)
        for label in value["unresolved"]:
            click.echo(f"  - {label}", err=True)


@cli.command("export-zip")
@click.argument("deck_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--output-dir", default=None, help="Directory for the archive.")
@click.option("--timeout", type=float, default=None, help="Give up after N seconds.")
@click.pass_context
def export_zip(ctx, deck_path, output_dir, timeout):
    """Export every card image of a deck as a ZIP."""
    value = _finish(
        handle_export_zip(
            deck_path, output_dir=output_dir, on_progress=ctx.obj["progress"], timeout=timeout
        )
    )
    click.echo(f"Wrote {value['path']}")
    _report_skipped(value["skipped"])


@cli.command("export-pdf")
@click.argument("deck_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "format_id",
    type=click.Choice(sorted(PRINT_FORMATS)),
    default=None,
    help="Print grid (settings default if omitted).",
)
@click.option("--output-dir", default=None, help="Directory for the PDF.")
@click.option("--timeout", type=float, default=None, help="Give up after N seconds.")
@click.pass_context
def export_pdf(ctx, deck_path, format_id, output_dir, timeout):
    """Export a deck as a print-ready A4 PDF."""
    value = _finish(
        handle_export_pdf(
            deck_path,
            format_id=format_id,
            output_dir=output_dir,
            on_progress=ctx.obj["progress"],
            timeout=timeout,
        )
    )
    click.echo(f"Wrote {value['path']}")
    _report_skipped(value["skipped"])


@cli.command("formats")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON.")
def formats(as_json):
    """List the available print formats."""
    value = _finish(handle_formats(), as_json=as_json)
    if not as_json:
        for fmt in value:
            click.echo(f"{fmt['id']:<5} {fmt['label']:<16} {fmt['description']}")


@cli.command("sets")
@click.argument("query")
@click.option("--limit", type=int, default=20, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Print as JSON.")
def sets(query, limit, as_json):
    """Search sets by name or code, newest first."""
    value = _finish(handle_sets(query, limit=limit), as_json=as_json)
    if as_json:
        return
    if not value:
        exit_with_message(f"No sets match '{query}'.", code=1)
    for entry in value:
        click.echo(f"{entry['code']:<6} {entry['released_at'] or '':<11} {entry['name']}")


if __name__ == "__main__":
    cli()
