"""
Dictionary classification CLI for polsalience.

Applies a keyword dictionary to a corpus table and writes the table back
with per-group counts, matched terms and the binary label.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

import click

from polsalience.config import load_config
from polsalience.detection import GroupClassifier, KeywordDictionary, create_default_dictionary
from polsalience.detection.group_classifier import group_totals
from polsalience.exceptions import SalienceError
from polsalience.preprocessing import documents_from_frame
from polsalience.storage import read_table, write_table

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Polsalience classification tool.

    Detect political actors in a corpus with a regex dictionary.
    """
    ctx.ensure_object(dict)

    ctx.obj["config"] = load_config(config_path=config) if config else load_config()

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _load_dictionary(path: str | Path | None) -> KeywordDictionary:
    if path is None:
        click.echo("Using built-in political actors dictionary")
        return create_default_dictionary()
    click.echo(f"Using dictionary from: {path}")
    return KeywordDictionary.load(path)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file path",
)
@click.option(
    "--dictionary",
    "-d",
    type=click.Path(exists=True),
    help="Dictionary file or directory (default: from config, else built-in)",
)
@click.option(
    "--workers",
    "-w",
    type=int,
    help="Number of worker threads (default: from config)",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "parquet", "csv"]),
    default="json",
    help="Output format (default: json)",
)
@click.pass_context
def run(
    ctx: click.Context,
    input_file: str,
    output: str | None,
    dictionary: str | None,
    workers: int | None,
    format: str,
) -> None:
    """Label every document in a corpus table.

    Example:
        polsalience-classify run data/corpus.csv -d configs/dictionaries -o data/output/labelled.csv -f csv
    """
    config = ctx.obj["config"]

    if dictionary is None and config.dictionary.path is not None:
        dictionary = str(config.dictionary.path)
    n_workers = workers if workers is not None else config.processing.n_workers

    if output is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = str(config.storage.output_path / f"classified_{timestamp}.{format}")

    click.echo(f"Loading data from: {input_file}")

    try:
        keyword_dictionary = _load_dictionary(dictionary)
        corpus = read_table(input_file)
        documents = documents_from_frame(
            corpus,
            id_column=config.corpus.id_column,
            text_column=config.corpus.text_column,
        )

        if not documents:
            click.echo("Error: No documents found in input file", err=True)
            sys.exit(1)

        click.echo(f"Found {len(documents)} documents to classify")

        classifier = GroupClassifier(keyword_dictionary)
        classifications = classifier.classify_batch(
            documents,
            n_workers=n_workers,
            show_progress=config.processing.show_progress,
        )
        labelled = classifier.to_frame(
            corpus,
            classifications,
            id_column=config.corpus.id_column,
            label_column=config.validation.automated_column,
        )

        positives = sum(c.label for c in classifications)
        click.echo(f"\nLabelled {positives} of {len(documents)} documents as mentioning actors")
        for group, total in group_totals(classifications).items():
            click.echo(f"  {group}: {total} matches")

        output_path = write_table(
            labelled,
            output,
            format=format,
            metadata={
                "source_file": input_file,
                "dictionary": dictionary or "built-in",
                "groups": keyword_dictionary.group_names,
            },
        )
        click.echo(f"Output saved to: {output_path}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Classification failed")
        sys.exit(1)


@cli.command()
@click.argument("dictionary", type=click.Path(exists=True))
@click.pass_context
def stats(ctx: click.Context, dictionary: str) -> None:
    """Show group and pattern counts for a dictionary.

    Validates every pattern while loading.
    """
    try:
        keyword_dictionary = KeywordDictionary.load(dictionary)
    except (SalienceError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Dictionary loading failed")
        sys.exit(1)

    dictionary_stats = keyword_dictionary.get_stats()

    click.echo(f"\n{'='*50}")
    click.echo(f"Dictionary: {dictionary}")
    click.echo(f"{'='*50}")
    click.echo(f"Groups: {dictionary_stats['groups']}")
    click.echo(f"Total patterns: {dictionary_stats['total_patterns']}")
    for group in keyword_dictionary.groups:
        click.echo(f"\n{group.name} ({len(group.patterns)} patterns):")
        for pattern in group.pattern_strings:
            click.echo(f"  {pattern}")
    click.echo(f"{'='*50}")


def main() -> None:
    """Main entry point for the classify CLI."""
    cli()


if __name__ == "__main__":
    main()
