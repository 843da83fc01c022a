"""
Validation CLI for polsalience.

Provides commands for drawing coding samples, certifying inter-coder
reliability and scoring automated labels against a manual baseline.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import pandas as pd

from polsalience.config import load_config
from polsalience.exceptions import MissingColumnError
from polsalience.preprocessing import Document, documents_from_frame
from polsalience.storage import read_table, write_report, write_table
from polsalience.validation import (
    assess_reliability,
    confusion_counts,
    evaluate,
    ratings_matrix,
    sample_documents,
)
from polsalience.validation.annotation import annotations_from_frame, coding_sheet
from polsalience.validation.labels import LabelSource, labels_from_frame
from polsalience.validation.metrics import MetricResult
from polsalience.validation.sampling import split_reliability_and_baseline

logger = logging.getLogger(__name__)

DEFAULT_CODERS = ("coder_1",)


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
    """Polsalience validation tool.

    Certify manual coding and validate dictionary labels against it.
    """
    ctx.ensure_object(dict)

    ctx.obj["config"] = load_config(config_path=config) if config else load_config()

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _format_metric(result: MetricResult) -> str:
    if result.is_defined:
        return f"{result.value:.4f}"
    return f"undefined ({result.error})"


def _load_documents(config, input_file: str) -> list[Document]:
    corpus = read_table(input_file)
    return documents_from_frame(
        corpus, id_column=config.corpus.id_column, text_column=config.corpus.text_column
    )


def _sheet_ids(path: str, id_column: str) -> set:
    """Ids listed in an earlier corpus table or coding sheet."""
    frame = read_table(path)
    for column in (id_column, "id"):
        if column in frame.columns:
            return set(frame[column].tolist())
    raise MissingColumnError([id_column], available=list(frame.columns))


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Coding sheet output path (csv)",
)
@click.option(
    "--size",
    "-n",
    type=int,
    help="Number of documents to sample (default: baseline_sample_size from config)",
)
@click.option(
    "--seed",
    type=int,
    help="Random seed for reproducibility (default: from config)",
)
@click.option(
    "--exclude",
    "-x",
    type=click.Path(exists=True),
    multiple=True,
    help="Table(s) whose ids must not be sampled again (e.g. the intercoder batch)",
)
@click.option(
    "--coder",
    "-k",
    multiple=True,
    help="Coder id; repeat for several coders (default: coder_1)",
)
@click.pass_context
def sample(
    ctx: click.Context,
    input_file: str,
    output: str | None,
    size: int | None,
    seed: int | None,
    exclude: tuple[str, ...],
    coder: tuple[str, ...],
) -> None:
    """Draw a coding sheet from a corpus table.

    The sheet has one row per document and coder, in the long format that
    the reliability command reads.

    Example:
        polsalience-validate sample data/corpus.csv -n 100 -k alice -k bob -o data/annotations/intercoder.csv
    """
    config = ctx.obj["config"]
    size = size if size is not None else config.validation.baseline_sample_size
    seed = seed if seed is not None else config.validation.seed
    coders = coder or DEFAULT_CODERS

    if output is None:
        output = str(config.storage.annotation_path / f"sample_n{size}_seed{seed}.csv")

    try:
        documents = _load_documents(config, input_file)

        exclude_ids: set = set()
        for path in exclude:
            exclude_ids.update(_sheet_ids(path, config.corpus.id_column))

        chosen = sample_documents(documents, size, seed=seed, exclude_ids=exclude_ids)
        output_path = write_table(coding_sheet(chosen, coders), output, format="csv")

        click.echo(f"Sampled {len(chosen)} documents ({len(exclude_ids)} ids excluded)")
        click.echo(f"Coders: {', '.join(coders)}")
        click.echo(f"Coding sheet saved to: {output_path}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Sampling failed")
        sys.exit(1)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    help="Directory for both coding sheets (default: annotation_path from config)",
)
@click.option(
    "--reliability-size",
    type=int,
    help="Intercoder batch size (default: reliability_sample_size from config)",
)
@click.option(
    "--baseline-size",
    type=int,
    help="Baseline size (default: baseline_sample_size from config)",
)
@click.option(
    "--seed",
    type=int,
    help="Random seed for reproducibility (default: from config)",
)
@click.option(
    "--coder",
    "-k",
    multiple=True,
    help="Intercoder coder id; repeat for each coder (default: coder_1, coder_2)",
)
@click.pass_context
def split(
    ctx: click.Context,
    input_file: str,
    output_dir: str | None,
    reliability_size: int | None,
    baseline_size: int | None,
    seed: int | None,
    coder: tuple[str, ...],
) -> None:
    """Draw the intercoder batch and the validation baseline in one go.

    The two samples never share a document. The intercoder sheet goes to
    every coder for the reliability command; the baseline sheet has an
    empty manual label column for the metrics command.

    Example:
        polsalience-validate split data/corpus.csv -k alice -k bob -o data/annotations
    """
    config = ctx.obj["config"]
    reliability_size = (
        reliability_size if reliability_size is not None
        else config.validation.reliability_sample_size
    )
    baseline_size = (
        baseline_size if baseline_size is not None
        else config.validation.baseline_sample_size
    )
    seed = seed if seed is not None else config.validation.seed
    coders = coder or ("coder_1", "coder_2")
    directory = Path(output_dir) if output_dir else config.storage.annotation_path

    if len(coders) < 2:
        click.echo("Error: the intercoder batch needs at least two coders", err=True)
        sys.exit(1)

    try:
        documents = _load_documents(config, input_file)
        reliability_sample, baseline_sample = split_reliability_and_baseline(
            documents, reliability_size, baseline_size, seed=seed
        )

        intercoder_path = write_table(
            coding_sheet(reliability_sample, coders),
            directory / f"intercoder_n{reliability_size}_seed{seed}.csv",
            format="csv",
        )
        baseline_sheet = pd.DataFrame(
            {
                config.corpus.id_column: [d.id for d in baseline_sample],
                config.corpus.text_column: [d.raw_text for d in baseline_sample],
                config.validation.manual_column: None,
            }
        )
        baseline_path = write_table(
            baseline_sheet,
            directory / f"baseline_n{baseline_size}_seed{seed}.csv",
            format="csv",
        )

        click.echo(f"Intercoder batch: {len(reliability_sample)} documents x {len(coders)} coders")
        click.echo(f"  saved to: {intercoder_path}")
        click.echo(f"Baseline: {len(baseline_sample)} documents")
        click.echo(f"  saved to: {baseline_path}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Sampling failed")
        sys.exit(1)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "--item-column",
    default="id",
    help="Column with item ids (default: id)",
)
@click.option(
    "--coder-column",
    default="coder_id",
    help="Column with coder ids (default: coder_id)",
)
@click.option(
    "--value-column",
    default="value",
    help="Column with ratings (default: value)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Write the report as JSON to this path",
)
@click.pass_context
def reliability(
    ctx: click.Context,
    input_file: str,
    item_column: str,
    coder_column: str,
    value_column: str,
    output: str | None,
) -> None:
    """Compute inter-coder agreement from long-format annotations.

    Exits with status 2 when the batch fails the reliability thresholds.

    Example:
        polsalience-validate reliability data/annotations/intercoder_long.csv -o reports/reliability.json
    """
    config = ctx.obj["config"]

    try:
        frame = read_table(input_file)
        annotations = annotations_from_frame(
            frame,
            item_column=item_column,
            coder_column=coder_column,
            value_column=value_column,
        )
        matrix = ratings_matrix(annotations)
        report = assess_reliability(
            matrix,
            min_alpha=config.validation.min_alpha,
            min_kappa=config.validation.min_kappa,
        )
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Reliability computation failed")
        sys.exit(1)

    click.echo(f"\n{'='*50}")
    click.echo(f"Items: {report.n_items}  Coders: {report.n_coders}")
    click.echo(f"Krippendorff's alpha: {_format_metric(report.alpha)}")
    if report.kappa is not None:
        click.echo(f"Cohen's kappa: {_format_metric(report.kappa)}")
    click.echo(f"Percent agreement: {_format_metric(report.percent_agreement)}")
    click.echo(f"Reliability gate: {'PASSED' if report.passed else 'FAILED'}")
    click.echo(f"{'='*50}")

    if output:
        write_report(report.to_dict(), Path(output))
        click.echo(f"Report saved to: {output}")

    if not report.passed:
        sys.exit(2)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.option(
    "--manual-file",
    "-m",
    type=click.Path(exists=True),
    help="Separate table holding the manual labels (default: same table)",
)
@click.option(
    "--manual-column",
    help="Manual label column (default: from config)",
)
@click.option(
    "--automated-column",
    help="Automated label column (default: from config)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Write the report as JSON to this path",
)
@click.pass_context
def metrics(
    ctx: click.Context,
    input_file: str,
    manual_file: str | None,
    manual_column: str | None,
    automated_column: str | None,
    output: str | None,
) -> None:
    """Score automated labels against manual labels.

    Only documents labelled in both sources are compared.

    Example:
        polsalience-validate metrics data/output/classified.csv -m data/annotations/baseline.csv
    """
    config = ctx.obj["config"]
    id_column = config.corpus.id_column
    manual_column = manual_column or config.validation.manual_column
    automated_column = automated_column or config.validation.automated_column

    try:
        automated_frame = read_table(input_file)
        manual_frame = read_table(manual_file) if manual_file else automated_frame

        manual = labels_from_frame(manual_frame, manual_column, LabelSource.MANUAL, id_column)
        automated = labels_from_frame(
            automated_frame, automated_column, LabelSource.AUTOMATED, id_column
        )
        report = evaluate(confusion_counts(manual, automated))
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Validation failed")
        sys.exit(1)

    counts = report.counts
    click.echo(f"\n{'='*50}")
    click.echo(
        f"TP: {counts.true_positive}  FN: {counts.false_negative}  FP: {counts.false_positive}"
    )
    click.echo(f"Recall: {_format_metric(report.recall)}")
    click.echo(f"Precision: {_format_metric(report.precision)}")
    click.echo(f"F1: {_format_metric(report.f1)}")
    click.echo(f"{'='*50}")

    if output:
        write_report(report.to_dict(), Path(output))
        click.echo(f"Report saved to: {output}")


def main() -> None:
    """Main entry point for the validate CLI."""
    cli()


if __name__ == "__main__":
    main()
