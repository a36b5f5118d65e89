"""Command-line interface for refdedupe.

Provides CLI commands for reading, converting and deduplicating reference
libraries.
"""

import importlib.metadata
import pprint
import signal
import sys
import time
from contextlib import ExitStack
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

import click

if TYPE_CHECKING:
    from refdedupe.models import ReferenceRecord

__all__ = ["cli"]

try:
    __version__ = importlib.metadata.version("refdedupe")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development

# Output modes handled here rather than by a codec
DISPLAY_MODES = ("json", "inspect", "count")

# Conventional exit status for SIGINT
EXIT_CANCELLED = 130

_FILES_ARGUMENT = click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True),
)


def _fail(message: str, color: bool | None = None) -> NoReturn:
    click.secho(f"Error: {message}", fg="red", err=True, color=color)
    sys.exit(1)


def _resolve_output_mode(
    output: str | None,
    count: bool,
    json_flag: bool,
    output_file: str | None,
    verbose: bool,
) -> str:
    """Apply the ``-c``/``-j`` aliases and derive the mode from ``-f`` if needed.

    Raises
    ------
    click.UsageError
        If more than one alias is given, the mode is unknown or cannot be
        derived from the output path.
    """
    from refdedupe.codec import FORMATS, identify_format

    if count and json_flag:
        raise click.UsageError("Only one output mode can be used")

    if count:
        output = "count"
    elif json_flag:
        output = "json"

    if output is None and output_file:
        if verbose:
            click.secho(
                f'Determining output format from file path "{output_file}"', dim=True, err=True
            )
        output = identify_format(output_file)
        if output is None:
            raise click.UsageError("Unknown output file type. Specify using `-o <format>`")
        if verbose:
            click.secho(f'Using output format "{output}"', dim=True, err=True)

    if output is None:
        output = "json"

    if output not in DISPLAY_MODES and output not in FORMATS:
        raise click.UsageError(f'Invalid output mode "{output}"')

    return output


def _read_all(files: tuple[str, ...], verbose: bool) -> list["ReferenceRecord"]:
    """Read every file in argument order, with a progress bar when verbose."""
    from refdedupe.codec import load_file

    records: list[ReferenceRecord] = []
    with click.progressbar(
        files,
        label="Reading",
        file=sys.stderr,
        hidden=not verbose or len(files) < 2,
    ) as bar:
        for path in bar:
            file_records, result = load_file(path)
            records.extend(file_records)
            if verbose:
                for warning in result.warnings:
                    click.secho(f"{result.filename}: {warning}", fg="yellow", err=True)

    if verbose:
        click.echo(f"Read {len(records)} references from {len(files)} file(s)", err=True)
    return records


def _emit(
    records: list["ReferenceRecord"],
    mode: str,
    output_file: str | None,
    color: bool | None,
) -> None:
    """Write *records* in *mode* to *output_file* or stdout."""
    from refdedupe.codec import format_json, format_records, write_file, write_text

    if mode == "count":
        text = f"Found {click.style(str(len(records)), fg='cyan')} references\n"
    elif mode == "inspect":
        text = pprint.pformat([r.to_dict() for r in records], sort_dicts=False) + "\n"
    elif mode == "json":
        text = format_json(records)
    elif output_file:
        write_file(output_file, records, mode)
        return
    else:
        text = format_records(records, mode)

    if output_file:
        write_text(output_file, click.unstyle(text))
    else:
        click.echo(text, nl=False, color=color)


def _parse_weights(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, float]:
    """Parse repeated ``DIM=W`` options into a weight mapping."""
    weights: dict[str, float] = {}
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected DIM=WEIGHT, got {item!r}")
        try:
            weights[name.strip()] = float(raw)
        except ValueError:
            raise click.BadParameter(
                f"weight for {name.strip()} is not a number: {raw!r}"
            ) from None
    return weights


def _output_options(func: Any) -> Any:
    """Options shared by ``read`` and ``dedupe`` for choosing the output."""
    options = [
        click.option(
            "--output",
            "-o",
            "output",
            type=str,
            default=None,
            help=(
                "Output mode: json (default), inspect, count or a library format"
                " (ris, json). EndNote XML is not supported"
            ),
        ),
        click.option(
            "--count",
            "-c",
            "count",
            is_flag=True,
            help="Don't output references, just the count (sets -o count)",
        ),
        click.option(
            "--json",
            "-j",
            "json_flag",
            is_flag=True,
            help="Output valid JSON (sets -o json)",
        ),
        click.option(
            "--output-file",
            "-f",
            "output_file",
            type=click.Path(dir_okay=False, writable=True),
            default=None,
            help="Write output to a file instead of stdout (sets -o from the extension)",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable verbose output",
        ),
        click.option(
            "--no-color",
            is_flag=True,
            help="Force disable color",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="refdedupe")
def cli() -> None:
    """Find duplicate references in bibliographic libraries.

    Use 'refdedupe COMMAND --help' for command-specific help.
    """


@cli.command()
@_FILES_ARGUMENT
@_output_options
def read(
    files: tuple[str, ...],
    output: str | None,
    count: bool,
    json_flag: bool,
    output_file: str | None,
    verbose: bool,
    no_color: bool,
) -> None:
    """Read reference libraries and print or convert them.

    FILES are RIS (.ris) or JSON (.json) libraries; the format is detected
    from content. Records from all files are concatenated in order.

    Examples
    --------
        refdedupe read refs.ris
        refdedupe read a.ris b.ris -c
        refdedupe read refs.ris -f refs.json
    """
    from refdedupe.codec import CodecError

    color = False if no_color else None
    mode = _resolve_output_mode(output, count, json_flag, output_file, verbose)

    try:
        records = _read_all(files, verbose)
        _emit(records, mode, output_file, color)
    except CodecError as e:
        _fail(str(e), color)


@cli.command()
@_FILES_ARGUMENT
@click.option(
    "--policy",
    type=click.Choice(["count", "mark", "remove"]),
    default="count",
    show_default=True,
    help="What to do with duplicates",
)
@click.option(
    "--threshold",
    type=float,
    default=None,
    help="Minimum weighted score for a duplicate (default: 0.75)",
)
@click.option(
    "--weight",
    "weights",
    multiple=True,
    callback=_parse_weights,
    metavar="DIM=W",
    help="Override a field weight, e.g. --weight title=0.5 (repeatable)",
)
@click.option(
    "--year-tolerance",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Maximum year difference still scored as equal",
)
@click.option(
    "--blocking",
    type=click.Choice(["first_author_year", "title_prefix", "doi"]),
    default=None,
    help="Only compare records sharing this key (faster, may miss duplicates)",
)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=100,
    show_default=True,
    help="Comparisons between progress updates",
)
@click.option(
    "--audit-log",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Append JSONL audit events to this file",
)
@_output_options
def dedupe(
    files: tuple[str, ...],
    policy: str,
    threshold: float | None,
    weights: dict[str, float],
    year_tolerance: int,
    blocking: str | None,
    batch_size: int,
    audit_log: str | None,
    output: str | None,
    count: bool,
    json_flag: bool,
    output_file: str | None,
    verbose: bool,
    no_color: bool,
) -> None:
    """Find duplicate references in FILES and output the surviving records.

    With --policy count the records are output unchanged; mark writes
    "DUPE OF <id>" into each duplicate's caption; remove drops duplicates.
    Press Ctrl-C to stop early: the partial result is reported and the
    command exits with status 130.

    Examples
    --------
        refdedupe dedupe refs.ris -c
        refdedupe dedupe a.ris b.ris --policy remove -f clean.ris
        refdedupe dedupe refs.json --policy mark --weight abstract=0 --threshold 0.8
    """
    from refdedupe.audit import AuditLogger, generate_run_id, get_package_version
    from refdedupe.codec import CodecError
    from refdedupe.engine import (
        CancellationToken,
        DuplicatePairEvent,
        EndEvent,
        EngineConfig,
        InputError,
        ProgressEvent,
        compare,
    )

    color = False if no_color else None
    mode = _resolve_output_mode(output, count, json_flag, output_file, verbose)

    try:
        records = _read_all(files, verbose)
    except CodecError as e:
        _fail(str(e), color)

    config_kwargs: dict[str, Any] = {
        "weights": weights,
        "year_tolerance": year_tolerance,
        "blocking_key": blocking,
        "batch_size": batch_size,
        "resolution_policy": policy,
    }
    if threshold is not None:
        config_kwargs["threshold"] = threshold

    token = CancellationToken()
    result = None
    start = time.perf_counter()

    with ExitStack() as stack:
        logger = None
        if audit_log:
            logger = stack.enter_context(AuditLogger(generate_run_id(), Path(audit_log)))

        try:
            config = EngineConfig(**config_kwargs)
            if logger:
                logger.run_started(
                    command=sys.argv,
                    parameters={**config.to_dict(), "tool_version": get_package_version()},
                )
            events = compare(records, config, cancel_token=token, logger=logger)
        except InputError as e:
            if logger:
                logger.error(type(e).__name__, str(e))
                logger.run_finished("failed", time.perf_counter() - start)
            _fail(str(e), color)

        previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())
        stack.callback(signal.signal, signal.SIGINT, previous_handler)

        bar = None
        for event in events:
            if isinstance(event, ProgressEvent):
                if bar is None:
                    bar = stack.enter_context(
                        click.progressbar(
                            length=event.total,
                            label="Comparing",
                            file=sys.stderr,
                        )
                    )
                bar.update(event.completed - bar.pos)
            elif isinstance(event, DuplicatePairEvent):
                if verbose:
                    click.echo(
                        f"\n{event.later.label(event.later_index)} duplicates "
                        f"{event.earlier.label(event.earlier_index)}: {event.verdict.reason}",
                        err=True,
                    )
            elif isinstance(event, EndEvent):
                result = event.result

        if logger and result is not None:
            logger.run_finished(
                "cancelled" if result.cancelled else "success",
                time.perf_counter() - start,
                records_processed=len(records),
            )

    if result is None:
        _fail("comparison stopped without a final result", color)

    click.echo(
        f"Found {click.style(str(result.duplicates_found), fg='cyan')} duplicates "
        f"in {len(records)} references ({result.scorer_errors} scorer errors)",
        err=True,
        color=color,
    )

    if result.cancelled:
        click.secho(
            f"Cancelled after {result.comparisons_completed} of "
            f"{result.comparisons_total} comparisons",
            fg="yellow",
            err=True,
            color=color,
        )
        sys.exit(EXIT_CANCELLED)

    try:
        _emit(result.surviving_records, mode, output_file, color)
    except CodecError as e:
        _fail(str(e), color)


if __name__ == "__main__":
    cli()
