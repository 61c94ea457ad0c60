"""gitlines CLI entry point."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from gitlines import __version__
from gitlines.conflict.annotator import annotate_text
from gitlines.conflict.regions import find_conflict_regions, resolve_conflicts
from gitlines.core.config import Config, ConfigError, load_config, merge_cli_args
from gitlines.diff.parser import ParseError, parse_diff, parse_diff_file
from gitlines.diff.patch import PatchError, format_patch, select_lines
from gitlines.diff.types import ParsedDiff
from gitlines.output import get_formatter

DEFAULT_CONFIG = """\
# gitlines configuration

settings:
  output_format: text   # text | json
  color: true
  line_numbers: true

conflicts:
  # Must match git's conflict-marker-size attribute
  marker_size: 7
"""


@click.group()
@click.version_option(version=__version__, prog_name="gitlines")
def cli() -> None:
    """gitlines - read git diffs and conflicted files line by line.

    Parses unified diffs into files, hunks and numbered lines, and finds
    conflict regions in working-tree files.
    """
    pass


def _common_options(func):
    """Options shared by commands that render output."""
    func = click.option("-v", "--verbose", is_flag=True, help="Verbose output.")(func)
    func = click.option(
        "-c",
        "--config",
        "config_path",
        type=click.Path(exists=True),
        default=None,
        help="Config file path (default: .gitlines.yaml).",
    )(func)
    func = click.option(
        "-o",
        "--output",
        "output_format",
        type=click.Choice(["text", "json"]),
        default=None,
        help="Output format (default: text).",
    )(func)
    func = click.option(
        "--color/--no-color",
        default=None,
        help="Colorize text output.",
    )(func)
    return func


@cli.command()
@click.argument("target", type=click.Path(exists=True, allow_dash=True), default="-")
@_common_options
@click.option(
    "--line-numbers/--no-line-numbers",
    default=None,
    help="Show the old/new line-number gutter.",
)
def show(
    target: str,
    verbose: bool,
    config_path: Optional[str],
    output_format: Optional[str],
    color: Optional[bool],
    line_numbers: Optional[bool],
) -> None:
    """Parse a diff and print its files, hunks and lines.

    TARGET is a patch file, or - (the default) to read from stdin,
    e.g. `git diff | gitlines show`.
    """
    _configure_logging(verbose)
    config = _load(config_path, output_format=output_format, color=color, line_numbers=line_numbers)
    diff = _read_diff(target)
    formatter = get_formatter(config.output_format, color=config.color, line_numbers=config.line_numbers)
    click.echo(formatter.format(diff))


@cli.command()
@click.argument("target", type=click.Path(exists=True, allow_dash=True), default="-")
@_common_options
def stat(
    target: str,
    verbose: bool,
    config_path: Optional[str],
    output_format: Optional[str],
    color: Optional[bool],
) -> None:
    """Print added/removed line counts per file."""
    _configure_logging(verbose)
    config = _load(config_path, output_format=output_format, color=color)
    diff = _read_diff(target)
    formatter = get_formatter(config.output_format, color=config.color)
    click.echo(formatter.format(diff, stat_only=True))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@_common_options
@click.option("--marker-size", type=click.IntRange(min=1), default=None, help="Conflict marker length (default: 7).")
def conflicts(
    file: str,
    verbose: bool,
    config_path: Optional[str],
    output_format: Optional[str],
    color: Optional[bool],
    marker_size: Optional[int],
) -> None:
    """List conflict regions in a working-tree FILE.

    Exits with status 1 when conflicts are found.
    """
    _configure_logging(verbose)
    config = _load(config_path, output_format=output_format, color=color, marker_size=marker_size)
    text = _read_text(file)
    file_diff = annotate_text(text, path=file, marker_size=config.conflicts.marker_size)
    regions = find_conflict_regions(file_diff)

    formatter = get_formatter(config.output_format, color=config.color)
    click.echo(formatter.format_conflicts(file, regions))
    if regions:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--ours", "side", flag_value="ours", help="Keep our side of every conflict.")
@click.option("--theirs", "side", flag_value="theirs", help="Keep their side of every conflict.")
@click.option("--both", "side", flag_value="both", help="Keep ours followed by theirs.")
@click.option("--in-place", is_flag=True, help="Rewrite FILE instead of printing.")
@click.option("-f", "--output-file", type=click.Path(dir_okay=False), default=None, help="Write result to file.")
@click.option("-c", "--config", "config_path", type=click.Path(exists=True), default=None, help="Config file path.")
@click.option("--marker-size", type=click.IntRange(min=1), default=None, help="Conflict marker length (default: 7).")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
def resolve(
    file: str,
    side: Optional[str],
    in_place: bool,
    output_file: Optional[str],
    config_path: Optional[str],
    marker_size: Optional[int],
    verbose: bool,
) -> None:
    """Resolve every conflict in FILE by keeping one side."""
    _configure_logging(verbose)
    if side is None:
        click.echo("Error: Must provide one of --ours, --theirs or --both", err=True)
        sys.exit(2)
    if in_place and output_file:
        click.echo("Error: --in-place and --output-file cannot be combined", err=True)
        sys.exit(2)

    config = _load(config_path, marker_size=marker_size)
    resolved = resolve_conflicts(_read_text(file), side, marker_size=config.conflicts.marker_size)

    destination = file if in_place else output_file
    if destination:
        _write_text(destination, resolved)
        click.echo(f"Resolved {file} using {side}", err=True)
    else:
        click.echo(resolved, nl=False)


@cli.command()
@click.argument("target", type=click.Path(exists=True, allow_dash=True))
@click.option("--file", "path", required=True, help="File in the diff to build a patch for.")
@click.option("--hunk", "hunk_numbers", type=click.IntRange(min=1), multiple=True, help="Hunk number, 1-based (repeatable).")
@click.option(
    "--line",
    "line_numbers",
    type=click.IntRange(min=1),
    multiple=True,
    help="Line position within the single chosen hunk, 1-based (repeatable).",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
def patch(
    target: str,
    path: str,
    hunk_numbers: tuple[int, ...],
    line_numbers: tuple[int, ...],
    verbose: bool,
) -> None:
    """Print a patch for chosen hunks of one file, for `git apply --cached`."""
    _configure_logging(verbose)
    diff = _read_diff(target)

    file_diff = diff.get_file(path)
    if file_diff is None:
        click.echo(f"Error: {path} is not part of the diff", err=True)
        sys.exit(2)

    hunks = list(file_diff.hunks)
    if hunk_numbers:
        missing = [n for n in hunk_numbers if n > len(hunks)]
        if missing:
            click.echo(f"Error: {path} has {len(hunks)} hunk(s), got {missing[0]}", err=True)
            sys.exit(2)
        hunks = [file_diff.hunks[n - 1] for n in sorted(set(hunk_numbers))]

    if line_numbers:
        if len(hunk_numbers) != 1:
            click.echo("Error: --line needs exactly one --hunk", err=True)
            sys.exit(2)
        hunks = [select_lines(hunks[0], [n - 1 for n in line_numbers])]

    try:
        click.echo(format_patch(file_diff, hunks), nl=False)
    except PatchError as e:
        click.echo(f"Patch error: {e}", err=True)
        sys.exit(3)


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing config file.",
)
def init(force: bool) -> None:
    """Create .gitlines.yaml config file."""
    config_path = Path(".gitlines.yaml")

    if config_path.exists() and not force:
        click.echo(
            "Config file already exists. Use --force to overwrite.", err=True
        )
        sys.exit(1)

    config_path.write_text(DEFAULT_CONFIG)
    click.echo(f"Created {config_path}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load(config_path: Optional[str], **cli_args) -> Config:
    """Load configuration and apply CLI overrides, exiting on bad config."""
    try:
        return merge_cli_args(load_config(config_path), **cli_args)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)


def _read_diff(target: str) -> ParsedDiff:
    if target == "-":
        return parse_diff(click.get_text_stream("stdin").read())
    try:
        return parse_diff_file(target)
    except (ParseError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(3)


def _read_text(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error: cannot read {path}: {e}", err=True)
        sys.exit(3)


def _write_text(path: str, text: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        click.echo(f"Error: cannot write {path}: {e}", err=True)
        sys.exit(3)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
