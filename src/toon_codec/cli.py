"""Command-line interface for the TOON codec."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .error_handler import ErrorHandler
from .profiler import PerformanceProfiler
from .toon_codec import ToonCodec
from .types import DecodeOptions, EncodeOptions, ToonError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )


def _read_input(input_file: Optional[Path]) -> bytes:
    if input_file is None:
        return click.get_binary_stream("stdin").read()
    return input_file.read_bytes()


def _write_output(output: Optional[Path], data: bytes) -> None:
    if output is None:
        stdout = click.get_binary_stream("stdout")
        stdout.write(data)
        stdout.flush()
    else:
        output.write_bytes(data)


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="toon")
def main():
    """TOON - A compact, lossless JSON encoding format."""
    pass


@main.command()
@click.argument('input_file', required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--out', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Output file (stdout if omitted)')
@click.option('--tabular-arrays', is_flag=True, help='Use tabular layout for uniform arrays of objects')
@click.option('--compact', is_flag=True, help='Use compact binary format')
@click.option('--indent', type=click.IntRange(0, 255), default=None, help='Indentation in spaces (default: 2)')
@click.option('--strict', is_flag=True, help='Fail when tabular layout cannot be applied')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def encode(input_file: Optional[Path], out: Optional[Path], tabular_arrays: bool,
           compact: bool, indent: Optional[int], strict: bool, verbose: bool):
    """Encode JSON (from INPUT_FILE or stdin) to TOON."""
    _configure_logging(verbose)
    logger = logging.getLogger("toon_codec.cli")
    error_handler = ErrorHandler(logger)

    raw = _read_input(input_file)
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        _fail(f"Failed to parse input JSON: {e}")

    options = EncodeOptions(
        tabular_arrays=tabular_arrays,
        compact=compact,
        indent=indent,
        strict=strict
    )

    profiler = PerformanceProfiler(logger)
    try:
        with profiler.profile_operation("encode", len(raw)) as session:
            encoded = ToonCodec(logger).encode(value, options)
            session.record_output(len(encoded))
    except ToonError as e:
        _fail(error_handler.format_error(e, "Failed to encode JSON to TOON"))

    _write_output(out, encoded)
    if verbose:
        click.echo(profiler.export_metrics("summary"), err=True)


@main.command()
@click.argument('input_file', required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--out', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Output file (stdout if omitted)')
@click.option('--compact', is_flag=True, help='Expect compact binary format (auto-detected otherwise)')
@click.option('--strict', is_flag=True, help='Fail on validation errors')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def decode(input_file: Optional[Path], out: Optional[Path], compact: bool,
           strict: bool, verbose: bool):
    """Decode TOON (from INPUT_FILE or stdin) to JSON."""
    _configure_logging(verbose)
    logger = logging.getLogger("toon_codec.cli")
    error_handler = ErrorHandler(logger)

    raw = _read_input(input_file)
    options = DecodeOptions(compact=compact, strict=strict)

    profiler = PerformanceProfiler(logger)
    try:
        with profiler.profile_operation("decode", len(raw)) as session:
            value = ToonCodec(logger).decode(raw, options)
            rendered = json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
            output = rendered.encode("utf-8")
            session.record_output(len(output))
    except ToonError as e:
        _fail(error_handler.format_error(e, "Failed to decode TOON to JSON"))

    _write_output(out, output)
    if verbose:
        click.echo(profiler.export_metrics("summary"), err=True)


if __name__ == '__main__':
    main()
