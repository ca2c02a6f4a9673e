"""Command-line interface for md2nb.

Usage::

    md2nb notes.md                  # writes ./notes.nb
    md2nb notes.md out/             # writes out/notes.nb
    md2nb notes.md book.nb --force  # overwrite an existing notebook
    md2nb notes.md -vv              # debug logging on stderr
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from md2nb import __version__
from md2nb.converter.md_to_nb import MarkdownToNotebookConverter
from md2nb.errors import InputError, Md2nbError, OutputError
from md2nb.observability import get_logger, set_level

NOTEBOOK_SUFFIX = ".nb"

_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

_log = get_logger("md2nb.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2nb",
        description="Convert a Markdown file to a Wolfram notebook.",
    )
    parser.add_argument(
        "input",
        help="Path to the Markdown file to convert.",
    )
    parser.add_argument(
        "output",
        nargs="?",
        help="Output notebook path or directory. Defaults to ./<input stem>.nb.",
    )
    parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite the output file if it already exists.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def resolve_output_path(input_path: Path, output: str | None) -> Path:
    """Work out where the notebook for *input_path* goes."""
    name = input_path.stem + NOTEBOOK_SUFFIX
    if output is None:
        return Path.cwd() / name
    output_path = Path(output)
    if output_path.is_dir():
        return output_path / name
    return output_path


def read_markdown(path: Path) -> str:
    """Read a UTF-8 Markdown source file."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise InputError(
            message=f"Cannot read {path}: {exc.strerror or exc}",
            context={"path": str(path)},
            cause=exc,
        ) from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InputError(
            message=f"{path} is not valid UTF-8 (byte offset {exc.start})",
            context={"path": str(path), "offset": exc.start},
            cause=exc,
        ) from exc


def write_notebook(path: Path, data: bytes, *, force: bool = False) -> None:
    """Write notebook bytes, refusing to replace a file unless *force*."""
    try:
        with path.open("wb" if force else "xb") as fh:
            fh.write(data)
    except FileExistsError as exc:
        raise OutputError(
            message=f"{path} already exists (use --force to overwrite)",
            context={"path": str(path)},
            cause=exc,
        ) from exc
    except OSError as exc:
        raise OutputError(
            message=f"Cannot write {path}: {exc.strerror or exc}",
            context={"path": str(path)},
            cause=exc,
        ) from exc


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    set_level(_VERBOSITY_LEVELS[min(args.verbose, len(_VERBOSITY_LEVELS) - 1)])

    input_path = Path(args.input)
    output_path = resolve_output_path(input_path, args.output)

    try:
        if output_path.exists() and not args.force:
            raise OutputError(
                message=f"{output_path} already exists (use --force to overwrite)",
                context={"path": str(output_path)},
            )
        markdown = read_markdown(input_path)
        result = MarkdownToNotebookConverter().convert(markdown)
        write_notebook(output_path, result.to_bytes(), force=args.force)
    except Md2nbError as exc:
        _log.debug(
            "conversion failed",
            extra={"extra_fields": {"code": exc.code, **exc.context}},
        )
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    _log.info(
        "notebook written",
        extra={"extra_fields": {"input": str(input_path), "output": str(output_path)}},
    )
    print(f"Converted: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
