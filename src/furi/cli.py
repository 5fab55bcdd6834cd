from __future__ import annotations

import argparse
import json
import os
import sys
from importlib import metadata
from pathlib import Path

from rich.console import Console
from rich.table import Table

import tomllib

from .analyzer import analyze, analyze_text
from .errors import AnalysisError
from .features import DictionaryKind
from .logging_utils import set_debug_logging
from .nlp import DICTIONARY_ENV, BackendConfig, NLPBackendUnavailableError, TokenizerBackend, create_backend
from .render import render_brackets, render_html
from .tokens import TokenAnnotation, serialize_annotations
from .tools import (
    MECAB_DICT_INDEX_ENV,
    UNIDIC_DIR_ENV,
    find_mecab_dict_index,
    get_unidic_dicdir,
    missing_user_dict_sources,
)


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("furi")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"furi {__version__}",
    )


def _add_backend_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-d",
        "--dictionary",
        choices=[kind.value for kind in DictionaryKind],
        help=(
            "Tokenizer dictionary: 'unidic' (MeCab via fugashi) or 'ipadic' (janome). "
            f"Defaults to ${DICTIONARY_ENV} or 'unidic'."
        ),
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print debug diagnostics (token counts, reading repairs) to stderr.",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Annotate Japanese text with furigana. Use `furi request` for the JSON boundary.",
    )
    _add_version_flag(ap)
    _add_backend_flags(ap)
    ap.add_argument(
        "text",
        nargs="+",
        help="Japanese text to annotate. Wrap the phrase in quotes if it contains spaces.",
    )
    ap.add_argument(
        "-u",
        "--user-dict",
        help="MeCab-format CSV file with additional dictionary entries.",
    )
    ap.add_argument(
        "-f",
        "--format",
        choices=["text", "html", "json", "table"],
        default="text",
        help="Output format (default: text, e.g. 食[タ]べた).",
    )
    ap.add_argument(
        "--hiragana",
        action="store_true",
        help="Render ruby in hiragana instead of katakana (text and html formats).",
    )
    return ap


def build_request_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description=(
            'Read a {"text": ..., "user_dict_csv": ...} JSON request and write the '
            "analysis response bytes to stdout."
        ),
    )
    _add_version_flag(ap)
    _add_backend_flags(ap)
    ap.add_argument(
        "-i",
        "--input",
        help="Request file to read (default: stdin).",
    )
    return ap


def build_tools_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="furi helper utilities")
    _add_version_flag(ap)
    subparsers = ap.add_subparsers(dest="tool_cmd")

    subparsers.add_parser(
        "unidic-status",
        help="Show the detected UniDic directory and whether it can compile user dictionaries.",
    )

    return ap


def _backend_from_args(args: argparse.Namespace) -> TokenizerBackend:
    try:
        config = BackendConfig.from_env()
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    if getattr(args, "dictionary", None):
        config.dictionary = DictionaryKind(args.dictionary)
    try:
        return create_backend(config)
    except NLPBackendUnavailableError as exc:
        raise SystemExit(str(exc)) from exc


def _print_table(annotations: list[TokenAnnotation]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Surface")
    table.add_column("Segments")
    for annotation in annotations:
        if annotation.is_gap:
            continue
        rendered = " ".join(
            f"{segment.text}({segment.ruby})" if segment.ruby else segment.text
            for segment in annotation.ruby_segments
        )
        table.add_row(annotation.surface, rendered)
    Console().print(table)


def _run_annotate(args: argparse.Namespace) -> int:
    set_debug_logging(bool(getattr(args, "debug", False)))
    text = " ".join(args.text)
    if not text.strip():
        raise SystemExit("No text provided for annotation.")
    user_dict_csv = None
    if args.user_dict:
        user_dict_path = Path(args.user_dict).expanduser()
        try:
            user_dict_csv = user_dict_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SystemExit(f"Cannot read user dictionary {user_dict_path}: {exc}") from exc

    backend = _backend_from_args(args)
    try:
        annotations = analyze_text(text, backend, user_dict_csv)
    except AnalysisError as exc:
        raise SystemExit(f"Error: {exc}") from exc

    if args.format == "json":
        print(json.dumps(serialize_annotations(annotations), ensure_ascii=False, indent=2))
    elif args.format == "html":
        print(render_html(annotations, hiragana=args.hiragana))
    elif args.format == "table":
        _print_table(annotations)
    else:
        print(render_brackets(annotations, hiragana=args.hiragana))
    return 0


def _run_request(args: argparse.Namespace) -> int:
    set_debug_logging(bool(getattr(args, "debug", False)))
    if args.input:
        input_path = Path(args.input).expanduser()
        try:
            payload = input_path.read_bytes()
        except OSError as exc:
            raise SystemExit(f"Cannot read request {input_path}: {exc}") from exc
    else:
        payload = sys.stdin.buffer.read()

    backend = _backend_from_args(args)
    response = analyze(payload, backend)
    sys.stdout.buffer.write(response)
    sys.stdout.buffer.flush()
    return 0


def _run_tools(args: argparse.Namespace) -> int:
    if not args.tool_cmd:
        raise SystemExit("A tools subcommand is required. Use --help for options.")

    if args.tool_cmd == "unidic-status":
        env_dir = os.environ.get(UNIDIC_DIR_ENV)
        if env_dir:
            print(f"{UNIDIC_DIR_ENV} is set to: {env_dir}")
        dicdir = get_unidic_dicdir()
        if dicdir is None:
            print("No UniDic dictionary detected. Install 'unidic-lite' or set FURI_UNIDIC_DIR.")
            return 1
        print(f"UniDic path: {dicdir}")
        binary = find_mecab_dict_index()
        missing = missing_user_dict_sources(dicdir)
        if binary is None:
            print(f"mecab-dict-index: not found (set {MECAB_DICT_INDEX_ENV})")
        else:
            print(f"mecab-dict-index: {binary}")
        if missing:
            print(f"User dictionaries unavailable; missing {', '.join(missing)}")
        elif binary is not None:
            print("User dictionaries: supported")
        return 0

    raise SystemExit(f"Unknown tools subcommand: {args.tool_cmd}")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "request":
        request_parser = build_request_parser()
        request_args = request_parser.parse_args(argv[1:])
        return _run_request(request_args)
    if argv and argv[0] == "tools":
        tools_parser = build_tools_parser()
        tools_args = tools_parser.parse_args(argv[1:])
        return _run_tools(tools_args)

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    return _run_annotate(args)


if __name__ == "__main__":
    raise SystemExit(main())
