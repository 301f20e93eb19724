"""Command-line interface for asserttrace."""

from __future__ import annotations

import argparse
import sys

import orjson

from contract.errors import ResolveError
from diagnose.resolver import Resolver
from locate.call_site import find_calls


def _arg_index(value: str) -> int | str:
    try:
        return int(value)
    except ValueError:
        return value


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Python source file to inspect")
    parser.add_argument(
        "--function",
        required=True,
        help="Name of the called function (qualifiers are ignored)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asserttrace")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser(
        "inspect", help="Resolve the call covering a line and print its diagnostic"
    )
    _add_common_paths(inspect_parser)
    inspect_parser.add_argument("--line", type=int, required=True, help="1-based line")
    inspect_parser.add_argument(
        "--arg",
        dest="args",
        action="append",
        type=_arg_index,
        default=None,
        help="Argument index or keyword name (repeatable, default: 0)",
    )

    sites_parser = subparsers.add_parser(
        "sites", help="List every call to a function in a file"
    )
    _add_common_paths(sites_parser)

    return parser


def _write_json(payload: object) -> None:
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    sys.stdout.write(orjson.dumps(payload, option=opts).decode("utf-8") + "\n")


def _handle_inspect(
    resolver: Resolver, file: str, function: str, line: int, args: list[int | str]
) -> int:
    diagnostic = resolver.resolve_at(file, line, function, args)
    _write_json(diagnostic.model_dump())
    return 0 if diagnostic.found else 1


def _handle_sites(resolver: Resolver, file: str, function: str) -> int:
    source = resolver.cache.parse(file)
    calls = find_calls(source, function)
    _write_json(
        [
            {
                "start_line": call.lineno,
                "end_line": call.end_lineno,
                "source": source.segment(call),
            }
            for call in calls
        ]
    )
    return 0 if calls else 1


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    resolver = Resolver()

    try:
        if args.command == "inspect":
            return _handle_inspect(
                resolver, args.file, args.function, args.line, args.args or [0]
            )

        if args.command == "sites":
            return _handle_sites(resolver, args.file, args.function)
    except ResolveError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
