"""Command-line reporter of a machine's specifications."""

from __future__ import annotations

import argparse
import sys

from .collector import CollectionError, collect, collect_product_key
from .html import VERSION
from .serial import to_json, to_toml, to_yaml
from .text import text_csv, text_flat, text_pretty, text_vcsv

ACTIONS = ("json", "yaml", "toml", "pretty", "print", "flat", "csv", "vcsv", "version")

_BOOL_FLAGS = {
    "json": "Print as JSON.",
    "yaml": "Print as YAML.",
    "toml": "Print as TOML.",
    "pretty": "Pretty print (YAML-like).",
    "print": "Alias for pretty print.",
    "flat": "Print as flat list.",
    "csv": "Print as CSV.",
    "vcsv": "Print as vertical/transposed CSV (headers in rows, instead of single row).",
    "version": "Print version.",
    "key": "Include Windows product key.",
}

_STRING_FLAGS = {
    "quote": ("Quote string for CSV.", '"'),
    "delim": ("CSV and VCSV column delimiter.", ","),
}

_HEADER = ("Winspecter - Win Specs Reporter", "Options:")
_FOOTER = ("Notes:\n", "  Use the launcher to generate HTML in current directory.")


class _UsageError(Exception):
    """Raised for command lines that cannot be parsed."""


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        raise _UsageError(message)


def _quoted(text):
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _usage():
    lines = [f"{line}\n\n" for line in _HEADER]
    names = sorted([*_BOOL_FLAGS, *_STRING_FLAGS])
    for name in names:
        if name in _STRING_FLAGS:
            text, default = _STRING_FLAGS[name]
            lines.append(f"  -{name} string\n    \t{text} (default {_quoted(default)})\n")
        else:
            lines.append(f"  -{name}\n    \t{_BOOL_FLAGS[name]}\n")
    lines.append("\n")
    lines.extend(f"{line}\n" for line in _FOOTER)
    return "".join(lines)


def build_parser():
    """Parser accepting options with one or two leading dashes."""
    parser = _Parser(prog="winspecter-cli", add_help=False, allow_abbrev=False)
    parser.add_argument("-h", "-help", "--help", dest="help", action="store_true")
    for name, text in _BOOL_FLAGS.items():
        parser.add_argument(f"-{name}", f"--{name}", dest=name, action="store_true", help=text)
    for name, (text, default) in _STRING_FLAGS.items():
        parser.add_argument(f"-{name}", f"--{name}", dest=name, default=default, help=text)
    parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    return parser


def _render(specs, action, delim, quote):
    if action == "json":
        return to_json(specs)
    if action == "yaml":
        return to_yaml(specs)
    if action == "toml":
        return to_toml(specs)
    if action in ("pretty", "print"):
        return text_pretty(specs, ": ")
    if action == "flat":
        return text_flat(specs, ": ")
    if action == "csv":
        return text_csv(specs, delim, quote)
    if action == "vcsv":
        return text_vcsv(specs, delim, quote)
    raise ValueError(f"unknown action {action!r}")


def main(argv=None):
    """Run the reporter and return the exit status."""
    try:
        args = build_parser().parse_args(sys.argv[1:] if argv is None else argv)
    except _UsageError as exc:
        print(exc, file=sys.stderr)
        sys.stderr.write(_usage())
        return 2

    if args.help:
        sys.stderr.write(_usage())
        return 0

    action = next((name for name in ACTIONS if getattr(args, name)), None)
    if action is None or args.args:
        sys.stderr.write(_usage())
        return 1

    if action == "version":
        print(f"Winspecter v{VERSION}")
        return 0

    try:
        specs = collect()
        if args.key:
            collect_product_key(specs)
        output = _render(specs, action, args.delim, args.quote)
    except (CollectionError, OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())