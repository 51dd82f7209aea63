"""HTML report of a specifications record."""

from __future__ import annotations

import re
import subprocess
from datetime import datetime
from html import escape
from pathlib import Path
from string import Template

from .table import specs_table

VERSION = "0.1"

SECTION_BEGIN, SECTION_END = "<section>", "</section>"
TABLE_BEGIN, TABLE_END = "  <table>", "  </table>"
TBODY_BEGIN, TBODY_END = "    <tbody>", "    </tbody>"
TR_BEGIN, TR_END = "      <tr>", "</tr>"
TD_BEGIN, TD_END = "<td>", "</td>"

_LEADING = re.compile(r"^\s+")
_LEVEL0 = re.compile(r"^\S")
_LEVEL2 = re.compile(r"^\s{4}\S")
_DOMAIN_USER = re.compile(r"([^\\]+)\\([^\\]+)")

_PAGE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Winspecter - $owner</title>
</head>
<body>
$body
<footer>Winspecter v$version &middot; $timestamp</footer>
</body>
</html>
"""
)


def html_body(specs):
    """Render the pretty table of ``specs`` as sections, headings and tables."""
    out = []
    table_begin_allowed = False

    for position, (key, value) in enumerate(specs_table(specs, True, 0)):
        if _LEVEL0.match(key):
            if position:
                out += [TABLE_END, SECTION_END]
            out += [SECTION_BEGIN, f"  <h1>{key}</h1>"]
            table_begin_allowed = True
            continue

        text = _LEADING.sub("", key)
        if not value:
            if not table_begin_allowed:
                out += [TBODY_END, TABLE_END]
                table_begin_allowed = True
            tag = "h3" if _LEVEL2.match(key) else "h2"
            out.append(f"  <{tag}>{text}</{tag}>")
        else:
            if table_begin_allowed:
                out += [TABLE_BEGIN, TBODY_BEGIN]
                table_begin_allowed = False
            out.append(f"{TR_BEGIN}{TD_BEGIN}{text}{TD_END}{TD_BEGIN}{value}{TD_END}{TR_END}")

    out += [TBODY_END, TABLE_END, SECTION_END]
    return "\n".join(out)


def _aware(timestamp):
    if timestamp is None:
        return datetime.now().astimezone()
    if timestamp.tzinfo is None:
        return timestamp.astimezone()
    return timestamp


def report_filename(username, timestamp):
    """Name of the report file: ``user@DOMAIN_<time>.html``."""
    owner = _DOMAIN_USER.sub(r"\2@\1", username)
    stamp = _aware(timestamp).strftime("%Y%m%dT%H%M%S%z")
    return f"{owner}_{stamp}.html"


def _page(specs, timestamp):
    return _PAGE.substitute(
        owner=escape(specs.current_user.username),
        body=html_body(specs),
        version=VERSION,
        timestamp=timestamp.strftime("%a, %d %b %Y %H:%M:%S UTC%z"),
    )


def write_html(specs, timestamp=None):
    """Write the report into the current directory and return its file name."""
    moment = _aware(timestamp)
    filename = report_filename(specs.current_user.username, moment)
    Path(filename).write_text(_page(specs, moment), encoding="utf-8")
    return filename


def open_html(filename):
    """Open the report with the default browser."""
    if not Path(filename).exists():
        raise FileNotFoundError(filename)
    subprocess.run(
        ["rundll32", "url.dll,FileProtocolHandler", str(filename)], check=True
    )