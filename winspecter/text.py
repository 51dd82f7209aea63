"""Plain-text renderings of a specifications table."""

from __future__ import annotations

from .table import specs_table

_PRETTY_WIDTH = 22
_FLAT_WIDTH = 28


def text_pretty(specs, delim=": "):
    """Indented, YAML-like listing; section rows end with the delimiter."""
    lines = []
    for key, value in specs_table(specs, True, 0):
        if value:
            lines.append(f"{key:<{_PRETTY_WIDTH}}{delim}{value}\n")
        else:
            lines.append(f"{key}{delim}\n")
    return "".join(lines)


def text_flat(specs, delim=": "):
    """One line per value with the prefixed key padded to a fixed width."""
    return "".join(
        f"{key:<{_FLAT_WIDTH}}{delim}{value}\n" for key, value in specs_table(specs, False, 0)
    )


def text_vcsv(specs, delim=",", quote='"'):
    """Transposed CSV: one quoted key/value pair per line."""
    return "".join(
        f"{quote}{key}{quote}{delim}{quote}{value}{quote}\n"
        for key, value in specs_table(specs, False, 0)
    )


def text_csv(specs, delim=",", quote='"'):
    """CSV with a header line of keys followed by a line of values."""
    rows = specs_table(specs, False, 0)
    if not rows:
        return ""
    out = []
    for column in zip(*rows):
        out.append(delim.join(f"{quote}{cell}{quote}" for cell in column) + "\n")
    return "".join(out)