"""Flatten a specifications record into a two-column table."""

from __future__ import annotations

from dataclasses import fields, is_dataclass

from .models import map_key

_WIDTH = 2


def _pad(indent, text):
    return " " * indent + text


def specs_table(data, pretty, indent=0, label=""):
    """Return (key, value) rows describing ``data``.

    With ``pretty`` the keys are indented by nesting level and section rows
    with empty values are added; otherwise keys carry their parent's name
    as a prefix so the rows can be written as CSV.
    """
    rows = []
    if not is_dataclass(data) or isinstance(data, type):
        return rows

    base, prefix = indent, label
    for spec in fields(data):
        name = spec.metadata.get("key", spec.name)
        value = getattr(data, spec.name)

        if is_dataclass(value) and not isinstance(value, type):
            if pretty:
                indent = base
                rows.append((_pad(indent, name), ""))
                indent += _WIDTH
            else:
                indent, label = 0, name + " "
            rows.extend(specs_table(value, pretty, indent, label))

        elif isinstance(value, list):
            if pretty:
                label, indent = name, base
                rows.append((_pad(indent, label), ""))
            for position, item in enumerate(value):
                label = f"{type(item).__name__}{position}"
                if pretty:
                    indent = base + _WIDTH
                    rows.append((_pad(indent, label), ""))
                    indent, label = base + 2 * _WIDTH, ""
                else:
                    indent, label = base, label + " "
                rows.extend(specs_table(item, pretty, indent, label))

        else:
            formatter = spec.metadata.get("format", str)
            label = map_key(name) if pretty else prefix + map_key(name)
            rows.append((_pad(indent, label), formatter(value)))

    return rows