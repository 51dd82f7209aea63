"""Serialisation of a specifications record to JSON, YAML and TOML."""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass

import tomli_w
import yaml

from .models import (
    GB,
    GIB,
    KIB,
    dimm_type_name,
    format_cache_size,
    format_capacity,
    format_clock_speed,
    format_disk_size,
    format_install_date,
    map_key,
)

KEY_STYLES = ("json", "yaml", "toml")

# Machine-readable counterparts of the display formatters.
_CONVERTERS = {
    format_clock_speed: lambda mhz: mhz / 1e3,
    format_cache_size: lambda kib: int(kib) // KIB,
    dimm_type_name: dimm_type_name,
    format_capacity: lambda size: int(size) // GIB,
    format_disk_size: lambda size: int(size) // GB,
    format_install_date: format_install_date,
}

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _key(spec, key_style):
    name = map_key(spec.metadata.get("key", spec.name))
    return name.lower() if key_style == "yaml" else name


def _convert(value, key_style):
    if is_dataclass(value) and not isinstance(value, type):
        return _record(value, key_style)
    if isinstance(value, list):
        return [_convert(item, key_style) for item in value]
    return value


def _record(data, key_style):
    out = {}
    for spec in fields(data):
        value = getattr(data, spec.name)
        converter = _CONVERTERS.get(spec.metadata.get("format"))
        out[_key(spec, key_style)] = (
            converter(value) if converter is not None else _convert(value, key_style)
        )
    return out


def to_dict(specs, key_style="json"):
    """Return ``specs`` as nested dictionaries keyed in the given style."""
    if key_style not in KEY_STYLES:
        raise ValueError(f"unknown key style {key_style!r}; expected one of {KEY_STYLES}")
    return _record(specs, key_style)


def to_json(specs):
    """Compact JSON with HTML-sensitive characters escaped."""
    text = json.dumps(to_dict(specs, "json"), ensure_ascii=False, separators=(",", ":"))
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def to_yaml(specs):
    """Block-style YAML with lower-case keys."""
    return yaml.safe_dump(
        to_dict(specs, "yaml"),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        indent=4,
    )


def to_toml(specs):
    """TOML document with one table per section."""
    return tomli_w.dumps(to_dict(specs, "toml"))